"""Workstreams API routes.

Verticals are public reference data. Templates are admin-only. Clients read
their own org's workstreams and entries; every write is admin-only.
"""
from flask import jsonify, request
from flask_login import current_user

from . import workstreams_bp
from .repositories import (
    VerticalRepository, TemplateRepository, WorkstreamRepository, EntryRepository,
)
from .rollup import rollup_entries, overall_status, rollup_totals
from .validators import clean_template, clean_workstream, clean_entry, validate_timing
from core.auth import permissions
from core.auth.repositories import ActivityRepository
from core.utils.api_helpers import (
    api_login_required, admin_required, arg_bool,
    error_response, get_json_or_error, safe_error_response,
)

_vertical_repo = VerticalRepository()
_template_repo = TemplateRepository()
_workstream_repo = WorkstreamRepository()
_entry_repo = EntryRepository()
_activity_repo = ActivityRepository()


def _client_can_see(workstream_id):
    """Non-clients see everything; clients only workstreams of their org."""
    if not permissions.is_client(current_user):
        return True
    org_id = _workstream_repo.get_org_id(workstream_id)
    return bool(org_id) and org_id == current_user.org_id


# ============== VERTICALS ==============

@workstreams_bp.route('/api/workstream-verticals')
def api_list_verticals():
    try:
        verticals = _vertical_repo.list_all()
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'verticals': verticals})


# ============== TEMPLATES ==============

@workstreams_bp.route('/api/workstreams')
@admin_required
def api_list_templates():
    try:
        templates = _template_repo.list_templates(
            vertical_id=request.args.get('vertical_id') or None,
            timing=validate_timing(request.args.get('timing') or None),
            is_active=arg_bool('is_active', None),
            search=(request.args.get('search') or '').strip() or None,
        )
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'templates': templates})


@workstreams_bp.route('/api/workstreams/<template_id>')
@admin_required
def api_get_template(template_id):
    template = _template_repo.get_by_id(template_id)
    if not template:
        return error_response('Template not found', 404)
    return jsonify({'success': True, 'template': template})


@workstreams_bp.route('/api/workstreams', methods=['POST'])
@admin_required
def api_create_template():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        template = _template_repo.create(clean_template(data), current_user.id)
    except Exception as e:
        return safe_error_response(e)
    _activity_repo.try_log('workstream_template_created', current_user.id,
                           resource_type='workstream_template', resource_id=template['id'],
                           details={'template_name': template['name']})
    return jsonify({'success': True, 'template': template}), 201


@workstreams_bp.route('/api/workstreams/<template_id>', methods=['PATCH'])
@admin_required
def api_update_template(template_id):
    data, error = get_json_or_error()
    if error:
        return error
    try:
        template = _template_repo.update(template_id, clean_template(data, partial=True))
    except Exception as e:
        return safe_error_response(e)
    if not template:
        return error_response('Template not found', 404)
    _activity_repo.try_log('workstream_template_updated', current_user.id,
                           resource_type='workstream_template', resource_id=template_id,
                           details={'template_name': template['name']})
    return jsonify({'success': True, 'template': template})


@workstreams_bp.route('/api/workstreams/<template_id>', methods=['DELETE'])
@admin_required
def api_delete_template(template_id):
    try:
        template = _template_repo.deactivate(template_id)
    except Exception as e:
        return safe_error_response(e)
    if not template:
        return error_response('Template not found', 404)
    _activity_repo.try_log('workstream_template_deleted', current_user.id,
                           resource_type='workstream_template', resource_id=template_id,
                           details={'template_name': template['name']})
    return jsonify({'success': True, 'message': 'Template deleted successfully'})


# ============== CLIENT WORKSTREAMS ==============

@workstreams_bp.route('/api/client-workstreams')
@api_login_required
def api_list_workstreams():
    if permissions.is_client(current_user):
        if not current_user.org_id:
            return jsonify({'success': True, 'workstreams': []})
        org_id = current_user.org_id
    else:
        org_id = request.args.get('org_id') or None
    try:
        workstreams = _workstream_repo.list_workstreams(org_id, arg_bool('is_active', None))
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'workstreams': workstreams})


@workstreams_bp.route('/api/client-workstreams/<workstream_id>')
@api_login_required
def api_get_workstream(workstream_id):
    workstream = _workstream_repo.get_by_id(workstream_id)
    if not workstream or (permissions.is_client(current_user)
                          and workstream['org_id'] != current_user.org_id):
        return error_response('Workstream not found', 404)
    return jsonify({'success': True, 'workstream': workstream})


@workstreams_bp.route('/api/client-workstreams', methods=['POST'])
@admin_required
def api_create_workstream():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        fields = clean_workstream(data)
        if _workstream_repo.find_active(fields['org_id'], fields['name']):
            return error_response('This workstream already exists for the client', 400)
        workstream = _workstream_repo.create(fields, current_user.id)
    except Exception as e:
        return safe_error_response(e)
    _activity_repo.try_log('workstream_created', current_user.id, org_id=fields['org_id'],
                           resource_type='client_workstream', resource_id=workstream['id'],
                           details={'name': fields['name']})
    return jsonify({'success': True, 'workstream': workstream}), 201


@workstreams_bp.route('/api/client-workstreams/<workstream_id>', methods=['PATCH'])
@admin_required
def api_update_workstream(workstream_id):
    data, error = get_json_or_error()
    if error:
        return error
    try:
        fields = clean_workstream(data, partial=True)
        workstream = _workstream_repo.update(workstream_id, fields)
    except Exception as e:
        return safe_error_response(e)
    if not workstream:
        return error_response('Workstream not found', 404)
    _activity_repo.try_log('workstream_updated', current_user.id, org_id=workstream['org_id'],
                           resource_type='client_workstream', resource_id=workstream_id,
                           details={'changes': sorted(fields)})
    return jsonify({'success': True, 'workstream': workstream})


@workstreams_bp.route('/api/client-workstreams/<workstream_id>', methods=['DELETE'])
@admin_required
def api_delete_workstream(workstream_id):
    try:
        workstream = _workstream_repo.deactivate(workstream_id)
    except Exception as e:
        return safe_error_response(e)
    if not workstream:
        return error_response('Workstream not found', 404)
    _activity_repo.try_log('workstream_removed', current_user.id, org_id=workstream['org_id'],
                           resource_type='client_workstream', resource_id=workstream_id)
    return jsonify({'success': True, 'message': 'Workstream removed successfully'})


# ============== ENTRIES ==============

@workstreams_bp.route('/api/workstream-entries/rollup')
@api_login_required
def api_entries_rollup():
    """Per-vertical status rollups, overall status and totals for one workstream."""
    workstream_id = request.args.get('workstream_id')
    if not workstream_id:
        return error_response('Workstream ID is required', 400)
    try:
        if not _client_can_see(workstream_id):
            return error_response('Workstream not found', 404)
        entries = _entry_repo.list_entries(workstream_id=workstream_id, is_active=True)
    except Exception as e:
        return safe_error_response(e)

    rollups = rollup_entries(entries)
    return jsonify({
        'success': True,
        'workstream_id': workstream_id,
        'vertical_rollups': rollups,
        'overall_status': overall_status(rollups),
        'totals': rollup_totals(rollups),
    })


@workstreams_bp.route('/api/workstream-entries')
@api_login_required
def api_list_entries():
    workstream_id = request.args.get('workstream_id') or None
    try:
        if permissions.is_client(current_user):
            if not workstream_id or not _client_can_see(workstream_id):
                return jsonify({'success': True, 'entries': []})
        entries = _entry_repo.list_entries(
            workstream_id=workstream_id,
            vertical_id=request.args.get('vertical_id') or None,
            status=request.args.get('status') or None,
            point_person_id=request.args.get('point_person_id') or None,
            is_active=arg_bool('is_active', True),
        )
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'entries': entries})


@workstreams_bp.route('/api/workstream-entries/<entry_id>')
@api_login_required
def api_get_entry(entry_id):
    entry = _entry_repo.get_by_id(entry_id)
    if not entry or (permissions.is_client(current_user)
                     and entry['workstream']['org_id'] != current_user.org_id):
        return error_response('Entry not found', 404)
    return jsonify({'success': True, 'entry': entry})


@workstreams_bp.route('/api/workstream-entries', methods=['POST'])
@admin_required
def api_create_entry():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        fields = clean_entry(data)
        entry = _entry_repo.create(fields)
    except Exception as e:
        return safe_error_response(e)
    _activity_repo.try_log('workstream_entry_created', current_user.id,
                           resource_type='workstream_entry', resource_id=entry['id'],
                           details={'workstream_id': fields['workstream_id'], 'name': fields['name']})
    return jsonify({'success': True, 'entry': entry}), 201


@workstreams_bp.route('/api/workstream-entries/bulk', methods=['POST'])
@admin_required
def api_bulk_create_entries():
    """Stamp entries from templates: ``{workstream_id, template_ids: [...]}``."""
    data, error = get_json_or_error()
    if error:
        return error
    workstream_id = data.get('workstream_id')
    template_ids = data.get('template_ids')
    if not workstream_id:
        return error_response('Workstream ID is required', 400)
    if not isinstance(template_ids, list) or not template_ids:
        return error_response('At least one template must be selected', 400)

    try:
        if not _workstream_repo.get_org_id(workstream_id):
            return error_response('Workstream not found', 404)
        templates = _template_repo.get_many(template_ids)
        if not templates:
            return error_response('Templates not found', 404)
        entries = _entry_repo.create_from_templates(workstream_id, templates)
    except Exception as e:
        return safe_error_response(e)

    _activity_repo.try_log('workstream_entries_bulk_created', current_user.id,
                           resource_type='workstream_entry', details={
                               'workstream_id': workstream_id,
                               'template_ids': template_ids,
                               'count': len(entries),
                           })
    return jsonify({'success': True, 'entries': entries}), 201


@workstreams_bp.route('/api/workstream-entries/<entry_id>', methods=['PATCH'])
@admin_required
def api_update_entry(entry_id):
    data, error = get_json_or_error()
    if error:
        return error
    try:
        fields = clean_entry(data, partial=True)
        entry = _entry_repo.update(entry_id, fields)
    except Exception as e:
        return safe_error_response(e)
    if not entry:
        return error_response('Entry not found', 404)
    _activity_repo.try_log('workstream_entry_updated', current_user.id,
                           resource_type='workstream_entry', resource_id=entry_id,
                           details={'changes': sorted(fields)})
    return jsonify({'success': True, 'entry': entry})


@workstreams_bp.route('/api/workstream-entries/<entry_id>', methods=['DELETE'])
@admin_required
def api_delete_entry(entry_id):
    try:
        entry = _entry_repo.deactivate(entry_id)
    except Exception as e:
        return safe_error_response(e)
    if not entry:
        return error_response('Entry not found', 404)
    _activity_repo.try_log('workstream_entry_deleted', current_user.id,
                           resource_type='workstream_entry', resource_id=entry_id,
                           details={'workstream_id': entry['workstream_id'], 'name': entry['name']})
    return jsonify({'success': True, 'message': 'Entry deleted successfully'})
