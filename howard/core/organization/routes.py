"""Organization module API routes.

Organization CRUD, client dashboard URL, and user <-> org memberships.
"""
from flask import jsonify, request
from flask_login import current_user

from . import org_bp
from .repositories import OrganizationRepository, MembershipRepository
from core.auth.repositories import ProfileRepository, ActivityRepository
from core.auth.session import forget_profile
from core.utils.api_helpers import (
    api_login_required, admin_required, admin_or_manager_required,
    error_response, get_json_or_error, safe_error_response,
)

_org_repo = OrganizationRepository()
_membership_repo = MembershipRepository()
_profile_repo = ProfileRepository()
_activity_repo = ActivityRepository()


def _visible_org_ids(profile):
    """Org ids a client may see; None means unrestricted."""
    if profile.is_team:
        return None
    ids = set(profile.allowed_org_ids)
    if profile.org_id:
        ids.add(profile.org_id)
    ids.update(_membership_repo.org_ids_for_user(profile.id))
    return sorted(ids)


# ============== ORGANIZATIONS ==============

@org_bp.route('/api/organizations')
@api_login_required
def api_list_organizations():
    try:
        orgs = _org_repo.get_all(_visible_org_ids(current_user))
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'organizations': orgs})


@org_bp.route('/api/organizations/<org_id>')
@api_login_required
def api_get_organization(org_id):
    visible = _visible_org_ids(current_user)
    if visible is not None and org_id not in visible:
        return error_response('Organization not found', 404)
    org = _org_repo.get_by_id(org_id)
    if not org:
        return error_response('Organization not found', 404)
    return jsonify({'success': True, 'organization': org})


@org_bp.route('/api/organizations', methods=['POST'])
@admin_or_manager_required
def api_create_organization():
    data, error = get_json_or_error()
    if error:
        return error

    name = (data.get('name') or '').strip()
    if not name:
        return error_response('Organization name is required', 400)
    if len(name) > 200:
        return error_response('Organization name must be 200 characters or less', 400)

    try:
        org = _org_repo.create(name, data.get('slug'), data.get('logo_url'))
    except Exception as e:
        return safe_error_response(e)

    _activity_repo.try_log('organization_created', current_user.id, org_id=org['id'],
                           resource_type='organization', resource_id=org['id'],
                           details={'name': name})
    return jsonify({'success': True, 'organization': org}), 201


@org_bp.route('/api/organizations/<org_id>', methods=['PATCH'])
@admin_or_manager_required
def api_update_organization(org_id):
    data, error = get_json_or_error()
    if error:
        return error
    if 'name' in data and not (data.get('name') or '').strip():
        return error_response('Organization name cannot be empty', 400)

    try:
        org = _org_repo.update(org_id, data)
    except Exception as e:
        return safe_error_response(e)
    if org is None:
        if not _org_repo.get_by_id(org_id):
            return error_response('Organization not found', 404)
        return error_response('No valid fields to update', 400)
    return jsonify({'success': True, 'organization': org})


@org_bp.route('/api/organizations/<org_id>', methods=['DELETE'])
@admin_required
def api_delete_organization(org_id):
    try:
        if not _org_repo.delete(org_id):
            return error_response('Organization not found', 404)
    except Exception as e:
        return safe_error_response(e)
    _activity_repo.try_log('organization_deleted', current_user.id,
                           resource_type='organization', resource_id=org_id)
    return jsonify({'success': True})


@org_bp.route('/api/organizations/<org_id>/dashboard-url', methods=['PATCH'])
@admin_or_manager_required
def api_update_dashboard_url(org_id):
    """Point every client of the org at the same embedded dashboard."""
    data, error = get_json_or_error()
    if error:
        return error

    url = (data.get('dashboardUrl') or data.get('dashboard_url') or '').strip() or None
    if url and not url.startswith(('https://', 'http://')):
        return error_response('Dashboard URL must be an http(s) URL', 400)

    try:
        updated = _profile_repo.set_dashboard_url_for_org_clients(org_id, url)
    except Exception as e:
        return safe_error_response(e)
    return jsonify({
        'success': True,
        'updated': updated,
        'message': 'Dashboard URL updated for all clients in organization',
    })


# ============== MEMBERSHIPS ==============

@org_bp.route('/api/user-organizations')
@admin_or_manager_required
def api_list_memberships():
    user_id = request.args.get('userId')
    org_id = request.args.get('orgId')
    try:
        if user_id:
            memberships = _membership_repo.list_for_user(user_id)
        elif org_id:
            memberships = _membership_repo.list_for_org(org_id)
        else:
            return error_response('userId or orgId parameter required', 400)
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'memberships': memberships})


@org_bp.route('/api/user-organizations', methods=['POST'])
@admin_or_manager_required
def api_create_membership():
    data, error = get_json_or_error()
    if error:
        return error
    user_id, org_id = data.get('user_id'), data.get('org_id')
    if not user_id or not org_id:
        return error_response('user_id and org_id are required', 400)

    try:
        membership = _membership_repo.upsert(user_id, org_id, bool(data.get('is_primary')))
    except Exception as e:
        return safe_error_response(e)
    forget_profile(user_id)
    return jsonify({'success': True, 'membership': membership}), 201


@org_bp.route('/api/user-organizations/<membership_id>', methods=['PATCH'])
@admin_or_manager_required
def api_update_membership(membership_id):
    data, error = get_json_or_error()
    if error:
        return error
    try:
        membership = _membership_repo.set_primary(membership_id, bool(data.get('is_primary')))
    except Exception as e:
        return safe_error_response(e)
    if not membership:
        return error_response('Membership not found', 404)
    return jsonify({'success': True, 'membership': membership})


@org_bp.route('/api/user-organizations', methods=['DELETE'])
@org_bp.route('/api/user-organizations/<membership_id>', methods=['DELETE'])
@admin_or_manager_required
def api_delete_membership(membership_id=None):
    membership_id = membership_id or request.args.get('id')
    user_id, org_id = request.args.get('userId'), request.args.get('orgId')
    try:
        if membership_id:
            _membership_repo.delete(membership_id)
        elif user_id and org_id:
            _membership_repo.delete_for_user_org(user_id, org_id)
        else:
            return error_response('id or userId+orgId parameters required', 400)
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'message': 'Membership removed successfully'})
