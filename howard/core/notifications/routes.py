"""Notification center and notification preference routes."""
from flask import jsonify, request
from flask_login import current_user

from . import notifications_bp
from .repositories import InAppNotificationRepository, NotificationPreferencesRepository
from .repositories.preferences_repo import PREFERENCE_FIELDS
from core.utils.api_helpers import (
    api_login_required, error_response, get_json_or_error, safe_error_response, arg_bool,
)

_in_app_repo = InAppNotificationRepository()
_prefs_repo = NotificationPreferencesRepository()


# ============== NOTIFICATION CENTER ==============

@notifications_bp.route('/api/notifications')
@api_login_required
def api_list_notifications():
    limit = min(request.args.get('limit', 20, type=int), 100)
    offset = request.args.get('offset', 0, type=int)
    try:
        items = _in_app_repo.get_for_user(current_user.id, limit=limit, offset=offset,
                                          unread_only=arg_bool('unread_only', False))
        unread = _in_app_repo.get_unread_count(current_user.id)
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'notifications': items, 'unread_count': unread})


@notifications_bp.route('/api/notifications/unread-count')
@api_login_required
def api_unread_count():
    return jsonify({'success': True, 'count': _in_app_repo.get_unread_count(current_user.id)})


@notifications_bp.route('/api/notifications/<notification_id>/read', methods=['POST'])
@api_login_required
def api_mark_read(notification_id):
    if not _in_app_repo.mark_read(notification_id, current_user.id):
        return error_response('Notification not found', 404)
    return jsonify({'success': True})


@notifications_bp.route('/api/notifications/read-all', methods=['POST'])
@api_login_required
def api_mark_all_read():
    count = _in_app_repo.mark_all_read(current_user.id)
    return jsonify({'success': True, 'updated': count})


# ============== PREFERENCES ==============

@notifications_bp.route('/api/notification-preferences')
@api_login_required
def api_get_preferences():
    try:
        prefs = _prefs_repo.get(current_user.id)
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'preferences': prefs})


@notifications_bp.route('/api/notification-preferences', methods=['PATCH'])
@api_login_required
def api_update_preferences():
    data, error = get_json_or_error()
    if error:
        return error

    updates = {f: data[f] for f in PREFERENCE_FIELDS if isinstance(data.get(f), bool)}
    if not updates:
        return error_response('No valid preference fields provided', 400)

    try:
        prefs = _prefs_repo.upsert(current_user.id, updates)
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'preferences': prefs})
