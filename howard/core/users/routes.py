"""User administration routes."""
from flask import jsonify
from flask_login import current_user

from . import users_bp
from .services.user_service import UserService
from core.auth.repositories import ProfileRepository
from core.auth.services import AuthService
from core.auth.session import forget_profile
from core.utils.api_helpers import (
    api_login_required, admin_required, error_response, get_json_or_error, safe_error_response,
)

_profile_repo = ProfileRepository()
_user_service = UserService()
_auth_service = AuthService()


@users_bp.route('/api/users')
@api_login_required
def api_list_users():
    """Team roles see every profile; clients only their own organization."""
    try:
        if current_user.is_team:
            users = _profile_repo.list_all()
        elif current_user.org_id:
            users = _profile_repo.list_all(org_id=current_user.org_id)
        else:
            users = []
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'users': users})


@users_bp.route('/api/users/clients')
@admin_required
def api_list_clients():
    """Client users of other organizations, grouped by organization name."""
    try:
        result = _user_service.list_clients(current_user.org_id)
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, **result})


@users_bp.route('/api/users/invite', methods=['POST'])
@admin_required
def api_invite_user():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        result = _user_service.invite(
            current_user,
            data.get('email'),
            data.get('fullName') or data.get('full_name'),
            data.get('role'),
            data.get('orgId') or data.get('org_id'),
        )
    except Exception as e:
        return safe_error_response(e)
    if not result.success:
        return error_response(result.error, result.status_code)
    return jsonify({'success': True, 'message': 'Invitation sent successfully', **result.data}), 201


@users_bp.route('/api/users/<user_id>', methods=['PATCH'])
@api_login_required
def api_update_user(user_id):
    data, error = get_json_or_error()
    if error:
        return error
    try:
        result = _user_service.update_profile(current_user, user_id, data)
    except Exception as e:
        return safe_error_response(e)
    if not result.success:
        return error_response(result.error, result.status_code)
    forget_profile(user_id)
    return jsonify({'success': True, **result.data})


@users_bp.route('/api/users/<user_id>/magic-link', methods=['POST'])
@admin_required
def api_send_user_magic_link(user_id):
    result = _auth_service.send_magic_link_to(user_id)
    if not result.success:
        return error_response(result.error, result.status_code)
    return jsonify({'success': True, 'message': f"Magic link sent to {result.profile['email']}"})
