"""Auth routes: sign-in callback, session, current user, passwords, magic links."""
import logging

from flask import jsonify, request, redirect, session
from flask_login import login_user, logout_user, current_user

from . import auth_bp
from .models import Profile
from .repositories import ProfileRepository, ActivityRepository
from .services import AuthService, redirect_after_login
from .services.auth_service import login_error_path, LOGIN_PATH
from .session import forget_profile
from core.utils.api_helpers import (
    api_login_required, error_response, get_json_or_error, safe_error_response,
    RateLimiter, client_ip,
)

logger = logging.getLogger('howard.core.auth')

_profile_repo = ProfileRepository()
_activity_repo = ActivityRepository()
_auth_service = AuthService()
_auth_limiter = RateLimiter()

CODE_VERIFIER_COOKIE = 'howard-code-verifier'


def _sign_in(result):
    """Start a Flask session for a successful AuthResult."""
    if result.profile:
        login_user(Profile(result.profile), remember=True, force=True)
        session['access_token'] = result.session.get('access_token')


# ============== CALLBACK ==============

@auth_bp.route('/auth/callback')
def auth_callback():
    """Landing URL of magic links, invites and OAuth sign-ins (``?code=``)."""
    code = request.args.get('code')
    next_path = request.args.get('next') or request.args.get('redirectTo')

    if not code:
        return redirect(LOGIN_PATH)

    verifier = request.cookies.get(CODE_VERIFIER_COOKIE) or request.args.get('code_verifier')
    result = _auth_service.exchange_code(code, verifier)
    if not result.success:
        return redirect(login_error_path(result.error))

    _sign_in(result)
    response = redirect(redirect_after_login(result.profile, next_path))
    response.delete_cookie(CODE_VERIFIER_COOKIE)
    return response


@auth_bp.route('/api/auth/session', methods=['POST'])
def api_create_session():
    """Implicit flow: the callback page posts the ``#access_token`` fragment values."""
    allowed, retry_after = _auth_limiter.is_allowed(
        f'session:{client_ip()}', max_requests=20, window_seconds=300)
    if not allowed:
        return error_response(f'Too many attempts. Try again in {retry_after} seconds.', 429)

    data, error = get_json_or_error()
    if error:
        return error
    access_token = data.get('access_token')
    if not access_token:
        return error_response('access_token is required', 400)

    result = _auth_service.verify_access_token(access_token, data.get('refresh_token'))
    if not result.success:
        return jsonify({
            'success': False,
            'error': result.error,
            'redirect': login_error_path('Authentication failed'),
        }), result.status_code

    _sign_in(result)
    return jsonify({
        'success': True,
        'redirect': redirect_after_login(result.profile, data.get('next')),
        'profile': result.profile,
    })


@auth_bp.route('/api/auth/logout', methods=['POST'])
@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    if current_user.is_authenticated:
        _activity_repo.try_log('logout', current_user.id, org_id=current_user.org_id,
                               resource_type='profile', resource_id=current_user.id)
        forget_profile(current_user.id)
    logout_user()
    access_token = session.pop('access_token', None)
    if access_token:
        _auth_service.sign_out(access_token)
    if request.path.startswith('/api/'):
        return jsonify({'success': True})
    return redirect(LOGIN_PATH)


@auth_bp.route('/api/auth/current-user')
def api_current_user():
    if current_user.is_authenticated:
        return jsonify({'authenticated': True, 'user': current_user.to_dict()})
    return jsonify({'authenticated': False})


# ============== MAGIC LINK / PASSWORD ==============

@auth_bp.route('/api/auth/magic-link', methods=['POST'])
def api_magic_link():
    allowed, retry_after = _auth_limiter.is_allowed(
        f'magic:{client_ip()}', max_requests=5, window_seconds=900)
    if not allowed:
        return error_response(f'Too many requests. Try again in {retry_after} seconds.', 429)

    data, error = get_json_or_error()
    if error:
        return error

    result = _auth_service.send_magic_link(data.get('email'))
    if not result.success:
        return error_response(result.error, result.status_code)
    if result.profile is None:
        return jsonify({'success': True,
                        'message': 'If an account exists with this email, a magic link has been sent.'})
    return jsonify({'success': True, 'message': 'Magic link sent! Check your email.'})


@auth_bp.route('/api/auth/set-password', methods=['POST'])
@api_login_required
def api_set_password():
    """Invited users pick their first password; this activates the profile."""
    data, error = get_json_or_error()
    if error:
        return error

    password = data.get('password', '')
    if data.get('confirm_password') is not None and data['confirm_password'] != password:
        return error_response('Passwords do not match', 400)

    result = _auth_service.set_password(current_user.id, password)
    if not result.success:
        return error_response(result.error, result.status_code)
    forget_profile(current_user.id)
    return jsonify({'success': True, 'redirect': redirect_after_login(result.profile)})


@auth_bp.route('/api/users/password', methods=['POST'])
@api_login_required
def api_change_password():
    data, error = get_json_or_error()
    if error:
        return error

    result = _auth_service.change_password(
        current_user.id, current_user.email,
        data.get('current_password', ''), data.get('new_password', ''))
    if not result.success:
        return error_response(result.error, result.status_code)
    return jsonify({'success': True, 'message': 'Password changed successfully'})


@auth_bp.route('/api/users/me', methods=['PATCH'])
@api_login_required
def api_update_own_profile():
    """Self-service edit of display name and avatar."""
    data, error = get_json_or_error()
    if error:
        return error

    fields = {}
    if 'full_name' in data:
        name = (data.get('full_name') or '').strip()
        if not name:
            return error_response('Full name cannot be empty', 400)
        if len(name) > 100:
            return error_response('Full name must be 100 characters or less', 400)
        fields['full_name'] = name
    if 'avatar_url' in data:
        fields['avatar_url'] = data.get('avatar_url') or None
    if not fields:
        return error_response('No valid fields to update', 400)

    try:
        updated = _profile_repo.update(current_user.id, fields)
    except Exception as e:
        return safe_error_response(e)
    forget_profile(current_user.id)
    _activity_repo.try_log('profile_updated', current_user.id, org_id=current_user.org_id,
                           resource_type='profile', resource_id=current_user.id,
                           details={'fields': sorted(fields)})
    return jsonify({'success': True, 'profile': updated})
