"""Flask-Login wiring.

Two ways in: ``Authorization: Bearer <access token>`` issued by Supabase
(front-end apps on other origins), or the Flask session cookie set by the
auth callback.
"""
import time

from flask import g
from flask_login import LoginManager

from core.utils.api_helpers import error_response
from .models import Profile
from .repositories import ProfileRepository
from .services import AuthService

_profile_repo = ProfileRepository()
_auth_service = AuthService()

_profile_cache = {}
_PROFILE_CACHE_TTL = 60  # seconds
_PROFILE_CACHE_MAX = 1000


def bearer_token(req):
    header = req.headers.get('Authorization', '')
    if header[:7].lower() == 'bearer ':
        token = header[7:].strip()
        return token or None
    return None


def _cache_profile(user_id, profile, now):
    for key in [k for k, (_, stamp) in _profile_cache.items() if now - stamp >= _PROFILE_CACHE_TTL]:
        _profile_cache.pop(key, None)
    if len(_profile_cache) >= _PROFILE_CACHE_MAX:
        oldest = min(_profile_cache, key=lambda k: _profile_cache[k][1])
        _profile_cache.pop(oldest, None)
    _profile_cache[user_id] = (profile, now)


def load_user(user_id):
    """Session-cookie loader (cached per worker, 60s TTL)."""
    now = time.time()
    cached = _profile_cache.get(user_id)
    if cached and (now - cached[1]) < _PROFILE_CACHE_TTL:
        profile = cached[0]
    else:
        row = _profile_repo.get_by_id(user_id)
        if not row:
            _profile_cache.pop(user_id, None)
            return None
        profile = Profile(row)
        _cache_profile(user_id, profile, now)
    g.profile_id = profile.id
    return profile


def load_user_from_request(req):
    token = bearer_token(req)
    if not token:
        return None
    row = _auth_service.profile_for_token(token)
    if not row:
        return None
    profile = Profile({**row, 'access_token': token})
    g.profile_id = profile.id
    return profile


def forget_profile(user_id):
    """Drop a cached profile after it was edited."""
    _profile_cache.pop(str(user_id), None)


def init_login_manager(app):
    login_manager = LoginManager()
    login_manager.init_app(app)

    login_manager.user_loader(load_user)
    login_manager.request_loader(load_user_from_request)

    @login_manager.unauthorized_handler
    def unauthorized():
        return error_response('Unauthorized', 401)

    return login_manager
