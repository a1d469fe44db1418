"""Auth Service - sign-in flows backed by the Supabase Auth API.

Routes call these methods; nothing here touches Flask request state.
"""
import time
import threading
from dataclasses import dataclass
from typing import Optional, Dict, Any
from urllib.parse import quote, urlsplit

from core.utils.logging_config import get_logger
from core.supabase import get_auth_client
from core.supabase.client import SupabaseError, AuthenticationError
from core.services.email_service import send_magic_link_email

from ..repositories import ProfileRepository, ActivityRepository

logger = get_logger('howard.auth')

DEFAULT_AFTER_LOGIN = '/dashboard'
SET_PASSWORD_PATH = '/set-password'
LOGIN_PATH = '/login'
MIN_PASSWORD_LENGTH = 8

# Access token -> (profile row, expiry). Bearer tokens arrive on every API call.
_TOKEN_CACHE_TTL = 60
_TOKEN_CACHE_MAX = 1000
_token_cache: Dict[str, tuple] = {}
_token_cache_lock = threading.Lock()


@dataclass
class AuthResult:
    """Outcome of a sign-in step."""
    success: bool
    profile: Optional[Dict[str, Any]] = None
    session: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    status_code: int = 200


def safe_next_path(next_path: Optional[str]) -> str:
    """Only same-site relative paths are followed after login."""
    if not next_path or not next_path.startswith('/') or next_path.startswith('//'):
        return DEFAULT_AFTER_LOGIN
    # Browsers treat a backslash like a slash, so /\host is //host
    if '\\' in next_path or any(ord(ch) < 32 or ord(ch) == 127 for ch in next_path):
        return DEFAULT_AFTER_LOGIN
    parts = urlsplit(next_path)
    if parts.scheme or parts.netloc:
        return DEFAULT_AFTER_LOGIN
    return next_path


def redirect_after_login(profile: Optional[Dict[str, Any]], next_path: Optional[str] = None) -> str:
    """Where a freshly signed-in user goes.

    Profiles that exist but are not active yet must set a password first;
    everyone else continues to ``next_path`` (``/dashboard`` by default).
    """
    if profile is not None and not profile.get('is_active'):
        return SET_PASSWORD_PATH
    return safe_next_path(next_path)


def login_error_path(message: str) -> str:
    return f'{LOGIN_PATH}?error={quote(message or "Authentication failed")}'


def clear_token_cache():
    with _token_cache_lock:
        _token_cache.clear()


def _remember_token(access_token, profile, now):
    """Cache a verified token, dropping expired entries and capping the size."""
    with _token_cache_lock:
        for token in [t for t, (_, expiry) in _token_cache.items() if expiry <= now]:
            del _token_cache[token]
        while len(_token_cache) >= _TOKEN_CACHE_MAX:
            oldest = min(_token_cache, key=lambda t: _token_cache[t][1])
            del _token_cache[oldest]
        _token_cache[access_token] = (profile, now + _TOKEN_CACHE_TTL)


class AuthService:
    """Service for authentication-related business logic."""

    def __init__(self, auth_client=None):
        self.profile_repo = ProfileRepository()
        self.activity_repo = ActivityRepository()
        self._client = auth_client

    @property
    def client(self):
        if self._client is None:
            self._client = get_auth_client()
        return self._client

    def exchange_code(self, code: str, code_verifier: str = None) -> AuthResult:
        """Trade an authorization code for a session. One attempt, no retries."""
        try:
            session = self.client.exchange_code_for_session(code, code_verifier)
        except SupabaseError as e:
            logger.warning(f'Code exchange failed: {e}')
            return AuthResult(success=False, error=str(e), status_code=401)
        return self._complete(session)

    def verify_access_token(self, access_token: str, refresh_token: str = None) -> AuthResult:
        """Implicit-flow sign-in: the page posts the tokens from the URL fragment."""
        try:
            user = self.client.get_user(access_token)
        except SupabaseError as e:
            logger.warning(f'Access token rejected: {e}')
            return AuthResult(success=False, error='Invalid or expired token', status_code=401)
        session = {'access_token': access_token, 'refresh_token': refresh_token, 'user': user}
        return self._complete(session)

    def _complete(self, session: Dict[str, Any]) -> AuthResult:
        user_id = session['user']['id']
        try:
            profile = self.profile_repo.get_by_id(user_id)
        except Exception as e:
            logger.exception(f'Profile lookup failed after sign-in for {user_id}: {e}')
            return AuthResult(success=False, error='Authentication failed', status_code=500)
        if profile:
            self.activity_repo.try_log('login', user_id, org_id=profile.get('org_id'),
                                       resource_type='profile', resource_id=user_id)
        return AuthResult(success=True, profile=profile, session=session)

    def profile_for_token(self, access_token: str) -> Optional[Dict[str, Any]]:
        """Resolve a Bearer token to its profile row, or None."""
        now = time.time()
        with _token_cache_lock:
            cached = _token_cache.get(access_token)
            if cached and cached[1] > now:
                return cached[0]

        try:
            user = self.client.get_user(access_token)
        except AuthenticationError:
            return None
        except SupabaseError as e:
            logger.error(f'Token verification unavailable: {e}')
            return None

        profile = self.profile_repo.get_by_id(user['id'])
        if profile:
            _remember_token(access_token, profile, now)
        return profile

    def sign_out(self, access_token: str) -> None:
        """Revoke the backend session; local logout proceeds either way."""
        with _token_cache_lock:
            _token_cache.pop(access_token, None)
        try:
            self.client.sign_out(access_token)
        except SupabaseError as e:
            logger.warning(f'Backend sign-out failed: {e}')

    def send_magic_link(self, email: str) -> AuthResult:
        """Generate a sign-in link and email it.

        Unknown addresses get the same success answer as known ones.
        """
        email = (email or '').strip().lower()
        if not email:
            return AuthResult(success=False, error='Email is required', status_code=400)

        profile = self.profile_repo.get_by_email(email)
        if not profile:
            logger.info('Magic link requested for unknown email')
            return AuthResult(success=True)
        if not profile.get('is_active'):
            return AuthResult(
                success=False, status_code=403,
                error='This account is not active. Please contact your administrator.')
        return self._deliver_link(profile)

    def send_magic_link_to(self, profile_id: str) -> AuthResult:
        """Admin action: send a sign-in link to an existing user."""
        profile = self.profile_repo.get_by_id(profile_id)
        if not profile:
            return AuthResult(success=False, error='User not found', status_code=404)
        if not profile.get('is_active'):
            return AuthResult(success=False, error='User is not active', status_code=400)
        return self._deliver_link(profile)

    def _deliver_link(self, profile: Dict[str, Any]) -> AuthResult:
        try:
            link = self.client.admin_generate_link(profile['email'])
        except SupabaseError as e:
            logger.error(f'Magic link generation failed for {profile["id"]}: {e}')
            return AuthResult(success=False, error='Failed to generate magic link', status_code=500)

        sent, error = send_magic_link_email(profile['email'], link, profile.get('full_name'))
        if not sent:
            return AuthResult(success=False, error='Failed to send magic link email', status_code=500)
        return AuthResult(success=True, profile=profile)

    def set_password(self, profile_id: str, new_password: str) -> AuthResult:
        """First password for an invited account; activates the profile."""
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            return AuthResult(success=False, status_code=400,
                              error=f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        try:
            self.client.admin_update_user(profile_id, {'password': new_password})
        except SupabaseError as e:
            logger.error(f'Setting password failed for {profile_id}: {e}')
            return AuthResult(success=False, error='Failed to set password', status_code=500)

        self.profile_repo.set_active(profile_id, True)
        self.activity_repo.try_log('password_set', profile_id,
                                   resource_type='profile', resource_id=profile_id)
        clear_token_cache()
        return AuthResult(success=True, profile=self.profile_repo.get_by_id(profile_id))

    def change_password(self, profile_id: str, email: str,
                        current_password: str, new_password: str) -> AuthResult:
        """Change password after re-checking the current one."""
        if not current_password or not new_password:
            return AuthResult(success=False, status_code=400,
                              error='Current password and new password are required')
        if len(new_password) < MIN_PASSWORD_LENGTH:
            return AuthResult(success=False, status_code=400,
                              error=f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        try:
            self.client.sign_in_with_password(email, current_password)
        except AuthenticationError:
            return AuthResult(success=False, error='Current password is incorrect', status_code=400)
        except SupabaseError as e:
            logger.error(f'Password verification unavailable: {e}')
            return AuthResult(success=False, error='Failed to verify password', status_code=500)

        try:
            self.client.admin_update_user(profile_id, {'password': new_password})
        except SupabaseError as e:
            logger.error(f'Password update failed for {profile_id}: {e}')
            return AuthResult(success=False, error='Failed to update password', status_code=500)

        self.activity_repo.try_log('password_changed', profile_id,
                                   resource_type='profile', resource_id=profile_id)
        return AuthResult(success=True)
