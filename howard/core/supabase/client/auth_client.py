"""Supabase Auth (GoTrue) REST client.

Session endpoints use the anon key; /admin endpoints use the service role key
and must never be reachable with a caller-supplied token. Only GET is retried;
writes are sent once.
"""

from ..config import AUTH_PATH
from .base import SupabaseHTTPClient
from .exceptions import AuthenticationError, ParseError


class SupabaseAuthClient(SupabaseHTTPClient):

    # ── Sessions ──

    def exchange_code_for_session(self, auth_code, code_verifier=None):
        """POST /token?grant_type=pkce. Returns {access_token, refresh_token, user, ...}."""
        if not auth_code:
            raise AuthenticationError('Missing authorization code')
        payload = {'auth_code': auth_code}
        if code_verifier:
            payload['code_verifier'] = code_verifier
        session = self._request('POST', f'{AUTH_PATH}/token',
                                params={'grant_type': 'pkce'}, json_data=payload, retries=1)
        return self._check_session(session)

    def sign_in_with_password(self, email, password):
        session = self._request('POST', f'{AUTH_PATH}/token',
                                params={'grant_type': 'password'},
                                json_data={'email': email, 'password': password}, retries=1)
        return self._check_session(session)

    def get_user(self, access_token):
        """GET /user for a caller's access token. Raises AuthenticationError when invalid."""
        if not access_token:
            raise AuthenticationError('Missing access token')
        user = self._request('GET', f'{AUTH_PATH}/user', access_token=access_token)
        if not user.get('id'):
            raise AuthenticationError('Invalid token')
        return user

    def sign_out(self, access_token):
        self._request('POST', f'{AUTH_PATH}/logout', access_token=access_token,
                      expect_json=False, retries=1)

    # ── Admin ──

    def admin_generate_link(self, email, link_type='magiclink', redirect_to=None):
        """Create a sign-in link without sending it. Returns the action link URL."""
        body = self._request('POST', f'{AUTH_PATH}/admin/generate_link', service=True, json_data={
            'type': link_type,
            'email': email,
            'redirect_to': redirect_to or self.settings.site_redirect,
        }, retries=1)
        link = body.get('action_link') or (body.get('properties') or {}).get('action_link')
        if not link:
            raise ParseError('generate_link response has no action_link')
        return link

    def admin_invite_user(self, email, user_metadata=None, redirect_to=None):
        """Invite by email; returns the created auth user."""
        return self._request('POST', f'{AUTH_PATH}/invite', service=True,
                             params={'redirect_to': redirect_to or self.settings.site_redirect},
                             json_data={'email': email, 'data': user_metadata or {}}, retries=1)

    def admin_update_user(self, user_id, attributes):
        """PUT /admin/users/{id} with e.g. {'password': ...} or {'email': ...}."""
        return self._request('PUT', f'{AUTH_PATH}/admin/users/{user_id}',
                             service=True, json_data=attributes, retries=1)

    @staticmethod
    def _check_session(session):
        if not session.get('access_token') or not (session.get('user') or {}).get('id'):
            raise AuthenticationError('No session returned')
        return session
