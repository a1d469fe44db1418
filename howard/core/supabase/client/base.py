"""Shared HTTP plumbing for the Supabase REST clients."""

import time
import logging

import requests

from ..config import REQUEST_TIMEOUT, MAX_RETRIES, RETRY_BASE_DELAY
from .exceptions import (
    ConfigurationError, AuthenticationError,
    NetworkError, TimeoutError, APIError, ParseError,
)

logger = logging.getLogger('howard.supabase')


class SupabaseHTTPClient:
    """requests.Session wrapper with retry on network errors and 5xx."""

    def __init__(self, settings, session=None):
        self.settings = settings
        self._session = session or requests.Session()

    def _require_config(self):
        if not self.settings.is_configured:
            raise ConfigurationError()

    def _headers(self, service=False, access_token=None, extra=None):
        key = self.settings.service_role_key if service else self.settings.anon_key
        headers = {
            'apikey': key,
            'Authorization': f'Bearer {access_token or key}',
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method, path, service=False, access_token=None,
                 json_data=None, params=None, data=None, headers=None,
                 timeout=REQUEST_TIMEOUT, expect_json=True, retries=MAX_RETRIES):
        """Send a request, retrying connection failures and 5xx responses.

        ``retries=1`` sends exactly once; auth writes use it because a resent
        POST can redeem a code twice or send a second invitation email.
        """
        self._require_config()
        url = f'{self.settings.url}{path}'
        all_headers = self._headers(service=service, access_token=access_token, extra=headers)

        for attempt in range(retries):
            try:
                resp = self._session.request(
                    method, url, json=json_data, params=params, data=data,
                    headers=all_headers, timeout=timeout,
                )
            except requests.exceptions.Timeout:
                if attempt < retries - 1:
                    time.sleep(RETRY_BASE_DELAY * (attempt + 1))
                    continue
                raise TimeoutError(f'Timeout: {method} {path}')
            except requests.exceptions.ConnectionError as e:
                if attempt < retries - 1:
                    time.sleep(RETRY_BASE_DELAY * (attempt + 1))
                    continue
                raise NetworkError(f'Connection error: {e}')

            if resp.status_code >= 500 and attempt < retries - 1:
                logger.warning(f'{method} {path} returned {resp.status_code}, retrying')
                time.sleep(RETRY_BASE_DELAY * (attempt + 1))
                continue

            if resp.status_code in (401, 403):
                raise AuthenticationError(self._error_message(resp), code=resp.status_code)
            if resp.status_code >= 400:
                raise APIError(self._error_message(resp), status_code=resp.status_code)

            if not expect_json or not resp.content:
                return {}
            return self._parse_json(resp)

        raise NetworkError(f'Max retries exceeded for {method} {path}')

    def _error_message(self, resp):
        try:
            body = resp.json()
        except ValueError:
            return f'HTTP {resp.status_code}'
        if not isinstance(body, dict):
            return f'HTTP {resp.status_code}'
        return (body.get('error_description') or body.get('msg') or body.get('message')
                or body.get('error') or f'HTTP {resp.status_code}')

    def _parse_json(self, resp):
        try:
            return resp.json()
        except (ValueError, TypeError) as e:
            raise ParseError(f'Invalid JSON response: {e}')
