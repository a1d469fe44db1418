"""Supabase Storage REST client for the files bucket."""

from urllib.parse import quote

from ..config import STORAGE_PATH, SIGNED_URL_TTL, UPLOAD_TIMEOUT
from .base import SupabaseHTTPClient
from .exceptions import ParseError


class SupabaseStorageClient(SupabaseHTTPClient):
    """Object operations on one bucket, always with the service role key."""

    @property
    def bucket(self):
        return self.settings.bucket

    def _object_path(self, path):
        return f'{STORAGE_PATH}/object/{self.bucket}/{quote(path.lstrip("/"))}'

    def upload(self, path, content, content_type='application/octet-stream', upsert=False):
        """Upload bytes to ``path``. Returns the stored key."""
        body = self._request(
            'POST', self._object_path(path), service=True, data=content,
            headers={'Content-Type': content_type, 'x-upsert': 'true' if upsert else 'false'},
            timeout=UPLOAD_TIMEOUT,
        )
        return body.get('Key') or f'{self.bucket}/{path}'

    def remove(self, paths):
        """Delete objects; accepts one path or a list."""
        if isinstance(paths, str):
            paths = [paths]
        paths = [p for p in paths if p]
        if not paths:
            return []
        return self._request('DELETE', f'{STORAGE_PATH}/object/{self.bucket}', service=True,
                             json_data={'prefixes': paths})

    def create_signed_url(self, path, expires_in=SIGNED_URL_TTL):
        """Return an absolute, time-limited download URL."""
        body = self._request(
            'POST', f'{STORAGE_PATH}/object/sign/{self.bucket}/{quote(path.lstrip("/"))}',
            service=True, json_data={'expiresIn': expires_in},
        )
        signed = body.get('signedURL') or body.get('signedUrl')
        if not signed:
            raise ParseError('sign response has no signedURL')
        return f'{self.settings.url}{STORAGE_PATH}{signed}'
