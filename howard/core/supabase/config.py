"""
Supabase connector configuration.

Endpoint paths, retry/timeouts and the environment-backed project settings.
"""

import os
from dataclasses import dataclass
from typing import Optional


# REST paths (relative to SUPABASE_URL)
AUTH_PATH = '/auth/v1'
STORAGE_PATH = '/storage/v1'

# Retry settings (network errors and 5xx only)
MAX_RETRIES = 3
RETRY_BASE_DELAY = 0.5  # seconds

# Connection settings
REQUEST_TIMEOUT = 15  # seconds
UPLOAD_TIMEOUT = 120  # seconds, files up to MAX_UPLOAD_BYTES

# Storage
DEFAULT_BUCKET = 'files'
SIGNED_URL_TTL = 3600  # seconds
MAX_UPLOAD_BYTES = 50 * 1024 * 1024


@dataclass
class SupabaseSettings:
    """Project URL and keys loaded from the environment."""

    url: str = ''
    anon_key: str = ''
    service_role_key: str = ''
    bucket: str = DEFAULT_BUCKET
    app_url: str = 'http://localhost:8888'
    site_redirect: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'SupabaseSettings':
        app_url = os.environ.get('APP_URL', 'http://localhost:8888').rstrip('/')
        return cls(
            url=os.environ.get('SUPABASE_URL', '').rstrip('/'),
            anon_key=os.environ.get('SUPABASE_ANON_KEY', ''),
            service_role_key=os.environ.get('SUPABASE_SERVICE_ROLE_KEY', ''),
            bucket=os.environ.get('SUPABASE_STORAGE_BUCKET', DEFAULT_BUCKET),
            app_url=app_url,
            site_redirect=f'{app_url}/auth/callback',
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key and self.service_role_key)
