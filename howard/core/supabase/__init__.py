"""Supabase platform connector: Auth and Storage REST APIs.

Data access goes straight to the project's Postgres database through
``database.py``; this package only covers what Postgres cannot do
(code exchange, token verification, admin user management, object storage).
"""
import threading

from .client import SupabaseAuthClient, SupabaseStorageClient
from .config import SupabaseSettings

_lock = threading.Lock()
_auth_client = None
_storage_client = None


def get_auth_client():
    """Process-wide auth client built from environment settings."""
    global _auth_client
    if _auth_client is None:
        with _lock:
            if _auth_client is None:
                _auth_client = SupabaseAuthClient(SupabaseSettings.from_env())
    return _auth_client


def get_storage_client():
    global _storage_client
    if _storage_client is None:
        with _lock:
            if _storage_client is None:
                _storage_client = SupabaseStorageClient(SupabaseSettings.from_env())
    return _storage_client


__all__ = ['get_auth_client', 'get_storage_client', 'SupabaseSettings']
