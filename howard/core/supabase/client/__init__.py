from .auth_client import SupabaseAuthClient
from .storage_client import SupabaseStorageClient
from .exceptions import (
    SupabaseError, ConfigurationError, AuthenticationError,
    NetworkError, TimeoutError, APIError, ParseError,
)

__all__ = [
    'SupabaseAuthClient', 'SupabaseStorageClient',
    'SupabaseError', 'ConfigurationError', 'AuthenticationError',
    'NetworkError', 'TimeoutError', 'APIError', 'ParseError',
]
