"""Supabase REST client exceptions."""


class SupabaseError(Exception):
    """Base exception for all Supabase API errors."""

    def __init__(self, message, code=None, details=None, is_retryable=False):
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.is_retryable = is_retryable


class ConfigurationError(SupabaseError):
    """SUPABASE_URL or keys missing."""

    def __init__(self, message='Supabase is not configured', **kwargs):
        super().__init__(message, is_retryable=False, **kwargs)


class AuthenticationError(SupabaseError):
    """Invalid code, token or credentials."""

    def __init__(self, message='Authentication failed', **kwargs):
        super().__init__(message, is_retryable=False, **kwargs)


class NetworkError(SupabaseError):
    def __init__(self, message='Network error', **kwargs):
        super().__init__(message, is_retryable=True, **kwargs)


class TimeoutError(NetworkError):
    def __init__(self, message='Request timed out', **kwargs):
        super().__init__(message, **kwargs)


class APIError(SupabaseError):
    """Non-success response from the Auth or Storage API."""

    def __init__(self, message='API error', status_code=None, **kwargs):
        is_retryable = bool(status_code and status_code >= 500)
        super().__init__(message, is_retryable=is_retryable, **kwargs)
        self.status_code = status_code


class ParseError(SupabaseError):
    def __init__(self, message='Failed to parse response', **kwargs):
        super().__init__(message, is_retryable=False, **kwargs)
