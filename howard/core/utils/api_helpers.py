"""Shared API utilities: auth decorators, JSON error envelope, rate limiter.

Every JSON error leaving the API has the shape ``{"success": false, "error": ...}``.
"""
import time
import logging
import threading
from collections import defaultdict
from functools import wraps

from flask import jsonify, request
from flask_login import current_user

logger = logging.getLogger('howard.api')


# ============== Responses ==============

def error_response(message, status_code=400, **extra):
    """JSON error envelope: ``({'success': False, 'error': message}, status)``."""
    body = {'success': False, 'error': message}
    body.update(extra)
    return jsonify(body), status_code


# ============== Decorators ==============

def api_login_required(f):
    """Like @login_required but answers JSON 401 instead of redirecting."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_user.is_authenticated:
            return error_response('Authentication required', 401)
        return f(*args, **kwargs)
    return decorated


def role_required(*roles, message='Permission denied'):
    """Require an authenticated profile whose role is one of ``roles``."""
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            if not current_user.is_authenticated:
                return error_response('Authentication required', 401)
            if current_user.role not in roles:
                return error_response(message, 403)
            return f(*args, **kwargs)
        return decorated
    return decorator


admin_required = role_required('admin', message='Admin access required')
admin_or_manager_required = role_required(
    'admin', 'manager', message='Admin or manager access required')


# ============== Request Validation ==============

def get_json_or_error():
    """Return ``(data, error_response)`` for the request body.

        data, error = get_json_or_error()
        if error:
            return error
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, error_response('Invalid or missing JSON body', 400)
    return data, None


def arg_bool(name, default=None):
    """Parse a ``true``/``false`` query argument; ``default`` when absent."""
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    return raw.lower() in ('1', 'true', 'yes')


# ============== Error Handling ==============

def safe_error_response(e, status_code=500):
    """Map an exception to a response without leaking database internals.

    ValueError/KeyError carry validation messages and are returned as 400;
    anything else is logged with its traceback and answered generically.
    """
    if isinstance(e, (ValueError, KeyError)):
        return error_response(str(e).strip("'"), 400)

    logger.exception('Unhandled error in API route')
    return error_response('An internal error occurred', status_code)


# ============== Rate Limiter ==============

class RateLimiter:
    """Sliding-window in-memory limiter.

    State is per worker process, good enough to blunt brute force on the
    public auth endpoints.
    """

    def __init__(self):
        self._requests = defaultdict(list)
        self._lock = threading.Lock()

    def is_allowed(self, key, max_requests=10, window_seconds=60):
        """Return ``(allowed, retry_after_seconds)`` for ``key``."""
        now = time.time()
        window_start = now - window_seconds

        with self._lock:
            hits = [ts for ts in self._requests[key] if ts > window_start]
            self._requests[key] = hits

            if len(hits) >= max_requests:
                retry_after = int(min(hits) + window_seconds - now) + 1
                return False, max(1, retry_after)

            hits.append(now)
            return True, 0

    def reset(self):
        with self._lock:
            self._requests.clear()


def client_ip():
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr or 'unknown'
