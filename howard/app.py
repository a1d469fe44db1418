import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from datetime import timedelta

from flask import Flask, request, jsonify

# Structured logging
from core.utils.logging_config import setup_logging, get_logger
logger = setup_logging(level=os.environ.get('LOG_LEVEL', 'INFO'))
app_logger = get_logger('howard.app')
app_logger.info('Howard app module loading...')
from flask_compress import Compress
from core.auth.session import init_login_manager
from core.navigation.registry import APPS
from database import ping_db


app = Flask(__name__)

# Secret key: required in production, dev fallback only when FLASK_DEBUG=true
_secret_key = os.environ.get('FLASK_SECRET_KEY', os.environ.get('SECRET_KEY'))
if not _secret_key:
    if os.environ.get('FLASK_DEBUG', 'false').lower() == 'true' or os.environ.get('TESTING'):
        _secret_key = 'dev-secret-key-for-local-only'
        app_logger.warning('Using development secret key, set FLASK_SECRET_KEY for production')
    else:
        raise RuntimeError('FLASK_SECRET_KEY environment variable is required')
app.secret_key = _secret_key

# Uploads are capped at 50 MB by the files service; leave room for the multipart envelope
app.config['MAX_CONTENT_LENGTH'] = 51 * 1024 * 1024

compress = Compress()
compress.init_app(app)

init_login_manager(app)

app.config['REMEMBER_COOKIE_DURATION'] = timedelta(days=30)
app.config['REMEMBER_COOKIE_SECURE'] = True
app.config['REMEMBER_COOKIE_HTTPONLY'] = True
app.config['REMEMBER_COOKIE_SAMESITE'] = 'Lax'

# Session cookie hardening
app.config['SESSION_COOKIE_SECURE'] = True
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

# ============== Blueprint Registrations ==============

from core.auth import auth_bp
app.register_blueprint(auth_bp)

from core.navigation import navigation_bp
app.register_blueprint(navigation_bp)

from core.users import users_bp
app.register_blueprint(users_bp)

from core.organization import org_bp
app.register_blueprint(org_bp)

from core.notifications import notifications_bp
app.register_blueprint(notifications_bp)

from tasks import tasks_bp
app.register_blueprint(tasks_bp)

from workstreams import workstreams_bp
app.register_blueprint(workstreams_bp)

from files import files_bp
app.register_blueprint(files_bp)

app_logger.info(f'Howard startup complete, {len(app.url_map._rules)} routes registered')

# ============== Global Error Handlers ==============

@app.errorhandler(404)
def handle_404(e):
    return jsonify({'success': False, 'error': 'Not found'}), 404

@app.errorhandler(405)
def handle_405(e):
    return jsonify({'success': False, 'error': 'Method not allowed'}), 405

@app.errorhandler(413)
def handle_413(e):
    return jsonify({'success': False, 'error': 'File size exceeds 50MB limit'}), 413

@app.errorhandler(500)
def handle_500(e):
    app_logger.exception('Unhandled 500 error')
    return jsonify({'success': False, 'error': 'An internal error occurred'}), 500

# ============== Database Schema ==============
# Local development only; production schema is managed on the hosted database
if os.environ.get('INIT_DB_SCHEMA', 'false').lower() == 'true':
    from database import init_db
    init_db()

# ============== Background Scheduler ==============
if not os.environ.get('TESTING'):
    try:
        from jobs.scheduler import start_scheduler
        start_scheduler()
    except Exception as e:
        app_logger.warning(f'Failed to start background scheduler: {e}')


# ============== CORS ==============

def _allowed_origins():
    configured = os.environ.get('CORS_ORIGINS')
    if configured:
        return {o.strip().rstrip('/') for o in configured.split(',') if o.strip()}
    return {url for _, dev, prod in APPS.values() for url in (dev, prod)}


_ALLOWED_ORIGINS = _allowed_origins()


@app.before_request
def handle_preflight():
    if request.method == 'OPTIONS' and request.path.startswith('/api/'):
        return '', 204


# ============== After-Request Hook ==============

@app.after_request
def add_response_headers(response):
    """CORS for the front-end apps plus ETag handling for JSON."""
    origin = request.headers.get('Origin')
    if origin and request.path.startswith('/api/') and origin.rstrip('/') in _ALLOWED_ORIGINS:
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers['Access-Control-Allow-Credentials'] = 'true'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PATCH, PUT, DELETE, OPTIONS'
        response.headers['Vary'] = 'Origin'

    # ETag for JSON responses, only hashed when the client sends If-None-Match
    if response.content_type and 'application/json' in response.content_type:
        if response.status_code == 200 and response.data:
            if_none_match = request.headers.get('If-None-Match')
            if if_none_match:
                import hashlib
                etag = hashlib.md5(response.data).hexdigest()
                response.headers['ETag'] = f'"{etag}"'
                if if_none_match == f'"{etag}"':
                    response.status_code = 304
                    response.data = b''

    if request.path == '/health' and response.status_code == 200:
        response.headers['Cache-Control'] = 'no-cache'

    return response


@app.route('/health')
def health_check():
    """Health check for the orchestrator. Only checks DB connectivity."""
    checks = {}

    try:
        checks['database'] = ping_db()
    except Exception as e:
        checks['database'] = False
        app_logger.error(f'Health check - database failed: {e}')

    status = 'healthy' if checks.get('database') else 'unhealthy'
    http_code = 200 if status == 'healthy' else 503

    return jsonify({
        'status': status,
        'checks': checks,
        'service': 'howard',
    }), http_code


if __name__ == '__main__':
    debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    port = int(os.environ.get('PORT', 5000))
    app.run(debug=debug, host='0.0.0.0', port=port)
