"""Navigation API routes."""
from flask import jsonify, request
from flask_login import current_user

from . import navigation_bp
from .registry import NAV_ITEMS, app_links
from .resolver import resolve_navigation
from core.utils.api_helpers import api_login_required, error_response


@navigation_bp.route('/api/navigation')
@api_login_required
def api_navigation():
    """Sidebar items for ``?app=`` (default ``os``) visible to the caller's role."""
    app = request.args.get('app', 'os')
    if app not in NAV_ITEMS:
        return error_response(f'Unknown app: {app}', 400)

    nav = resolve_navigation(app, current_user.role, NAV_ITEMS, app_links(app))
    return jsonify({'success': True, 'role': current_user.role, **nav})
