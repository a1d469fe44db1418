"""In-app notifications and per-user notification preferences."""
from flask import Blueprint

notifications_bp = Blueprint('notifications', __name__)

from . import routes  # noqa: E402, F401
