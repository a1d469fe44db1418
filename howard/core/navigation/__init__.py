"""Role-gated navigation for the Howard front-end apps."""
from flask import Blueprint

navigation_bp = Blueprint('navigation', __name__)

from . import routes  # noqa: E402, F401
