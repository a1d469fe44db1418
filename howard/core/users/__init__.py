"""User administration: listings, client directory, invites, admin edits."""
from flask import Blueprint

users_bp = Blueprint('users', __name__)

from . import routes  # noqa: E402, F401
