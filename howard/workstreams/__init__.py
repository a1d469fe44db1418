"""Client workstreams: verticals, templates, workstreams, entries, status rollups."""
from flask import Blueprint

workstreams_bp = Blueprint('workstreams', __name__)

from . import routes  # noqa: E402, F401
