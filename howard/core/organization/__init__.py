"""Organizations (tenants) and user memberships."""
from flask import Blueprint

org_bp = Blueprint('organization', __name__)

from . import routes  # noqa: E402, F401
