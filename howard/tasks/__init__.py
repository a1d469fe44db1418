"""Howard Tasks - task board, recurring tasks and task comments."""
from flask import Blueprint

tasks_bp = Blueprint('tasks', __name__)

from . import routes  # noqa: E402, F401
