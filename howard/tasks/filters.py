"""Task board views.

``view_criteria`` decides which tasks a caller sees for a view tab; the same
criteria drive the SQL in TaskRepository.list_tasks() and the in-memory
``apply_task_view`` used on already-fetched lists.
"""
from collections import Counter
from dataclasses import dataclass
from typing import Optional, List

from core.auth.models import CLIENT_ROLES
from .validators import TASK_STATUSES

TASK_VIEWS = ('my-tasks', 'team-tasks', 'client-tasks', 'all-tasks')
DEFAULT_VIEW = 'my-tasks'


@dataclass
class TaskCriteria:
    assigned_to: Optional[str] = None
    org_id: Optional[str] = None
    require_assignee: bool = False
    assigned_in: Optional[List[str]] = None
    status: Optional[str] = None
    empty: bool = False


def view_criteria(role, user_id, org_id, view=None, assignee=None, status=None,
                  client_ids=None):
    """Build the criteria for one request.

    Clients always see only their own assignments. Admins pick a view tab and
    may narrow by assignee. Other team roles get no view filter. The status
    filter applies to everyone.
    """
    view = view or DEFAULT_VIEW
    if view not in TASK_VIEWS:
        raise ValueError(f'Invalid view: {view}')
    if status is not None and status not in TASK_STATUSES:
        raise ValueError('Invalid status')

    criteria = TaskCriteria(status=status)

    if role in CLIENT_ROLES:
        criteria.assigned_to = user_id
    elif role == 'admin':
        if view == 'my-tasks':
            criteria.assigned_to = user_id
        elif view == 'team-tasks':
            criteria.org_id = org_id
            criteria.require_assignee = True
        elif view == 'client-tasks':
            ids = [str(c) for c in (client_ids or [])]
            if ids:
                criteria.assigned_in = ids
            else:
                criteria.empty = True

        if assignee:
            if criteria.assigned_to is not None and criteria.assigned_to != assignee:
                criteria.empty = True
            criteria.assigned_to = assignee

    return criteria


def matches(task, criteria):
    if criteria.empty:
        return False
    assigned = task.get('assigned_to')
    assigned = str(assigned) if assigned is not None else None
    if criteria.assigned_to is not None and assigned != criteria.assigned_to:
        return False
    if criteria.org_id is not None and str(task.get('org_id')) != criteria.org_id:
        return False
    if criteria.require_assignee and assigned is None:
        return False
    if criteria.assigned_in is not None and assigned not in criteria.assigned_in:
        return False
    if criteria.status is not None and task.get('status') != criteria.status:
        return False
    return True


def apply_task_view(tasks, criteria):
    """Filter a fetched list and order it newest first."""
    selected = [t for t in tasks if matches(t, criteria)]
    return sorted(selected, key=lambda t: t.get('created_at') or '', reverse=True)


def count_by_status(tasks):
    """{'pending': n, 'in_progress': n, ..., 'total': n}"""
    counts = Counter(t.get('status') for t in tasks)
    summary = {status: counts.get(status, 0) for status in TASK_STATUSES}
    summary['total'] = len(tasks)
    return summary
