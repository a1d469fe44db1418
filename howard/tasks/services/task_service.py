"""Task Service - board listing and task CRUD with role checks.

Returns TaskResult objects; routes map them to JSON responses.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from core.utils.logging_config import get_logger
from core.auth import permissions
from core.auth.repositories import ProfileRepository, ActivityRepository
from core.notifications.notify import notify_user

from ..filters import view_criteria, count_by_status
from ..recurrence import calculate_next_occurrence
from ..repositories import TaskRepository
from ..validators import (
    validate_title, validate_status, validate_priority,
    validate_recurrence_rule, clean_description,
)

logger = get_logger('howard.tasks')

TASKS_URL = '/tasks'


@dataclass
class TaskResult:
    success: bool
    task: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    status_code: int = 200


def _now():
    return datetime.now(timezone.utc)


def _display_name(profile):
    return profile.full_name or profile.email or 'Someone'


class TaskService:

    def __init__(self):
        self.task_repo = TaskRepository()
        self.profile_repo = ProfileRepository()
        self.activity_repo = ActivityRepository()

    # ── Listing ──

    def list_tasks(self, profile, view=None, assignee=None, status=None):
        """Tasks for a board tab plus their per-status counts."""
        client_ids = None
        if profile.role == 'admin' and (view or 'my-tasks') == 'client-tasks':
            client_ids = self.profile_repo.get_client_ids()
        criteria = view_criteria(profile.role, profile.id, profile.org_id,
                                 view=view, assignee=assignee, status=status,
                                 client_ids=client_ids)
        tasks = self.task_repo.list_tasks(criteria)
        return {'tasks': tasks, 'counts': count_by_status(tasks)}

    def get_task(self, profile, task_id) -> TaskResult:
        task = self.task_repo.get_by_id(task_id)
        if not task:
            return TaskResult(False, error='Task not found', status_code=404)
        if permissions.is_client(profile) and not permissions.can_view_task(profile, task):
            return TaskResult(False, error='Task not found', status_code=404)
        return TaskResult(True, task=task)

    # ── Create ──

    def _check_assignee(self, profile, assignee_id):
        """None when allowed, else an error TaskResult."""
        if not assignee_id or assignee_id == profile.id or not permissions.is_client(profile):
            return None
        assignee = self.profile_repo.get_by_id(assignee_id)
        if not assignee or not permissions.can_assign_task_to(profile, assignee):
            return TaskResult(False, error='Cannot assign to other clients', status_code=403)
        return None

    def create_task(self, profile, data) -> TaskResult:
        title = validate_title(data.get('title'))
        status = validate_status(data.get('status', 'pending'))
        priority = validate_priority(data.get('priority', 'medium'))
        description = clean_description(data.get('description'))
        assigned_to = data.get('assigned_to') or None

        org_id = profile.org_id
        if profile.role == 'admin' and data.get('target_org_id'):
            org_id = data['target_org_id']
        if not org_id:
            raise ValueError('Your profile is not linked to an organization')

        denied = self._check_assignee(profile, assigned_to)
        if denied:
            return denied

        fields = {
            'org_id': org_id,
            'title': title,
            'description': description,
            'status': status,
            'priority': priority,
            'assigned_to': assigned_to,
            'created_by': profile.id,
            'due_date': data.get('due_date') or None,
            'completed_at': _now() if status == 'completed' else None,
            'is_internal': bool(data.get('is_internal')) and permissions.is_team_role(profile),
        }
        if data.get('is_recurring'):
            rule = validate_recurrence_rule(data.get('recurrence_rule'))
            fields.update({
                'is_recurring': True,
                'recurrence_rule': rule,
                'next_occurrence_at': calculate_next_occurrence(rule, _now()),
            })

        task = self.task_repo.create(fields)
        self.activity_repo.try_log('task_created', profile.id, org_id=org_id,
                                   resource_type='task', resource_id=task['id'], details={
                                       'task_title': title,
                                       'status': status,
                                       'priority': priority,
                                       'assigned_to': assigned_to,
                                       'is_external': profile.org_id != org_id,
                                   })

        if assigned_to and assigned_to != profile.id:
            notify_user(assigned_to, 'New task assigned', type='task_assigned',
                        message=f'{_display_name(profile)} assigned you a task: {title}',
                        action_url=TASKS_URL, resource_type='task', resource_id=task['id'],
                        org_id=org_id)
        return TaskResult(True, task=task, status_code=201)

    # ── Update ──

    def update_task(self, profile, task_id, data) -> TaskResult:
        existing = self.task_repo.get_by_id(task_id)
        if not existing:
            return TaskResult(False, error='Task not found', status_code=404)
        if not permissions.can_edit_task(profile, existing):
            return TaskResult(False, error='Permission denied', status_code=403)

        updates = {}
        if 'title' in data:
            if not isinstance(data['title'], str) or not data['title'].strip():
                raise ValueError('Title cannot be empty')
            updates['title'] = validate_title(data['title'])
        if 'description' in data:
            updates['description'] = clean_description(data['description'])
        if 'status' in data:
            updates['status'] = validate_status(data['status'])
            if updates['status'] == 'completed':
                if existing['status'] != 'completed':
                    updates['completed_at'] = _now()
            else:
                updates['completed_at'] = None
        if 'priority' in data:
            updates['priority'] = validate_priority(data['priority'])
        if 'assigned_to' in data:
            new_assignee = data['assigned_to'] or None
            denied = self._check_assignee(profile, new_assignee)
            if denied:
                return denied
            updates['assigned_to'] = new_assignee
        if 'due_date' in data:
            updates['due_date'] = data['due_date'] or None
        if 'is_internal' in data and permissions.is_team_role(profile):
            updates['is_internal'] = bool(data['is_internal'])
        if 'is_recurring' in data or 'recurrence_rule' in data:
            updates.update(self._recurrence_updates(existing, data))

        task = self.task_repo.update(task_id, updates)
        self.activity_repo.try_log('task_updated', profile.id, org_id=existing['org_id'],
                                   resource_type='task', resource_id=task_id,
                                   details={'fields': sorted(updates)})

        name = _display_name(profile)
        new_assignee = updates.get('assigned_to')
        if new_assignee and new_assignee != existing.get('assigned_to') and new_assignee != profile.id:
            notify_user(new_assignee, 'Task assigned to you', type='task_assigned',
                        message=f"{name} assigned you a task: {task['title']}",
                        action_url=TASKS_URL, resource_type='task', resource_id=task_id,
                        org_id=existing['org_id'])

        if updates.get('status') == 'completed' and existing['status'] != 'completed':
            creator = existing.get('created_by')
            if creator and creator != profile.id:
                notify_user(creator, 'Task completed', type='task_completed',
                            message=f"{name} completed: {task['title']}",
                            action_url=TASKS_URL, resource_type='task', resource_id=task_id,
                            org_id=existing['org_id'])
        return TaskResult(True, task=task)

    @staticmethod
    def _recurrence_updates(existing, data):
        is_recurring = data.get('is_recurring', existing.get('is_recurring'))
        if not is_recurring:
            return {'is_recurring': False, 'recurrence_rule': None, 'next_occurrence_at': None}
        rule = validate_recurrence_rule(data.get('recurrence_rule', existing.get('recurrence_rule')))
        return {
            'is_recurring': True,
            'recurrence_rule': rule,
            'next_occurrence_at': calculate_next_occurrence(rule, _now()),
        }

    # ── Delete ──

    def delete_task(self, profile, task_id) -> TaskResult:
        existing = self.task_repo.get_by_id(task_id)
        if not existing:
            return TaskResult(False, error='Task not found', status_code=404)
        if not permissions.can_delete_task(profile, existing):
            return TaskResult(False, error='Permission denied', status_code=403)

        self.task_repo.delete(task_id)
        self.activity_repo.try_log('task_deleted', profile.id, org_id=existing['org_id'],
                                   resource_type='task', resource_id=task_id,
                                   details={'task_title': existing['title']})
        return TaskResult(True, task=existing)
