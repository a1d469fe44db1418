"""Generation of task instances from recurring tasks."""
from datetime import datetime, timezone

from core.utils.logging_config import get_logger, LogContext

from ..recurrence import calculate_next_occurrence, calculate_due_date
from ..repositories import TaskRepository

logger = get_logger('howard.tasks.recurrence')

_task_repo = TaskRepository()


def process_recurring_tasks(now=None, task_repo=None):
    """Create one pending instance per due recurring task and advance its schedule.

    A failing task is recorded in ``errors`` and does not stop the run.

    Returns:
        {'message', 'processed', 'created', 'errors'}
    """
    repo = task_repo or _task_repo
    now = now or datetime.now(timezone.utc)

    with LogContext(logger, job='task_recurrence'):
        due = repo.get_due_recurring(now)
        if not due:
            return {'message': 'No recurring tasks due', 'processed': 0, 'created': 0, 'errors': []}

        created = 0
        errors = []
        for task in due:
            rule = task.get('recurrence_rule') or {}
            if not rule.get('frequency'):
                continue
            try:
                next_at = calculate_next_occurrence(rule, now)
                new_id = repo.create_instance(task, calculate_due_date(rule, now), next_at)
            except Exception as e:
                logger.error(f"Recurring task {task['id']} failed: {e}")
                errors.append(f"Task {task['id']}: {e}")
                continue
            if new_id is None:
                logger.info(f"Task {task['id']} occurrence already generated by another run, skipped")
                continue
            created += 1
            logger.info(f"Created instance {new_id} of task {task['id']}, next at {next_at.isoformat()}")

        return {
            'message': f'Processed {len(due)} recurring tasks',
            'processed': len(due),
            'created': created,
            'errors': errors,
        }
