"""Task payload validation.

Validators raise ValueError with a user-facing message; routes turn that
into a 400 through safe_error_response().
"""

TASK_STATUSES = ('pending', 'in_progress', 'completed', 'hidden', 'cancelled')
TASK_PRIORITIES = ('low', 'medium', 'high', 'urgent')
RECURRENCE_FREQUENCIES = ('weekly', 'monthly', 'quarterly')
TITLE_MAX_LENGTH = 200
COMMENT_MAX_LENGTH = 5000


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def validate_title(title):
    if not isinstance(title, str) or not title.strip():
        raise ValueError('Title is required')
    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise ValueError(f'Title must be less than {TITLE_MAX_LENGTH} characters')
    return title


def validate_status(status):
    if status not in TASK_STATUSES:
        raise ValueError('Invalid status')
    return status


def validate_priority(priority):
    if priority not in TASK_PRIORITIES:
        raise ValueError('Invalid priority')
    return priority


def validate_recurrence_rule(rule):
    """Normalize a recurrence rule dict; ``interval`` defaults to 1."""
    if not isinstance(rule, dict):
        raise ValueError('Recurrence rule is required for recurring tasks')

    frequency = rule.get('frequency')
    if frequency not in RECURRENCE_FREQUENCIES:
        raise ValueError('Invalid recurrence frequency')

    interval = rule.get('interval', 1)
    if not _is_int(interval) or not 1 <= interval <= 12:
        raise ValueError('Recurrence interval must be between 1 and 12')

    clean = {'frequency': frequency, 'interval': interval}

    day_of_week = rule.get('day_of_week')
    if day_of_week is not None:
        if not _is_int(day_of_week) or not 0 <= day_of_week <= 6:
            raise ValueError('day_of_week must be between 0 (Sunday) and 6 (Saturday)')
        clean['day_of_week'] = day_of_week

    day_of_month = rule.get('day_of_month')
    if day_of_month is not None:
        if not _is_int(day_of_month) or not 1 <= day_of_month <= 31:
            raise ValueError('day_of_month must be between 1 and 31')
        clean['day_of_month'] = day_of_month

    return clean


def clean_description(description):
    if description is None:
        return None
    if not isinstance(description, str):
        raise ValueError('Description must be text')
    return description.strip() or None
