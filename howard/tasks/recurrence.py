"""Recurrence date arithmetic for recurring tasks.

Rules look like ``{'frequency': 'weekly', 'interval': 2, 'day_of_week': 1}``;
``day_of_week`` counts from 0 = Sunday.
"""
import calendar
from datetime import datetime, timedelta, timezone

OCCURRENCE_HOUR = 9  # UTC


def _add_months(moment, months):
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _sunday_based_weekday(moment):
    return (moment.weekday() + 1) % 7


def calculate_next_occurrence(rule, from_time):
    """Next occurrence after ``from_time``, always at 09:00 UTC.

    weekly: 7 x interval days ahead, then moved within that week to
    ``day_of_week``. monthly / quarterly: interval (x3) months ahead, with
    ``day_of_month`` clamped to the month length.
    """
    if from_time.tzinfo is None:
        from_time = from_time.replace(tzinfo=timezone.utc)
    interval = rule.get('interval') or 1
    frequency = rule.get('frequency')

    if frequency == 'weekly':
        nxt = from_time + timedelta(days=7 * interval)
        target = rule.get('day_of_week')
        if target is not None:
            nxt += timedelta(days=target - _sunday_based_weekday(nxt))
    elif frequency in ('monthly', 'quarterly'):
        months = interval if frequency == 'monthly' else 3 * interval
        nxt = _add_months(from_time, months)
        day_of_month = rule.get('day_of_month')
        if day_of_month:
            last_day = calendar.monthrange(nxt.year, nxt.month)[1]
            nxt = nxt.replace(day=min(day_of_month, last_day))
    else:
        raise ValueError(f'Unknown recurrence frequency: {frequency}')

    return nxt.replace(hour=OCCURRENCE_HOUR, minute=0, second=0, microsecond=0)


def calculate_due_date(rule, now=None):
    """Due date of a generated instance: the occurrence computed from a day ago."""
    now = now or datetime.now(timezone.utc)
    return calculate_next_occurrence(rule, now - timedelta(days=1))
