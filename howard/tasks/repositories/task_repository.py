"""Task Repository - data access for ``tasks``."""
import logging
from typing import Optional

from core.base_repository import BaseRepository
from database import as_json

logger = logging.getLogger('howard.tasks.repository')

_TASK_SELECT = '''
    SELECT t.*,
           a.full_name AS _a_full_name, a.email AS _a_email,
           a.avatar_url AS _a_avatar_url, a.role AS _a_role,
           c.full_name AS _c_full_name, c.email AS _c_email, c.avatar_url AS _c_avatar_url
    FROM tasks t
    LEFT JOIN profiles a ON a.id = t.assigned_to
    LEFT JOIN profiles c ON c.id = t.created_by
'''

UPDATABLE_FIELDS = (
    'title', 'description', 'status', 'priority', 'assigned_to', 'due_date',
    'completed_at', 'is_internal', 'is_recurring', 'recurrence_rule', 'next_occurrence_at',
)


def _shape(row):
    """Nest the joined profile columns like the front end expects."""
    if row is None:
        return None
    assignee = {k[3:]: row.pop(k) for k in [k for k in row if k.startswith('_a_')]}
    creator = {k[3:]: row.pop(k) for k in [k for k in row if k.startswith('_c_')]}
    row['assigned_to_profile'] = {'id': row['assigned_to'], **assignee} if row.get('assigned_to') else None
    row['created_by_profile'] = {'id': row['created_by'], **creator} if row.get('created_by') else None
    return row


class TaskRepository(BaseRepository):

    def get_by_id(self, task_id) -> Optional[dict]:
        return _shape(self.query_one(_TASK_SELECT + ' WHERE t.id = %s', (task_id,)))

    def list_tasks(self, criteria) -> list[dict]:
        """Tasks matching a TaskCriteria, newest first."""
        if criteria.empty:
            return []
        query = _TASK_SELECT + ' WHERE 1=1'
        params = []
        if criteria.assigned_to is not None:
            query += ' AND t.assigned_to = %s'
            params.append(criteria.assigned_to)
        if criteria.org_id is not None:
            query += ' AND t.org_id = %s'
            params.append(criteria.org_id)
        if criteria.require_assignee:
            query += ' AND t.assigned_to IS NOT NULL'
        if criteria.assigned_in is not None:
            query += ' AND t.assigned_to = ANY(%s::uuid[])'
            params.append(criteria.assigned_in)
        if criteria.status is not None:
            query += ' AND t.status = %s'
            params.append(criteria.status)
        query += ' ORDER BY t.created_at DESC'
        return [_shape(r) for r in self.query_all(query, params)]

    def create(self, fields: dict) -> dict:
        row = self.execute('''
            INSERT INTO tasks
                (org_id, title, description, status, priority, assigned_to, created_by,
                 due_date, completed_at, is_internal, is_recurring, recurrence_rule,
                 next_occurrence_at, parent_task_id, metadata)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id
        ''', (
            fields['org_id'], fields['title'], fields.get('description'),
            fields['status'], fields['priority'], fields.get('assigned_to'),
            fields['created_by'], fields.get('due_date'), fields.get('completed_at'),
            bool(fields.get('is_internal', False)), bool(fields.get('is_recurring', False)),
            as_json(fields.get('recurrence_rule')), fields.get('next_occurrence_at'),
            fields.get('parent_task_id'), as_json(fields.get('metadata') or {}),
        ), returning=True)
        return self.get_by_id(row['id'])

    def update(self, task_id, fields: dict) -> Optional[dict]:
        values = dict(fields)
        if 'recurrence_rule' in values:
            values['recurrence_rule'] = as_json(values['recurrence_rule'])
        clause, params = self.build_update(values, UPDATABLE_FIELDS)
        if not clause:
            return self.get_by_id(task_id)
        params.append(task_id)
        self.execute(f'UPDATE tasks SET {clause}, updated_at = NOW() WHERE id = %s', params)
        return self.get_by_id(task_id)

    def delete(self, task_id) -> bool:
        return self.execute('DELETE FROM tasks WHERE id = %s', (task_id,)) > 0

    # ── Recurrence ──

    def get_due_recurring(self, now) -> list[dict]:
        """Recurring templates whose next occurrence is due."""
        return self.query_all('''
            SELECT * FROM tasks
            WHERE is_recurring = TRUE
              AND recurrence_rule IS NOT NULL
              AND next_occurrence_at IS NOT NULL
              AND next_occurrence_at <= %s
              AND status <> 'cancelled'
            ORDER BY next_occurrence_at
        ''', (now,))

    def create_instance(self, parent: dict, due_date, next_occurrence_at) -> Optional[str]:
        """Advance the parent and insert a generated instance, atomically.

        The advance only applies while ``next_occurrence_at`` still holds the
        value that was read, so a concurrent run that already claimed this
        occurrence makes it return None without inserting.
        """
        def _work(cursor):
            cursor.execute('''
                UPDATE tasks SET next_occurrence_at = %s, updated_at = NOW()
                WHERE id = %s AND next_occurrence_at = %s
                RETURNING id
            ''', (next_occurrence_at, parent['id'], parent['next_occurrence_at']))
            if cursor.fetchone() is None:
                return None
            cursor.execute('''
                INSERT INTO tasks
                    (org_id, title, description, status, priority, assigned_to, created_by,
                     due_date, is_internal, parent_task_id, metadata)
                VALUES (%s, %s, %s, 'pending', %s, %s, %s, %s, %s, %s, %s)
                RETURNING id
            ''', (
                parent['org_id'], parent['title'], parent.get('description'),
                parent['priority'], parent.get('assigned_to'), parent['created_by'],
                due_date, bool(parent.get('is_internal')), parent['id'],
                as_json({'generated_from_recurring': True}),
            ))
            return cursor.fetchone()['id']
        return self.execute_many(_work)
