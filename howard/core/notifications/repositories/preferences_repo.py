"""Notification preferences (one row per user, absent row = defaults)."""

from core.base_repository import BaseRepository

PREFERENCE_FIELDS = (
    'task_assigned',
    'task_status_changed',
    'task_comment_added',
    'task_mentioned',
    'file_uploaded',
)
DEFAULT_PREFERENCES = {field: True for field in PREFERENCE_FIELDS}


class NotificationPreferencesRepository(BaseRepository):

    def get(self, user_id):
        """Stored preferences, or the defaults when the user never saved any."""
        row = self.query_one('SELECT * FROM notification_preferences WHERE user_id = %s', (user_id,))
        if row is None:
            return {'user_id': user_id, **DEFAULT_PREFERENCES}
        return row

    def get_many(self, user_ids):
        """{user_id: preferences} for several users, defaults filled in."""
        if not user_ids:
            return {}
        rows = self.query_all(
            'SELECT * FROM notification_preferences WHERE user_id = ANY(%s::uuid[])',
            (list(user_ids),))
        found = {str(r['user_id']): r for r in rows}
        return {str(uid): found.get(str(uid), {'user_id': uid, **DEFAULT_PREFERENCES})
                for uid in user_ids}

    def upsert(self, user_id, updates):
        """Insert or update only the given boolean fields."""
        fields = [f for f in PREFERENCE_FIELDS if f in updates]
        if not fields:
            return None
        columns = ', '.join(['user_id'] + fields)
        placeholders = ', '.join(['%s'] * (len(fields) + 1))
        assignments = ', '.join(f'{f} = EXCLUDED.{f}' for f in fields)
        return self.execute(f'''
            INSERT INTO notification_preferences ({columns})
            VALUES ({placeholders})
            ON CONFLICT (user_id) DO UPDATE SET {assignments}, updated_at = NOW()
            RETURNING *
        ''', [user_id] + [bool(updates[f]) for f in fields], returning=True)
