"""In-app notification repository (``notifications`` table)."""

import logging
from core.base_repository import BaseRepository

logger = logging.getLogger('howard.core.notifications.in_app_repo')

_INSERT = '''
    INSERT INTO notifications
        (org_id, user_id, type, title, message, action_url, related_resource_type, related_resource_id)
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
    RETURNING id
'''


class InAppNotificationRepository(BaseRepository):

    def create(self, user_id, title, type='info', message=None, action_url=None,
               resource_type=None, resource_id=None, org_id=None):
        """Create a notification for a user. Returns notification id."""
        row = self.execute(_INSERT, (org_id, user_id, type, title, message, action_url,
                                     resource_type, resource_id), returning=True)
        return row['id'] if row else None

    def create_bulk(self, user_ids, title, type='info', message=None, action_url=None,
                    resource_type=None, resource_id=None, org_id=None):
        if not user_ids:
            return []

        def _work(cursor):
            ids = []
            for uid in user_ids:
                cursor.execute(_INSERT, (org_id, uid, type, title, message, action_url,
                                         resource_type, resource_id))
                ids.append(cursor.fetchone()['id'])
            return ids
        return self.execute_many(_work)

    def get_for_user(self, user_id, limit=20, offset=0, unread_only=False):
        """Newest first."""
        where = 'WHERE user_id = %s'
        params = [user_id]
        if unread_only:
            where += ' AND is_read = FALSE'
        params.extend([limit, offset])
        return self.query_all(f'''
            SELECT * FROM notifications
            {where}
            ORDER BY created_at DESC
            LIMIT %s OFFSET %s
        ''', params)

    def get_unread_count(self, user_id):
        row = self.query_one(
            'SELECT COUNT(*) AS cnt FROM notifications WHERE user_id = %s AND is_read = FALSE',
            (user_id,))
        return row['cnt'] if row else 0

    def mark_read(self, notification_id, user_id):
        return self.execute(
            'UPDATE notifications SET is_read = TRUE WHERE id = %s AND user_id = %s',
            (notification_id, user_id)) > 0

    def mark_all_read(self, user_id):
        return self.execute(
            'UPDATE notifications SET is_read = TRUE WHERE user_id = %s AND is_read = FALSE',
            (user_id,))

    def delete_old(self, days=90):
        """Remove read notifications older than ``days``."""
        return self.execute(
            "DELETE FROM notifications WHERE is_read = TRUE AND created_at < NOW() - make_interval(days => %s)",
            (days,))
