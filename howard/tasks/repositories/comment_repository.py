"""Comment Repository - ``task_comments``."""
from core.base_repository import BaseRepository

_COMMENT_SELECT = '''
    SELECT tc.*, tc.mentions::text[] AS mentions, p.full_name AS user_full_name, p.email AS user_email,
           p.avatar_url AS user_avatar_url, p.role AS user_role
    FROM task_comments tc
    LEFT JOIN profiles p ON p.id = tc.user_id
'''


def _shape(row):
    if row is None:
        return None
    row['user'] = {
        'id': row['user_id'],
        'full_name': row.pop('user_full_name'),
        'email': row.pop('user_email'),
        'avatar_url': row.pop('user_avatar_url'),
        'role': row.pop('user_role'),
    }
    return row


class CommentRepository(BaseRepository):

    def get_by_id(self, comment_id):
        return _shape(self.query_one(_COMMENT_SELECT + ' WHERE tc.id = %s', (comment_id,)))

    def list_for_task(self, task_id, include_internal=True):
        """Oldest first."""
        query = _COMMENT_SELECT + ' WHERE tc.task_id = %s'
        if not include_internal:
            query += ' AND tc.is_internal = FALSE'
        query += ' ORDER BY tc.created_at ASC'
        return [_shape(r) for r in self.query_all(query, (task_id,))]

    def create(self, task_id, user_id, content, mentions, is_internal):
        row = self.execute('''
            INSERT INTO task_comments (task_id, user_id, content, mentions, is_internal)
            VALUES (%s, %s, %s, %s::uuid[], %s)
            RETURNING id
        ''', (task_id, user_id, content, list(mentions), bool(is_internal)), returning=True)
        return self.get_by_id(row['id'])

    def delete(self, comment_id):
        return self.execute('DELETE FROM task_comments WHERE id = %s', (comment_id,)) > 0
