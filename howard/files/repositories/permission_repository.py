"""Per-user file shares (``file_permissions``)."""
from core.base_repository import BaseRepository

PERMISSIONS = ('view', 'edit', 'delete')


class FilePermissionRepository(BaseRepository):

    def list_for_file(self, file_id):
        rows = self.query_all('''
            SELECT fp.id, fp.file_id, fp.user_id, fp.permission, fp.created_at,
                   p.full_name, p.email
            FROM file_permissions fp
            LEFT JOIN profiles p ON p.id = fp.user_id
            WHERE fp.file_id = %s
            ORDER BY fp.created_at
        ''', (file_id,))
        for row in rows:
            row['user'] = {'id': row['user_id'], 'full_name': row.pop('full_name'),
                           'email': row.pop('email')}
        return rows

    def user_ids_for_file(self, file_id):
        rows = self.query_all('SELECT user_id FROM file_permissions WHERE file_id = %s', (file_id,))
        return [r['user_id'] for r in rows]

    def replace(self, file_id, user_ids, permission='view'):
        """Swap the whole permission set for ``file_id`` in one transaction."""
        def _work(cursor):
            cursor.execute('DELETE FROM file_permissions WHERE file_id = %s', (file_id,))
            for user_id in user_ids:
                cursor.execute(
                    'INSERT INTO file_permissions (file_id, user_id, permission) VALUES (%s, %s, %s)',
                    (file_id, user_id, permission))
            return len(user_ids)
        return self.execute_many(_work)
