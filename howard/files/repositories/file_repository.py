"""File Repository - metadata rows for objects in the storage bucket."""
from typing import Optional

from core.base_repository import BaseRepository
from ..paths import like_prefix

_SELECT = '''
    SELECT f.*, p.full_name AS _u_full_name, p.email AS _u_email,
           ch.client_org_id AS channel_client_org_id
    FROM files f
    LEFT JOIN profiles p ON p.id = f.uploaded_by
    LEFT JOIN file_channels ch ON ch.id = f.channel_id
'''


def _shape(row):
    if row is None:
        return None
    uploader = {k[3:]: row.pop(k) for k in [k for k in row if k.startswith('_u_')]}
    row['uploaded_by_profile'] = {'id': row['uploaded_by'], **uploader} if row.get('uploaded_by') else None
    return row


class FileRepository(BaseRepository):

    def get_by_id(self, file_id) -> Optional[dict]:
        return _shape(self.query_one(_SELECT + ' WHERE f.id = %s', (file_id,)))

    def list_for_org(self, org_id, folder_path='/', uploaded_by=None):
        query = _SELECT + ' WHERE f.org_id = %s AND f.folder_path = %s AND f.channel_id IS NULL'
        params = [org_id, folder_path]
        if uploaded_by:
            query += ' AND f.uploaded_by = %s'
            params.append(uploaded_by)
        query += ' ORDER BY f.created_at DESC'
        return [_shape(r) for r in self.query_all(query, params)]

    def list_visible_to_client(self, user_id, folder_path='/'):
        """Files the user uploaded or that were shared with them."""
        rows = self.query_all(_SELECT + '''
            WHERE f.folder_path = %s
              AND (f.uploaded_by = %s
                   OR f.id IN (SELECT file_id FROM file_permissions WHERE user_id = %s))
            ORDER BY f.created_at DESC
        ''', (folder_path, user_id, user_id))
        return [_shape(r) for r in rows]

    def list_for_channel(self, channel_id, folder_path='/'):
        rows = self.query_all(
            _SELECT + ' WHERE f.channel_id = %s AND f.folder_path = %s ORDER BY f.created_at DESC',
            (channel_id, folder_path))
        return [_shape(r) for r in rows]

    def storage_paths_for_channel(self, channel_id, folder_prefix=None):
        query = 'SELECT storage_path FROM files WHERE channel_id = %s'
        params = [channel_id]
        if folder_prefix:
            query += ' AND folder_path LIKE %s'
            params.append(like_prefix(folder_prefix))
        return [r['storage_path'] for r in self.query_all(query, params)]

    def create(self, fields):
        self.execute('''
            INSERT INTO files
                (id, org_id, channel_id, name, size, mime_type, storage_path,
                 folder_path, uploaded_by, description)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        ''', (
            fields['id'], fields['org_id'], fields.get('channel_id'), fields['name'],
            fields['size'], fields['mime_type'], fields['storage_path'],
            fields['folder_path'], fields['uploaded_by'], fields.get('description'),
        ))
        return self.get_by_id(fields['id'])

    def delete(self, file_id):
        return self.execute('DELETE FROM files WHERE id = %s', (file_id,)) > 0
