"""Channel folders. Files reference folders by path, not by id."""
import psycopg2

from core.base_repository import BaseRepository
from ..paths import like_prefix


class DuplicateFolderError(Exception):
    pass


class FolderRepository(BaseRepository):

    def list_for_channel(self, channel_id, parent_path='/'):
        return self.query_all('''
            SELECT cf.*, p.full_name AS created_by_name
            FROM channel_folders cf
            LEFT JOIN profiles p ON p.id = cf.created_by
            WHERE cf.channel_id = %s AND cf.parent_path = %s
            ORDER BY cf.name
        ''', (channel_id, parent_path))

    def get_by_id(self, folder_id):
        return self.query_one('''
            SELECT cf.*, ch.org_id AS channel_org_id
            FROM channel_folders cf
            JOIN file_channels ch ON ch.id = cf.channel_id
            WHERE cf.id = %s
        ''', (folder_id,))

    def create(self, channel_id, name, parent_path, created_by):
        try:
            return self.execute('''
                INSERT INTO channel_folders (channel_id, name, parent_path, created_by)
                VALUES (%s, %s, %s, %s)
                RETURNING *
            ''', (channel_id, name, parent_path, created_by), returning=True)
        except psycopg2.IntegrityError as e:
            raise DuplicateFolderError(name) from e

    def delete_tree(self, folder, folder_path):
        """Delete the folder, its sub-folders and the file rows under ``folder_path``."""
        def _work(cursor):
            cursor.execute(
                'DELETE FROM files WHERE channel_id = %s AND folder_path LIKE %s',
                (folder['channel_id'], like_prefix(folder_path)))
            files_removed = cursor.rowcount
            cursor.execute(
                'DELETE FROM channel_folders WHERE channel_id = %s AND parent_path LIKE %s',
                (folder['channel_id'], like_prefix(folder_path)))
            cursor.execute('DELETE FROM channel_folders WHERE id = %s', (folder['id'],))
            return files_removed
        return self.execute_many(_work)
