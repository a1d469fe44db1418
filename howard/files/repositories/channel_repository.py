"""File channels: one shared space per (team org, client org)."""
from core.base_repository import BaseRepository

_SELECT = '''
    SELECT ch.*,
           o.name AS client_org_name, o.slug AS client_org_slug, o.logo_url AS client_org_logo_url,
           cp.full_name AS created_by_name, cp.email AS created_by_email,
           (SELECT COUNT(*) FROM files f WHERE f.channel_id = ch.id) AS file_count,
           (SELECT MAX(f.created_at) FROM files f WHERE f.channel_id = ch.id) AS latest_file_at,
           contact.id AS contact_id, contact.full_name AS contact_full_name,
           contact.email AS contact_email
    FROM file_channels ch
    LEFT JOIN organizations o ON o.id = ch.client_org_id
    LEFT JOIN profiles cp ON cp.id = ch.created_by
    LEFT JOIN LATERAL (
        SELECT id, full_name, email FROM profiles
        WHERE org_id = ch.client_org_id AND role = 'client' AND is_active
        ORDER BY created_at
        LIMIT 1
    ) contact ON TRUE
'''

UPDATABLE_FIELDS = ('name', 'description')


def _shape(row):
    """Nest the client org, creator and first active client contact."""
    if row is None:
        return None
    row['client_organization'] = {
        'id': row['client_org_id'],
        'name': row.pop('client_org_name'),
        'slug': row.pop('client_org_slug'),
        'logo_url': row.pop('client_org_logo_url'),
    }
    name, email = row.pop('created_by_name'), row.pop('created_by_email')
    row['created_by_profile'] = {'id': row['created_by'], 'full_name': name, 'email': email} \
        if row.get('created_by') else None
    contact_id = row.pop('contact_id')
    contact = {'id': contact_id, 'full_name': row.pop('contact_full_name'),
               'email': row.pop('contact_email')}
    row['primary_contact'] = contact if contact_id else None
    row['file_count'] = int(row.get('file_count') or 0)
    row['latest_activity'] = row.pop('latest_file_at') or row.get('updated_at')
    return row


class ChannelRepository(BaseRepository):

    def list_for_team_org(self, org_id):
        return [_shape(r) for r in self.query_all(
            _SELECT + ' WHERE ch.org_id = %s ORDER BY ch.updated_at DESC', (org_id,))]

    def list_for_client_org(self, client_org_id):
        return [_shape(r) for r in self.query_all(
            _SELECT + ' WHERE ch.client_org_id = %s ORDER BY ch.updated_at DESC', (client_org_id,))]

    def get_by_id(self, channel_id):
        return _shape(self.query_one(_SELECT + ' WHERE ch.id = %s', (channel_id,)))

    def find(self, org_id, client_org_id):
        return self.query_one(
            'SELECT id FROM file_channels WHERE org_id = %s AND client_org_id = %s',
            (org_id, client_org_id))

    def create(self, org_id, client_org_id, name, description, created_by):
        row = self.execute('''
            INSERT INTO file_channels (org_id, client_org_id, name, description, created_by)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id
        ''', (org_id, client_org_id, name, description, created_by), returning=True)
        return self.get_by_id(row['id'])

    def update(self, channel_id, fields):
        clause, params = self.build_update(fields, UPDATABLE_FIELDS)
        if clause:
            self.execute(f'UPDATE file_channels SET {clause}, updated_at = NOW() WHERE id = %s',
                         params + [channel_id])
        return self.get_by_id(channel_id)

    def touch(self, channel_id):
        self.execute('UPDATE file_channels SET updated_at = NOW() WHERE id = %s', (channel_id,))

    def delete(self, channel_id):
        """Drop the channel with its file rows and folders."""
        def _work(cursor):
            cursor.execute('DELETE FROM files WHERE channel_id = %s', (channel_id,))
            cursor.execute('DELETE FROM channel_folders WHERE channel_id = %s', (channel_id,))
            cursor.execute('DELETE FROM file_channels WHERE id = %s', (channel_id,))
            return cursor.rowcount > 0
        return self.execute_many(_work)
