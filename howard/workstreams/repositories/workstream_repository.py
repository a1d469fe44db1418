"""Client workstreams: one container of entries per client org."""
from core.base_repository import BaseRepository

_SELECT = '''
    SELECT w.*, o.name AS org_name, o.slug AS org_slug,
           (SELECT COUNT(*) FROM workstream_entries e
            WHERE e.workstream_id = w.id AND e.is_active) AS entry_count
    FROM client_workstreams w
    LEFT JOIN organizations o ON o.id = w.org_id
'''

UPDATABLE_FIELDS = ('name', 'notes', 'is_active')


def _shape(row):
    if row is None:
        return None
    row['organization'] = {
        'id': row['org_id'],
        'name': row.pop('org_name'),
        'slug': row.pop('org_slug'),
    }
    return row


class WorkstreamRepository(BaseRepository):

    def list_workstreams(self, org_id=None, is_active=None):
        query = _SELECT + ' WHERE 1=1'
        params = []
        if org_id:
            query += ' AND w.org_id = %s'
            params.append(org_id)
        if is_active is not None:
            query += ' AND w.is_active = %s'
            params.append(is_active)
        query += ' ORDER BY w.created_at DESC'
        return [_shape(r) for r in self.query_all(query, params)]

    def get_by_id(self, workstream_id):
        return _shape(self.query_one(_SELECT + ' WHERE w.id = %s', (workstream_id,)))

    def get_org_id(self, workstream_id):
        row = self.query_one('SELECT org_id FROM client_workstreams WHERE id = %s', (workstream_id,))
        return row['org_id'] if row else None

    def find_active(self, org_id, name):
        return self.query_one(
            'SELECT id FROM client_workstreams WHERE org_id = %s AND name = %s AND is_active',
            (org_id, name))

    def create(self, fields, created_by):
        row = self.execute('''
            INSERT INTO client_workstreams (org_id, name, notes, created_by)
            VALUES (%s, %s, %s, %s)
            RETURNING id
        ''', (fields['org_id'], fields['name'], fields.get('notes'), created_by), returning=True)
        return self.get_by_id(row['id'])

    def update(self, workstream_id, fields):
        clause, params = self.build_update(fields, UPDATABLE_FIELDS)
        if not clause:
            return self.get_by_id(workstream_id)
        updated = self.execute(
            f'UPDATE client_workstreams SET {clause}, updated_at = NOW() WHERE id = %s',
            params + [workstream_id])
        return self.get_by_id(workstream_id) if updated else None

    def deactivate(self, workstream_id):
        return self.execute(
            'UPDATE client_workstreams SET is_active = FALSE, updated_at = NOW() '
            'WHERE id = %s RETURNING id, org_id', (workstream_id,), returning=True)
