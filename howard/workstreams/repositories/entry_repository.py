"""Workstream entries: one tracked line of work with a red/yellow/green status."""
from core.base_repository import BaseRepository
from database import as_json

_SELECT = '''
    SELECT e.*,
           v.name AS vertical_name, v.display_order AS vertical_display_order,
           p.full_name AS _p_full_name, p.email AS _p_email, p.avatar_url AS _p_avatar_url,
           tpl.name AS template_name,
           w.org_id AS workstream_org_id, w.name AS workstream_name
    FROM workstream_entries e
    LEFT JOIN workstream_verticals v ON v.id = e.vertical_id
    LEFT JOIN profiles p ON p.id = e.point_person_id
    LEFT JOIN workstream_templates tpl ON tpl.id = e.template_id
    LEFT JOIN client_workstreams w ON w.id = e.workstream_id
'''

UPDATABLE_FIELDS = (
    'name', 'description', 'associated_software', 'timing', 'point_person_id',
    'status', 'notes', 'custom_sop', 'display_order', 'is_active',
)

_INSERT = '''
    INSERT INTO workstream_entries
        (workstream_id, vertical_id, name, description, associated_software, timing,
         point_person_id, status, notes, custom_sop, display_order, template_id)
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
    RETURNING id
'''


def _insert_params(fields):
    return (
        fields['workstream_id'], fields['vertical_id'], fields['name'],
        fields.get('description'), fields.get('associated_software'), fields.get('timing'),
        fields.get('point_person_id'), fields['status'], fields.get('notes'),
        as_json(fields.get('custom_sop')), fields.get('display_order', 0),
        fields.get('template_id'),
    )


def _shape(row):
    """Nest joined columns; keeps flat vertical_name for the rollup."""
    if row is None:
        return None
    person = {k[3:]: row.pop(k) for k in [k for k in row if k.startswith('_p_')]}
    row['point_person'] = {'id': row['point_person_id'], **person} if row.get('point_person_id') else None
    row['vertical'] = {
        'id': row['vertical_id'],
        'name': row['vertical_name'],
        'display_order': row['vertical_display_order'],
    }
    template_name = row.pop('template_name')
    row['template'] = {'id': row['template_id'], 'name': template_name} if row.get('template_id') else None
    row['workstream'] = {
        'id': row['workstream_id'],
        'org_id': row.pop('workstream_org_id'),
        'name': row.pop('workstream_name'),
    }
    return row


class EntryRepository(BaseRepository):

    def list_entries(self, workstream_id=None, vertical_id=None, status=None,
                     point_person_id=None, is_active=True):
        query = _SELECT + ' WHERE 1=1'
        params = []
        for column, value in (('e.workstream_id', workstream_id), ('e.vertical_id', vertical_id),
                              ('e.status', status), ('e.point_person_id', point_person_id)):
            if value:
                query += f' AND {column} = %s'
                params.append(value)
        if is_active is not None:
            query += ' AND e.is_active = %s'
            params.append(is_active)
        query += ' ORDER BY e.display_order, e.created_at'
        return [_shape(r) for r in self.query_all(query, params)]

    def get_by_id(self, entry_id):
        return _shape(self.query_one(_SELECT + ' WHERE e.id = %s', (entry_id,)))

    def create(self, fields):
        row = self.execute(_INSERT, _insert_params(fields), returning=True)
        return self.get_by_id(row['id'])

    def create_from_templates(self, workstream_id, templates):
        """Stamp one yellow entry per template after the current last entry."""
        def _work(cursor):
            cursor.execute(
                'SELECT COALESCE(MAX(display_order), 0) AS max_order '
                'FROM workstream_entries WHERE workstream_id = %s', (workstream_id,))
            order = cursor.fetchone()['max_order']
            ids = []
            for template in templates:
                order += 1
                cursor.execute(_INSERT, _insert_params({
                    'workstream_id': workstream_id,
                    'vertical_id': template['vertical_id'],
                    'name': template['name'],
                    'description': template.get('description'),
                    'associated_software': template.get('associated_software'),
                    'timing': template.get('timing'),
                    'status': 'yellow',
                    'custom_sop': template.get('default_sop'),
                    'display_order': order,
                    'template_id': template['id'],
                }))
                ids.append(cursor.fetchone()['id'])
            return ids

        ids = self.execute_many(_work)
        rows = self.query_all(_SELECT + ' WHERE e.id = ANY(%s::uuid[]) ORDER BY e.display_order',
                              ([str(i) for i in ids],))
        return [_shape(r) for r in rows]

    def update(self, entry_id, fields):
        if 'custom_sop' in fields:
            fields = dict(fields, custom_sop=as_json(fields['custom_sop']))
        clause, params = self.build_update(fields, UPDATABLE_FIELDS)
        if not clause:
            return self.get_by_id(entry_id)
        updated = self.execute(
            f'UPDATE workstream_entries SET {clause}, updated_at = NOW() WHERE id = %s',
            params + [entry_id])
        return self.get_by_id(entry_id) if updated else None

    def deactivate(self, entry_id):
        return self.execute(
            'UPDATE workstream_entries SET is_active = FALSE, updated_at = NOW() '
            'WHERE id = %s RETURNING id, workstream_id, name', (entry_id,), returning=True)
