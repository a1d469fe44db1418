"""Workstream templates: the catalogue entries are stamped from."""
from core.base_repository import BaseRepository
from database import as_json

_SELECT = '''
    SELECT t.*, v.name AS vertical_name, v.display_order AS vertical_display_order
    FROM workstream_templates t
    LEFT JOIN workstream_verticals v ON v.id = t.vertical_id
'''

UPDATABLE_FIELDS = (
    'vertical_id', 'name', 'description', 'associated_software', 'timing',
    'display_order', 'default_sop', 'is_active',
)


def _shape(row):
    if row is None:
        return None
    row['vertical'] = {
        'id': row['vertical_id'],
        'name': row.pop('vertical_name'),
        'display_order': row.pop('vertical_display_order'),
    } if row.get('vertical_id') else None
    row.pop('vertical_name', None)
    row.pop('vertical_display_order', None)
    return row


class TemplateRepository(BaseRepository):

    def list_templates(self, vertical_id=None, timing=None, is_active=None, search=None):
        query = _SELECT + ' WHERE 1=1'
        params = []
        if vertical_id:
            query += ' AND t.vertical_id = %s'
            params.append(vertical_id)
        if timing:
            query += ' AND t.timing = %s'
            params.append(timing)
        if is_active is not None:
            query += ' AND t.is_active = %s'
            params.append(is_active)
        if search:
            query += ' AND t.name ILIKE %s'
            params.append(f'%{search}%')
        query += ' ORDER BY t.display_order, t.name'
        return [_shape(r) for r in self.query_all(query, params)]

    def get_by_id(self, template_id):
        return _shape(self.query_one(_SELECT + ' WHERE t.id = %s', (template_id,)))

    def get_many(self, template_ids):
        if not template_ids:
            return []
        rows = self.query_all(
            _SELECT + ' WHERE t.id = ANY(%s::uuid[]) ORDER BY v.display_order, t.display_order',
            (list(template_ids),))
        return [_shape(r) for r in rows]

    def create(self, fields, created_by):
        row = self.execute('''
            INSERT INTO workstream_templates
                (vertical_id, name, description, associated_software, timing,
                 display_order, default_sop, created_by)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id
        ''', (
            fields['vertical_id'], fields['name'], fields.get('description'),
            fields.get('associated_software'), fields.get('timing'),
            fields.get('display_order', 0), as_json(fields.get('default_sop')), created_by,
        ), returning=True)
        return self.get_by_id(row['id'])

    def update(self, template_id, fields):
        if 'default_sop' in fields:
            fields = dict(fields, default_sop=as_json(fields['default_sop']))
        clause, params = self.build_update(fields, UPDATABLE_FIELDS)
        if not clause:
            return self.get_by_id(template_id)
        updated = self.execute(
            f'UPDATE workstream_templates SET {clause}, updated_at = NOW() WHERE id = %s',
            params + [template_id])
        return self.get_by_id(template_id) if updated else None

    def deactivate(self, template_id):
        return self.execute(
            'UPDATE workstream_templates SET is_active = FALSE, updated_at = NOW() '
            'WHERE id = %s RETURNING id, name', (template_id,), returning=True)
