"""Workstream verticals (reference data)."""
from core.base_repository import BaseRepository


class VerticalRepository(BaseRepository):

    def list_all(self):
        return self.query_all('SELECT * FROM workstream_verticals ORDER BY display_order, name')

    def get_by_id(self, vertical_id):
        return self.query_one('SELECT * FROM workstream_verticals WHERE id = %s', (vertical_id,))
