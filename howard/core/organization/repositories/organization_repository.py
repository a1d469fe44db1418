"""Organization Repository - tenant records."""
import re
import logging
from typing import Optional

from core.base_repository import BaseRepository

logger = logging.getLogger('howard.core.organization.organization_repository')

UPDATABLE_FIELDS = ('name', 'slug', 'logo_url')


def slugify(name: str) -> str:
    """'Acme & Sons, Inc.' -> 'acme-sons-inc'"""
    slug = re.sub(r'[^a-z0-9]+', '-', (name or '').lower()).strip('-')
    return slug or 'org'


class OrganizationRepository(BaseRepository):
    """Repository for organization CRUD."""

    def get_all(self, org_ids: list = None) -> list[dict]:
        """All organizations with member counts, optionally limited to ``org_ids``."""
        query = '''
            SELECT o.*,
                   (SELECT COUNT(*) FROM profiles p WHERE p.org_id = o.id) AS user_count
            FROM organizations o
        '''
        params = ()
        if org_ids is not None:
            query += ' WHERE o.id = ANY(%s::uuid[])'
            params = (list(org_ids),)
        query += ' ORDER BY o.name'
        return self.query_all(query, params)

    def get_by_id(self, org_id: str) -> Optional[dict]:
        return self.query_one('SELECT * FROM organizations WHERE id = %s', (org_id,))

    def get_by_slug(self, slug: str) -> Optional[dict]:
        return self.query_one('SELECT * FROM organizations WHERE slug = %s', (slug,))

    def create(self, name: str, slug: str = None, logo_url: str = None) -> dict:
        """Insert an organization. A numeric suffix keeps derived slugs unique."""
        base = slugify(slug or name)
        candidate, n = base, 1
        while self.get_by_slug(candidate):
            n += 1
            candidate = f'{base}-{n}'
        return self.execute('''
            INSERT INTO organizations (name, slug, logo_url)
            VALUES (%s, %s, %s)
            RETURNING *
        ''', (name.strip(), candidate, logo_url), returning=True)

    def update(self, org_id: str, fields: dict) -> Optional[dict]:
        clause, params = self.build_update(fields, UPDATABLE_FIELDS)
        if not clause:
            return None
        params.append(org_id)
        return self.execute(
            f'UPDATE organizations SET {clause}, updated_at = NOW() WHERE id = %s RETURNING *',
            params, returning=True)

    def delete(self, org_id: str) -> bool:
        deleted = self.execute('DELETE FROM organizations WHERE id = %s', (org_id,)) > 0
        if deleted:
            logger.info(f'Organization {org_id} deleted')
        return deleted
