"""Profile Repository - data access for the ``profiles`` table.

Profiles are created by the auth platform on sign-up/invite; this code
reads them and applies the edits the API allows.
"""
from typing import Optional, List, Dict, Any

from core.base_repository import BaseRepository

PROFILE_COLUMNS = '''
    p.id, p.email, p.full_name, p.role, p.org_id, p.avatar_url, p.phone,
    p.is_active, p.is_onboarded, p.dashboard_iframe_url, p.allowed_org_ids::text[] AS allowed_org_ids,
    p.created_at, p.updated_at
'''

UPDATABLE_FIELDS = (
    'full_name', 'role', 'org_id', 'is_active', 'avatar_url', 'phone',
    'allowed_org_ids', 'is_onboarded', 'dashboard_iframe_url',
)


class ProfileRepository(BaseRepository):
    """Repository for profile lookups and edits."""

    def get_by_id(self, profile_id: str) -> Optional[Dict[str, Any]]:
        return self.query_one(f'''
            SELECT {PROFILE_COLUMNS}, o.name AS org_name
            FROM profiles p
            LEFT JOIN organizations o ON o.id = p.org_id
            WHERE p.id = %s
        ''', (profile_id,))

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.query_one(f'''
            SELECT {PROFILE_COLUMNS}
            FROM profiles p
            WHERE LOWER(p.email) = LOWER(%s)
        ''', (email.strip(),))

    def get_many(self, profile_ids: List[str]) -> List[Dict[str, Any]]:
        if not profile_ids:
            return []
        return self.query_all(f'''
            SELECT {PROFILE_COLUMNS}
            FROM profiles p
            WHERE p.id = ANY(%s::uuid[])
        ''', (list(profile_ids),))

    def list_all(self, org_id: str = None, role: str = None,
                 active_only: bool = False) -> List[Dict[str, Any]]:
        """All profiles with their organization name, optionally filtered."""
        query = f'''
            SELECT {PROFILE_COLUMNS}, o.name AS org_name
            FROM profiles p
            LEFT JOIN organizations o ON o.id = p.org_id
            WHERE 1=1
        '''
        params = []
        if org_id:
            query += ' AND p.org_id = %s'
            params.append(org_id)
        if role:
            query += ' AND p.role = %s'
            params.append(role)
        if active_only:
            query += ' AND p.is_active = TRUE'
        query += ' ORDER BY p.full_name NULLS LAST, p.email'
        return self.query_all(query, params)

    def list_clients_outside_org(self, org_id: Optional[str]) -> List[Dict[str, Any]]:
        """Active client profiles that do not belong to ``org_id``, by full name."""
        return self.query_all('''
            SELECT p.id, p.email, p.full_name, p.role, p.org_id,
                   o.id AS organization_id, o.name AS org_name
            FROM profiles p
            LEFT JOIN organizations o ON o.id = p.org_id
            WHERE p.role = 'client'
              AND p.is_active = TRUE
              AND p.org_id IS DISTINCT FROM %s
            ORDER BY p.full_name NULLS LAST
        ''', (org_id,))

    def get_client_ids(self) -> List[str]:
        rows = self.query_all("SELECT id FROM profiles WHERE role = 'client'")
        return [r['id'] for r in rows]

    def list_active_for_mentions(self) -> List[Dict[str, Any]]:
        return self.query_all('''
            SELECT id, full_name, email
            FROM profiles
            WHERE is_active = TRUE
        ''')

    def create(self, profile_id: str, email: str, full_name: str, role: str,
               org_id: Optional[str], is_active: bool = False) -> Dict[str, Any]:
        return self.execute('''
            INSERT INTO profiles (id, email, full_name, role, org_id, is_active)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING *
        ''', (profile_id, email.strip().lower(), full_name, role, org_id, is_active),
            returning=True)

    def update(self, profile_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply the allowed subset of ``fields``; returns the updated row."""
        clause, params = self.build_update(fields, UPDATABLE_FIELDS, casts={'allowed_org_ids': 'uuid[]'})
        if not clause:
            return None
        params.append(profile_id)
        return self.execute(
            f'UPDATE profiles SET {clause}, updated_at = NOW() WHERE id = %s RETURNING *',
            params, returning=True)

    def set_active(self, profile_id: str, is_active: bool = True) -> bool:
        return self.execute(
            'UPDATE profiles SET is_active = %s, updated_at = NOW() WHERE id = %s',
            (is_active, profile_id)) > 0

    def set_dashboard_url_for_org_clients(self, org_id: str, url: Optional[str]) -> int:
        """Set ``dashboard_iframe_url`` on every client profile of an org."""
        return self.execute('''
            UPDATE profiles SET dashboard_iframe_url = %s, updated_at = NOW()
            WHERE org_id = %s AND role = 'client'
        ''', (url, org_id))
