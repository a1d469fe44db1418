"""Membership Repository - ``user_organizations`` (user <-> org, one primary per user)."""
from typing import Optional

from core.base_repository import BaseRepository

_ORG_MEMBERSHIP_SELECT = '''
    SELECT uo.id, uo.user_id, uo.org_id, uo.is_primary, uo.created_at,
           o.name AS org_name, o.slug AS org_slug, o.logo_url AS org_logo_url
    FROM user_organizations uo
    JOIN organizations o ON o.id = uo.org_id
'''


def _nest_org(row):
    """Fold the joined organization columns into an ``organization`` object."""
    if row is None:
        return None
    row['organization'] = {
        'id': row['org_id'],
        'name': row.pop('org_name'),
        'slug': row.pop('org_slug'),
        'logo_url': row.pop('org_logo_url'),
    }
    return row


class MembershipRepository(BaseRepository):

    def get_by_id(self, membership_id: str) -> Optional[dict]:
        return _nest_org(self.query_one(_ORG_MEMBERSHIP_SELECT + ' WHERE uo.id = %s', (membership_id,)))

    def list_for_user(self, user_id: str) -> list[dict]:
        """A user's organizations, primary first."""
        rows = self.query_all(
            _ORG_MEMBERSHIP_SELECT + ' WHERE uo.user_id = %s ORDER BY uo.is_primary DESC, o.name',
            (user_id,))
        return [_nest_org(r) for r in rows]

    def list_for_org(self, org_id: str) -> list[dict]:
        """Members of an organization with their profile."""
        rows = self.query_all('''
            SELECT uo.id, uo.user_id, uo.is_primary, uo.created_at,
                   p.email, p.full_name, p.role, p.avatar_url, p.is_active
            FROM user_organizations uo
            JOIN profiles p ON p.id = uo.user_id
            WHERE uo.org_id = %s
            ORDER BY p.full_name NULLS LAST
        ''', (org_id,))
        for r in rows:
            r['profile'] = {
                'id': r['user_id'],
                'email': r.pop('email'),
                'full_name': r.pop('full_name'),
                'role': r.pop('role'),
                'avatar_url': r.pop('avatar_url'),
                'is_active': r.pop('is_active'),
            }
        return rows

    def org_ids_for_user(self, user_id: str) -> list[str]:
        rows = self.query_all('SELECT org_id FROM user_organizations WHERE user_id = %s', (user_id,))
        return [r['org_id'] for r in rows]

    def upsert(self, user_id: str, org_id: str, is_primary: bool = False) -> dict:
        """Add (or update) a membership; a new primary clears the previous one."""
        def _work(cursor):
            if is_primary:
                cursor.execute('''
                    UPDATE user_organizations SET is_primary = FALSE
                    WHERE user_id = %s AND is_primary = TRUE AND org_id <> %s
                ''', (user_id, org_id))
            cursor.execute('''
                INSERT INTO user_organizations (user_id, org_id, is_primary)
                VALUES (%s, %s, %s)
                ON CONFLICT (user_id, org_id) DO UPDATE SET is_primary = EXCLUDED.is_primary
                RETURNING id
            ''', (user_id, org_id, bool(is_primary)))
            return cursor.fetchone()['id']

        membership_id = self.execute_many(_work)
        return self.get_by_id(membership_id)

    def set_primary(self, membership_id: str, is_primary: bool) -> Optional[dict]:
        existing = self.query_one('SELECT user_id FROM user_organizations WHERE id = %s', (membership_id,))
        if not existing:
            return None

        def _work(cursor):
            if is_primary:
                cursor.execute('''
                    UPDATE user_organizations SET is_primary = FALSE
                    WHERE user_id = %s AND is_primary = TRUE AND id <> %s
                ''', (existing['user_id'], membership_id))
            cursor.execute('UPDATE user_organizations SET is_primary = %s WHERE id = %s',
                           (bool(is_primary), membership_id))

        self.execute_many(_work)
        return self.get_by_id(membership_id)

    def delete(self, membership_id: str) -> bool:
        return self.execute('DELETE FROM user_organizations WHERE id = %s', (membership_id,)) > 0

    def delete_for_user_org(self, user_id: str, org_id: str) -> bool:
        return self.execute(
            'DELETE FROM user_organizations WHERE user_id = %s AND org_id = %s',
            (user_id, org_id)) > 0
