"""User Service - client directory, invitations and admin profile edits."""
import re
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

from core.utils.logging_config import get_logger
from core.auth.models import ROLES
from core.auth.permissions import can_grant_role, is_admin_or_manager
from core.auth.repositories import ProfileRepository, ActivityRepository
from core.organization.repositories import MembershipRepository
from core.supabase import get_auth_client
from core.supabase.client import SupabaseError

logger = get_logger('howard.users')

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
ADMIN_EDITABLE_FIELDS = (
    'full_name', 'role', 'org_id', 'is_active', 'avatar_url', 'allowed_org_ids', 'is_onboarded',
)
SELF_EDITABLE_FIELDS = ('full_name', 'avatar_url', 'is_onboarded')
UNKNOWN_ORG = 'Unknown'


@dataclass
class UserResult:
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    status_code: int = 200


def group_clients_by_org(clients: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Group client profiles under their organization name.

    Profiles without an organization land under ``Unknown``. Input order is
    kept inside each group.
    """
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for client in clients:
        org = client.get('organizations') or {}
        org_name = org.get('name') or client.get('org_name') or UNKNOWN_ORG
        grouped.setdefault(org_name, []).append({
            'id': client['id'],
            'email': client.get('email'),
            'full_name': client.get('full_name'),
            'role': client.get('role'),
            'org_id': client.get('org_id'),
            'org_name': org_name,
        })
    return grouped


def _shape_client(row):
    org = None
    if row.get('organization_id'):
        org = {'id': row['organization_id'], 'name': row.get('org_name')}
    return {
        'id': row['id'],
        'email': row.get('email'),
        'full_name': row.get('full_name'),
        'role': row.get('role'),
        'org_id': row.get('org_id'),
        'organizations': org,
    }


class UserService:

    def __init__(self, auth_client=None):
        self.profile_repo = ProfileRepository()
        self.membership_repo = MembershipRepository()
        self.activity_repo = ActivityRepository()
        self._client = auth_client

    @property
    def client(self):
        if self._client is None:
            self._client = get_auth_client()
        return self._client

    def list_clients(self, caller_org_id: Optional[str]) -> Dict[str, Any]:
        """Active clients of the organizations we serve (not the caller's own)."""
        clients = [_shape_client(r) for r in self.profile_repo.list_clients_outside_org(caller_org_id)]
        return {'clients': clients, 'clientsByOrg': group_clients_by_org(clients)}

    def invite(self, inviter, email: str, full_name: str, role: str,
               org_id: Optional[str] = None) -> UserResult:
        """Create the auth user through an invite email, then its inactive profile."""
        email = (email or '').strip().lower()
        full_name = (full_name or '').strip()
        if not email or not full_name or not role:
            return UserResult(False, error='Email, full name, and role are required', status_code=400)
        if not EMAIL_RE.match(email):
            return UserResult(False, error='Invalid email address', status_code=400)
        if role not in ROLES:
            return UserResult(False, error='Invalid role', status_code=400)
        if not can_grant_role(inviter, role):
            return UserResult(False, error='Only admins can assign admin or manager roles', status_code=403)
        if self.profile_repo.get_by_email(email):
            return UserResult(False, error='User with this email already exists', status_code=409)

        org_id = org_id or inviter.org_id
        try:
            auth_user = self.client.admin_invite_user(
                email, {'full_name': full_name, 'role': role, 'org_id': org_id})
        except SupabaseError as e:
            logger.error(f'Invite failed for {email}: {e}')
            return UserResult(False, error='Failed to send invitation', status_code=500)

        profile = self.profile_repo.get_by_id(auth_user['id'])
        if profile is None:
            profile = self.profile_repo.create(auth_user['id'], email, full_name, role, org_id)
        if org_id:
            self.membership_repo.upsert(auth_user['id'], org_id, is_primary=True)

        self.activity_repo.try_log('user_invited', inviter.id, org_id=org_id,
                                   resource_type='profile', resource_id=auth_user['id'],
                                   details={'email': email, 'role': role})
        return UserResult(True, data={'profile': profile}, status_code=201)

    def update_profile(self, editor, target_id: str, body: Dict[str, Any]) -> UserResult:
        """Admin/manager edit of any profile, or a user editing themselves."""
        if target_id != editor.id and not is_admin_or_manager(editor):
            return UserResult(False, status_code=403,
                              error='Admin or manager access required to update other users')

        role = body.get('role')
        if role is not None:
            if role not in ROLES:
                return UserResult(False, error='Invalid role', status_code=400)
            if role in ('admin', 'manager') and not can_grant_role(editor, role):
                return UserResult(False, error='Only admins can assign admin or manager roles',
                                  status_code=403)
            if target_id == editor.id and role != editor.role and not is_admin_or_manager(editor):
                return UserResult(False, error='You cannot change your own role', status_code=403)

        allowed = ADMIN_EDITABLE_FIELDS if is_admin_or_manager(editor) else SELF_EDITABLE_FIELDS
        updates = {k: body[k] for k in allowed if k in body}
        if not updates:
            return UserResult(False, error='No valid fields to update', status_code=400)

        profile = self.profile_repo.update(target_id, updates)
        if profile is None:
            return UserResult(False, error='User not found', status_code=404)

        if updates.get('org_id'):
            self.membership_repo.upsert(target_id, updates['org_id'], is_primary=True)

        self.activity_repo.try_log('profile_updated', editor.id, org_id=editor.org_id,
                                   resource_type='profile', resource_id=target_id,
                                   details={'fields': sorted(updates)})
        return UserResult(True, data={'profile': profile})
