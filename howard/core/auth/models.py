"""Profile model for Flask-Login.

A profile row shares its id with the Supabase auth user.
"""
from flask_login import UserMixin

ROLES = ('admin', 'manager', 'user', 'client', 'client_no_access')
TEAM_ROLES = ('admin', 'manager', 'user')
CLIENT_ROLES = ('client', 'client_no_access')


class Profile(UserMixin):
    """Authenticated caller, built from a ``profiles`` row."""

    def __init__(self, data):
        self.id = str(data['id'])
        self.email = data.get('email')
        self.full_name = data.get('full_name')
        self.role = data.get('role') or 'client_no_access'
        self.org_id = str(data['org_id']) if data.get('org_id') else None
        self.avatar_url = data.get('avatar_url')
        self.phone = data.get('phone')
        self.is_onboarded = bool(data.get('is_onboarded', False))
        self.is_active_profile = bool(data.get('is_active', False))
        self.dashboard_iframe_url = data.get('dashboard_iframe_url')
        self.allowed_org_ids = [str(o) for o in (data.get('allowed_org_ids') or [])]
        self.access_token = data.get('access_token')

    @property
    def is_active(self):
        return self.is_active_profile

    @property
    def is_admin(self):
        return self.role == 'admin'

    @property
    def is_client(self):
        return self.role in CLIENT_ROLES

    @property
    def is_team(self):
        return self.role in TEAM_ROLES

    @property
    def is_admin_or_manager(self):
        return self.role in ('admin', 'manager')

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'role': self.role,
            'org_id': self.org_id,
            'avatar_url': self.avatar_url,
            'phone': self.phone,
            'is_active': self.is_active_profile,
            'is_onboarded': self.is_onboarded,
            'dashboard_iframe_url': self.dashboard_iframe_url,
            'allowed_org_ids': self.allowed_org_ids,
        }
