"""Role predicates shared by the API blueprints.

Every function takes a profile (anything with ``id``, ``role`` and ``org_id``)
plus the record being accessed as a dict.
"""
from .models import TEAM_ROLES, CLIENT_ROLES


def is_admin(profile):
    return profile is not None and profile.role == 'admin'


def is_client(profile):
    return profile is not None and profile.role in CLIENT_ROLES


def is_team_role(profile):
    return profile is not None and profile.role in TEAM_ROLES


def is_admin_or_manager(profile):
    return profile is not None and profile.role in ('admin', 'manager')


def is_same_org(profile, record):
    return bool(profile and profile.org_id) and str(record.get('org_id')) == profile.org_id


def _is(profile, value):
    return value is not None and str(value) == profile.id


# ── Tasks ──

def can_view_task(profile, task):
    if is_client(profile):
        return _is(profile, task.get('assigned_to')) or _is(profile, task.get('created_by'))
    return is_team_role(profile)


def can_edit_task(profile, task):
    if is_admin(profile):
        return True
    if not is_same_org(profile, task):
        return False
    if is_client(profile):
        return _is(profile, task.get('assigned_to')) or _is(profile, task.get('created_by'))
    return is_team_role(profile)


def can_delete_task(profile, task):
    if is_admin(profile):
        return True
    if not is_same_org(profile, task):
        return False
    if is_client(profile):
        return _is(profile, task.get('created_by'))
    return is_team_role(profile)


def can_assign_task_to(profile, assignee):
    """Clients may assign to themselves or to an admin; team roles to anyone."""
    if assignee is None:
        return True
    if not is_client(profile):
        return True
    return str(assignee.get('id')) == profile.id or assignee.get('role') == 'admin'


# ── Files ──

def can_access_file(profile, file, shared_user_ids=()):
    if is_admin(profile):
        return True
    if _is(profile, file.get('uploaded_by')):
        return True
    if profile.id in {str(u) for u in shared_user_ids}:
        return True
    return is_team_role(profile) and is_same_org(profile, file)


def can_edit_file(profile, file):
    return is_admin(profile) or _is(profile, file.get('uploaded_by'))


def can_delete_file(profile, file):
    return is_admin(profile) or _is(profile, file.get('uploaded_by'))


def can_download_file(profile, file, member_org_ids=(), channel_client_org_id=None):
    """Team roles, members of the file's org, or members of its channel's client org."""
    if is_team_role(profile):
        return True
    orgs = {str(o) for o in member_org_ids}
    if profile.org_id:
        orgs.add(profile.org_id)
    if file.get('org_id') and str(file['org_id']) in orgs:
        return True
    return bool(channel_client_org_id) and str(channel_client_org_id) in orgs


# ── Users / orgs ──

def can_manage_users(profile):
    return is_admin(profile)


def can_manage_org(profile):
    return is_admin_or_manager(profile)


def can_grant_role(profile, role):
    """Only admins hand out admin or manager."""
    if role in ('admin', 'manager'):
        return is_admin(profile)
    return is_admin_or_manager(profile)
