"""In-app notification helper used by the feature modules.

    from core.notifications.notify import notify_user

    notify_user(assignee_id, 'New task assigned', type='task_assigned',
                message='...', action_url='/tasks', resource_type='task', resource_id=task_id)

Event types that map to a preference are skipped for users who turned
that preference off.
"""

import logging
from .repositories import InAppNotificationRepository, NotificationPreferencesRepository

logger = logging.getLogger('howard.core.notifications.notify')

_repo = InAppNotificationRepository()
_prefs_repo = NotificationPreferencesRepository()

# notification type -> preference flag
PREFERENCE_FOR_TYPE = {
    'task_assigned': 'task_assigned',
    'task_completed': 'task_status_changed',
    'task_status_changed': 'task_status_changed',
    'task_comment': 'task_comment_added',
    'task_mention': 'task_mentioned',
    'file_uploaded': 'file_uploaded',
    'file_shared': 'file_uploaded',
}


def wants(preferences, type):
    """True unless the preference mapped to ``type`` is switched off."""
    key = PREFERENCE_FOR_TYPE.get(type)
    if key is None or preferences is None:
        return True
    return preferences.get(key, True) is not False


def notify_user(user_id, title, type='info', message=None, action_url=None,
                resource_type=None, resource_id=None, org_id=None):
    """Notify one user. Never raises; returns the notification id or None."""
    if not user_id:
        return None
    try:
        if PREFERENCE_FOR_TYPE.get(type) and not wants(_prefs_repo.get(user_id), type):
            logger.debug(f'User {user_id} opted out of {type}')
            return None
        return _repo.create(
            user_id=user_id, title=title, type=type, message=message,
            action_url=action_url, resource_type=resource_type,
            resource_id=resource_id, org_id=org_id,
        )
    except Exception as e:
        logger.error(f'Failed to create notification for user {user_id}: {e}')
        return None


def notify_users(user_ids, title, type='info', message=None, action_url=None,
                 resource_type=None, resource_id=None, org_id=None):
    """Notify several users (deduplicated, preference-filtered)."""
    user_ids = list(dict.fromkeys(str(u) for u in user_ids if u))
    if not user_ids:
        return []
    try:
        if PREFERENCE_FOR_TYPE.get(type):
            prefs = _prefs_repo.get_many(user_ids)
            user_ids = [u for u in user_ids if wants(prefs.get(u), type)]
        return _repo.create_bulk(
            user_ids=user_ids, title=title, type=type, message=message,
            action_url=action_url, resource_type=resource_type,
            resource_id=resource_id, org_id=org_id,
        )
    except Exception as e:
        logger.error(f'Failed to create notifications for {len(user_ids)} users: {e}')
        return []
