from .in_app_repo import InAppNotificationRepository
from .preferences_repo import NotificationPreferencesRepository, DEFAULT_PREFERENCES

__all__ = ['InAppNotificationRepository', 'NotificationPreferencesRepository', 'DEFAULT_PREFERENCES']
