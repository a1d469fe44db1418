"""Auth repositories package."""
from .profile_repository import ProfileRepository
from .activity_repository import ActivityRepository

__all__ = ['ProfileRepository', 'ActivityRepository']
