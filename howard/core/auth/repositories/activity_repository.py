"""Activity Repository - audit trail in ``activity_logs``."""
import logging
from typing import Optional, Dict, Any

from core.base_repository import BaseRepository
from database import as_json

logger = logging.getLogger('howard.core.activity')


class ActivityRepository(BaseRepository):

    def log(self, action: str, user_id: str, org_id: Optional[str] = None,
            resource_type: str = None, resource_id: str = None,
            details: Dict[str, Any] = None) -> Optional[str]:
        """Record one action. Returns the new row id."""
        row = self.execute('''
            INSERT INTO activity_logs (org_id, user_id, action, resource_type, resource_id, details)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id
        ''', (org_id, user_id, action, resource_type, resource_id, as_json(details or {})),
            returning=True)
        return row['id'] if row else None

    def try_log(self, action: str, user_id: str, **kwargs) -> Optional[str]:
        """Like log() but never fails the calling request."""
        try:
            return self.log(action, user_id, **kwargs)
        except Exception:
            logger.warning(f'Failed to record activity {action}', exc_info=True)
            return None
