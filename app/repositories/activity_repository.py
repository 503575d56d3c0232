from typing import Any

from app.models.activity_log import ActivityLog
from app.repositories.base import BaseRepository


class ActivityRepository(BaseRepository):
    """Encapsulates writes to the ``activity_logs`` table."""

    async def create(self, **kwargs: Any) -> ActivityLog:
        """Insert a new activity log entry."""
        activity = ActivityLog(**kwargs)
        self._db.add(activity)
        await self._db.flush()
        return activity
