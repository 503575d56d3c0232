from typing import Any

from app.models.calendar_event import CalendarEvent
from app.repositories.base import BaseRepository


class CalendarEventRepository(BaseRepository):
    """Encapsulates writes to the ``calendar_events`` table."""

    async def create(self, **kwargs: Any) -> CalendarEvent:
        """Insert a calendar event and flush it."""
        event = CalendarEvent(**kwargs)
        self._db.add(event)
        await self._db.flush()
        return event
