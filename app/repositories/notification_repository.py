from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import func, insert, select, update

from app.models.notification import Notification
from app.repositories.base import BaseRepository


class NotificationRepository(BaseRepository):
    """Encapsulates queries against the ``notifications`` table."""

    async def create(self, **kwargs: Any) -> Notification:
        """Insert a single notification."""
        notification = Notification(**kwargs)
        self._db.add(notification)
        await self._db.flush()
        return notification

    async def create_many(self, rows: List[Dict[str, Any]]) -> int:
        """Insert a batch of notifications in one statement."""
        if not rows:
            return 0
        await self._db.execute(insert(Notification), rows)
        return len(rows)

    async def list_for_user(
        self, user_id: UUID, limit: int = 50, unread_first: bool = False
    ) -> List[Notification]:
        """Return a user's notifications, newest first.

        With *unread_first* the unread rows come before the read ones,
        each group still newest first.
        """
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_first:
            query = query.order_by(
                Notification.is_read.asc(), Notification.created_at.desc()
            )
        else:
            query = query.order_by(Notification.created_at.desc())
        result = await self._db.execute(query.limit(limit))
        return list(result.scalars().all())

    async def count_unread(self, user_id: UUID) -> int:
        """Return how many unread notifications a user has."""
        result = await self._db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar() or 0

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> int:
        """Flip one notification owned by *user_id*; return rows touched."""
        result = await self._db.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
            .values(is_read=True)
        )
        return result.rowcount

    async def mark_all_read(self, user_id: UUID) -> int:
        """Flip every unread notification of *user_id*; return rows touched."""
        result = await self._db.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
        )
        return result.rowcount
