import logging
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.core.exceptions import NotificationNotFoundError
from app.models.notification import Notification
from app.repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """A user's in-app notification inbox.

    Every operation is scoped to the acting user; another user's
    notification is indistinguishable from a missing one.
    """

    async def list_notifications(
        self,
        user_id: UUID,
        notification_repo: NotificationRepository,
        limit: Optional[int] = None,
        unread_first: bool = False,
    ) -> List[Notification]:
        return await notification_repo.list_for_user(
            user_id,
            limit=limit or settings.NOTIFICATION_DEFAULT_LIMIT,
            unread_first=unread_first,
        )

    async def unread_count(
        self, user_id: UUID, notification_repo: NotificationRepository
    ) -> int:
        return await notification_repo.count_unread(user_id)

    async def mark_read(
        self,
        notification_id: UUID,
        user_id: UUID,
        notification_repo: NotificationRepository,
    ) -> None:
        """Mark one notification as read.

        Raises:
            NotificationNotFoundError: If no notification with that id is
                owned by *user_id*.
        """
        updated = await notification_repo.mark_read(notification_id, user_id)
        if not updated:
            raise NotificationNotFoundError(
                f"Notification {notification_id} not found"
            )
        await notification_repo.commit()
        logger.debug("Notification %s marked read by %s", notification_id, user_id)

    async def mark_all_read(
        self, user_id: UUID, notification_repo: NotificationRepository
    ) -> int:
        """Mark every unread notification of *user_id* read; return the count."""
        updated = await notification_repo.mark_all_read(user_id)
        await notification_repo.commit()
        logger.info("Marked %d notification(s) read for %s", updated, user_id)
        return updated
