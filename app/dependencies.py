import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import NotAuthenticatedError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Acting user
# ---------------------------------------------------------------------------


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> UUID:
    """Resolve the acting user from the ``X-User-Id`` header.

    Authentication itself happens upstream; this only requires that an
    identity was forwarded and that it is a UUID.
    """
    if not x_user_id:
        raise NotAuthenticatedError()
    try:
        return UUID(x_user_id)
    except ValueError:
        raise NotAuthenticatedError("Invalid user identity")


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client() -> Optional[Redis]:
    """Get an async Redis client, or ``None`` when Redis is unreachable."""
    try:
        client = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
        await client.ping()
        return client
    except Exception:
        logger.warning("Redis unavailable – sweep lock disabled for this request")
        return None


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_task_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.task_repository import TaskRepository

    return TaskRepository(db)


async def get_notification_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.notification_repository import NotificationRepository

    return NotificationRepository(db)


async def get_escalation_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.escalation_repository import EscalationRepository

    return EscalationRepository(db)


async def get_calendar_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.calendar_event_repository import CalendarEventRepository

    return CalendarEventRepository(db)


async def get_lead_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.lead_repository import LeadRepository

    return LeadRepository(db)


async def get_order_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.order_repository import OrderRepository

    return OrderRepository(db)


async def get_outcome_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.task_outcome_repository import TaskOutcomeRepository

    return TaskOutcomeRepository(db)


async def get_activity_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.activity_repository import ActivityRepository

    return ActivityRepository(db)


# ---------------------------------------------------------------------------
# Cache service factory
# ---------------------------------------------------------------------------


async def get_cache_service(
    redis_client: Optional[Redis] = Depends(get_redis_client),
):
    """Yield a :class:`CacheService` and close its Redis client afterwards."""
    from app.core.cache import CacheService

    try:
        yield CacheService(redis_client=redis_client)
    finally:
        if redis_client is not None:
            await redis_client.aclose()


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_task_creation_service():
    from app.services.task_creation_service import TaskCreationService

    return TaskCreationService()


async def get_task_service():
    from app.services.task_service import TaskService

    return TaskService()


async def get_outcome_recorder():
    from app.services.outcome_recorder import OutcomeRecorder

    return OutcomeRecorder()


async def get_notification_service():
    from app.services.notification_service import NotificationService

    return NotificationService()
