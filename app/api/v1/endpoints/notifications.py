from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.schemas.common import SuccessResponse
from app.schemas.notification import (
    MarkAllReadResponse,
    NotificationOut,
    UnreadCountResponse,
)
from app.services.notification_service import NotificationService
from app.repositories.notification_repository import NotificationRepository
from app.api.deps import (
    get_current_user_id,
    get_notification_service,
    get_notification_repo,
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationOut])
async def list_notifications(
    limit: Optional[int] = Query(None, ge=1, le=200),
    unread_first: bool = Query(False),
    user_id: UUID = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> List[NotificationOut]:
    """Return the acting user's inbox, newest first."""
    notifications = await service.list_notifications(
        user_id, notification_repo, limit=limit, unread_first=unread_first
    )
    return [NotificationOut.model_validate(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user_id: UUID = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> UnreadCountResponse:
    count = await service.unread_count(user_id, notification_repo)
    return UnreadCountResponse(unread_count=count)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user_id: UUID = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> MarkAllReadResponse:
    updated = await service.mark_all_read(user_id, notification_repo)
    return MarkAllReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=SuccessResponse)
async def mark_read(
    notification_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> SuccessResponse:
    await service.mark_read(notification_id, user_id, notification_repo)
    return SuccessResponse()
