from fastapi import APIRouter

from app.api.v1.endpoints import tasks, follow_ups, notifications, health

router = APIRouter(prefix="/api/v1")

router.include_router(tasks.router)
router.include_router(follow_ups.router)
router.include_router(notifications.router)
router.include_router(health.router)
