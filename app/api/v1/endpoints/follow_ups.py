from fastapi import APIRouter, Depends, Request, Response

from app.core.cache import CacheService
from app.core.database import AsyncSessionLocal
from app.core.rate_limit import limiter
from app.schemas.sweep import SweepResponse
from app.services.escalation_sweep import run_escalation_sweep
from app.api.deps import get_cache_service

router = APIRouter(prefix="/follow-ups", tags=["Follow-ups"])


@router.api_route(
    "/sweep",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_model=SweepResponse,
    response_model_by_alias=True,
)
@limiter.limit("30/minute")
async def sweep_follow_ups(
    request: Request,
    cache: CacheService = Depends(get_cache_service),
):
    """Escalate overdue follow-ups and send due-soon reminders.

    Called by an external scheduler with whatever method it prefers.
    A bare ``OPTIONS`` returns an empty 200; CORS preflights are answered
    by the middleware before reaching this handler.
    """
    if request.method == "OPTIONS":
        return Response(status_code=200)

    summary = await run_escalation_sweep(AsyncSessionLocal, cache=cache)
    return SweepResponse(
        overdue_tasks_processed=summary["overdue_tasks_processed"],
        upcoming_reminders=summary["upcoming_reminders"],
        skipped=summary["skipped"],
    )
