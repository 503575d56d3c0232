from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from app.core.config import settings
from app.core.rate_limit import limiter
from app.schemas.common import TaskStatus, TaskType
from app.schemas.task import (
    FollowUpTaskCreate,
    FollowUpTaskCreateResponse,
    TaskCompleteRequest,
    TaskCompleteResponse,
    TaskOut,
    TaskOutcomeCreate,
    TaskOutcomeResponse,
)
from app.services.task_creation_service import TaskCreationService
from app.services.task_service import TaskService
from app.services.outcome_recorder import OutcomeRecorder
from app.repositories.task_repository import TaskRepository
from app.repositories.calendar_event_repository import CalendarEventRepository
from app.repositories.notification_repository import NotificationRepository
from app.repositories.escalation_repository import EscalationRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.task_outcome_repository import TaskOutcomeRepository
from app.repositories.activity_repository import ActivityRepository
from app.api.deps import (
    get_current_user_id,
    get_task_creation_service,
    get_task_service,
    get_outcome_recorder,
    get_task_repo,
    get_calendar_repo,
    get_notification_repo,
    get_escalation_repo,
    get_order_repo,
    get_lead_repo,
    get_outcome_repo,
    get_activity_repo,
)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.post(
    "/follow-ups",
    response_model=FollowUpTaskCreateResponse,
    status_code=201,
)
@limiter.limit(settings.TASK_CREATE_RATE_LIMIT)
async def create_follow_up_task(
    request: Request,
    request_body: FollowUpTaskCreate,
    user_id: UUID = Depends(get_current_user_id),
    service: TaskCreationService = Depends(get_task_creation_service),
    task_repo: TaskRepository = Depends(get_task_repo),
    calendar_repo: CalendarEventRepository = Depends(get_calendar_repo),
    notification_repo: NotificationRepository = Depends(get_notification_repo),
) -> FollowUpTaskCreateResponse:
    """Schedule a follow-up with a restaurant.

    The task is created even if its calendar event or reminder could not
    be written; those are listed in ``side_effect_failures``.
    """
    result = await service.create_follow_up_task(
        task_data=request_body,
        created_by_user_id=user_id,
        task_repo=task_repo,
        calendar_repo=calendar_repo,
        notification_repo=notification_repo,
    )
    return FollowUpTaskCreateResponse(
        task=TaskOut.model_validate(result["task"]),
        side_effect_failures=result["side_effect_failures"],
    )


@router.get("", response_model=List[TaskOut])
async def list_tasks(
    status: Optional[List[TaskStatus]] = Query(None),
    task_type: Optional[List[TaskType]] = Query(None),
    assigned_to_user_id: Optional[UUID] = Query(None),
    due_before: Optional[datetime] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    user_id: UUID = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
    task_repo: TaskRepository = Depends(get_task_repo),
) -> List[TaskOut]:
    tasks = await service.list_tasks(
        task_repo,
        statuses=[s.value for s in status] if status else None,
        assigned_to_user_id=assigned_to_user_id,
        task_types=[t.value for t in task_type] if task_type else None,
        due_before=due_before,
        limit=limit,
    )
    return [TaskOut.model_validate(t) for t in tasks]


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
    task_repo: TaskRepository = Depends(get_task_repo),
) -> TaskOut:
    task = await service.get_task(task_id, task_repo)
    return TaskOut.model_validate(task)


@router.post("/{task_id}/complete", response_model=TaskCompleteResponse)
async def complete_task(
    task_id: UUID,
    request_body: TaskCompleteRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
    task_repo: TaskRepository = Depends(get_task_repo),
    escalation_repo: EscalationRepository = Depends(get_escalation_repo),
) -> TaskCompleteResponse:
    """Mark a task completed without recording an outcome."""
    result = await service.complete_task(
        task_id=task_id,
        completion_notes=request_body.completion_notes,
        user_id=user_id,
        task_repo=task_repo,
        escalation_repo=escalation_repo,
    )
    return TaskCompleteResponse(
        task=TaskOut.model_validate(result["task"]),
        side_effect_failures=result["side_effect_failures"],
    )


@router.post("/{task_id}/outcome", response_model=TaskOutcomeResponse)
async def record_task_outcome(
    task_id: UUID,
    request_body: TaskOutcomeCreate,
    user_id: UUID = Depends(get_current_user_id),
    recorder: OutcomeRecorder = Depends(get_outcome_recorder),
    task_repo: TaskRepository = Depends(get_task_repo),
    order_repo: OrderRepository = Depends(get_order_repo),
    lead_repo: LeadRepository = Depends(get_lead_repo),
    outcome_repo: TaskOutcomeRepository = Depends(get_outcome_repo),
    escalation_repo: EscalationRepository = Depends(get_escalation_repo),
    activity_repo: ActivityRepository = Depends(get_activity_repo),
) -> TaskOutcomeResponse:
    """Record a visit/follow-up outcome.

    Only a missing task, a failed order insert or a failed outcome row
    produce an error response. Every other step is best-effort and
    reported in ``side_effect_failures``.
    """
    result = await recorder.record_outcome(
        task_id=task_id,
        outcome=request_body,
        user_id=user_id,
        task_repo=task_repo,
        order_repo=order_repo,
        lead_repo=lead_repo,
        outcome_repo=outcome_repo,
        escalation_repo=escalation_repo,
        activity_repo=activity_repo,
    )
    return TaskOutcomeResponse(
        outcome_id=result["outcome_id"],
        order_id=result["order_id"],
        side_effect_failures=result["side_effect_failures"],
    )
