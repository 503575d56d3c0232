"""Task schemas (follow-up creation, completion, outcome, listing)."""

from datetime import date, datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import LeadStatus, SuccessResponse, TaskPriority


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class FollowUpTaskCreate(BaseModel):
    """Request body for POST /api/v1/tasks/follow-ups.

    Date and time arrive as separate form fields and are combined into
    the task's due timestamp by the service.
    """

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    due_date: date
    due_time: time
    assigned_to_user_id: UUID
    priority: TaskPriority = TaskPriority.medium
    restaurant_id: UUID


class TaskCompleteRequest(BaseModel):
    """Request body for POST /api/v1/tasks/{task_id}/complete."""

    completion_notes: Optional[str] = None


class TaskOutcomeCreate(BaseModel):
    """Request body for POST /api/v1/tasks/{task_id}/outcome."""

    lead_status: Optional[LeadStatus] = None
    next_action: Optional[str] = None
    next_action_date: Optional[datetime] = None
    create_order: bool = False
    order_notes: Optional[str] = None
    notes: Optional[str] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TaskOut(BaseModel):
    """Public representation of a task row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    task_type: str
    status: str
    priority: str
    due_date: Optional[datetime] = None
    assigned_to_user_id: UUID
    created_by_user_id: UUID
    restaurant_id: Optional[UUID] = None
    lead_id: Optional[UUID] = None
    order_id: Optional[UUID] = None
    completed_at: Optional[datetime] = None
    completion_notes: Optional[str] = None


class FollowUpTaskCreateResponse(SuccessResponse):
    """Response body returned after a follow-up task is created.

    ``side_effect_failures`` names the secondary writes (calendar event,
    reminder) that did not go through; the task itself exists regardless.
    """

    task: TaskOut
    side_effect_failures: List[str] = Field(default_factory=list)


class TaskCompleteResponse(SuccessResponse):
    task: TaskOut
    side_effect_failures: List[str] = Field(default_factory=list)


class TaskOutcomeResponse(SuccessResponse):
    """Response body returned after an outcome is recorded."""

    outcome_id: UUID
    order_id: Optional[UUID] = None
    side_effect_failures: List[str] = Field(default_factory=list)
