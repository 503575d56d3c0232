"""Pydantic schemas package – re-exports for convenience."""

# Common enums
from app.schemas.common import (
    TaskType as TaskType,
    TaskStatus as TaskStatus,
    TaskPriority as TaskPriority,
    LeadStatus as LeadStatus,
    OrderStatus as OrderStatus,
    UserRole as UserRole,
    SuccessResponse as SuccessResponse,
)

# Task schemas
from app.schemas.task import (
    FollowUpTaskCreate as FollowUpTaskCreate,
    TaskCompleteRequest as TaskCompleteRequest,
    TaskOutcomeCreate as TaskOutcomeCreate,
    TaskOut as TaskOut,
    FollowUpTaskCreateResponse as FollowUpTaskCreateResponse,
    TaskCompleteResponse as TaskCompleteResponse,
    TaskOutcomeResponse as TaskOutcomeResponse,
)

# Notification schemas
from app.schemas.notification import (
    NotificationOut as NotificationOut,
    UnreadCountResponse as UnreadCountResponse,
    MarkAllReadResponse as MarkAllReadResponse,
)

# Sweep schemas
from app.schemas.sweep import SweepResponse as SweepResponse
