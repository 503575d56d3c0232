from enum import Enum
from pydantic import BaseModel


class TaskType(str, Enum):
    lead_followup = "lead_followup"
    visit = "visit"
    delivery = "delivery"
    uco_collection = "uco_collection"
    general = "general"


class TaskStatus(str, Enum):
    pending = "pending"
    completed = "completed"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class LeadStatus(str, Enum):
    CONTACT_STAGE = "CONTACT_STAGE"
    MEETING_STAGE = "MEETING_STAGE"
    PRESENTATION_NEGOTIATION = "PRESENTATION_NEGOTIATION"
    CLOSED_WON = "CLOSED_WON"
    CLOSED_LOST = "CLOSED_LOST"


class OrderStatus(str, Enum):
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class UserRole(str, Enum):
    admin = "admin"
    salesperson = "salesperson"
    staff = "staff"
    manager = "manager"
    viewer = "viewer"


class SuccessResponse(BaseModel):
    """Generic success response base."""

    success: bool = True
