"""Repository layer – all database access goes through here.

Repositories encapsulate SQLAlchemy queries and raw SQL so that the
service layer only contains business logic.
"""

from app.repositories.task_repository import TaskRepository
from app.repositories.notification_repository import NotificationRepository
from app.repositories.escalation_repository import EscalationRepository
from app.repositories.calendar_event_repository import CalendarEventRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.task_outcome_repository import TaskOutcomeRepository
from app.repositories.activity_repository import ActivityRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    "TaskRepository",
    "NotificationRepository",
    "EscalationRepository",
    "CalendarEventRepository",
    "LeadRepository",
    "OrderRepository",
    "TaskOutcomeRepository",
    "ActivityRepository",
    "UserRepository",
]
