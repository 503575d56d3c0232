from app.models.base import Base
from app.models.user import User
from app.models.restaurant import Restaurant
from app.models.lead import Lead
from app.models.order import Order
from app.models.task import Task
from app.models.calendar_event import CalendarEvent
from app.models.notification import Notification
from app.models.escalation import Escalation
from app.models.task_outcome import TaskOutcome
from app.models.activity_log import ActivityLog

__all__ = [
    "Base",
    "User",
    "Restaurant",
    "Lead",
    "Order",
    "Task",
    "CalendarEvent",
    "Notification",
    "Escalation",
    "TaskOutcome",
    "ActivityLog",
]
