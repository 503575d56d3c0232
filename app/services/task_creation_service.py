import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.core.constants import (
    FOLLOW_UP_ESTIMATED_MINUTES,
    REMINDER_TITLE,
    restaurant_link,
)
from app.repositories.calendar_event_repository import CalendarEventRepository
from app.repositories.notification_repository import NotificationRepository
from app.repositories.task_repository import TaskRepository
from app.schemas.common import TaskStatus, TaskType
from app.schemas.task import FollowUpTaskCreate
from app.services.side_effects import SideEffectLog

logger = logging.getLogger(__name__)


def combine_due_datetime(
    due_date: date, due_time: time, timezone_name: Optional[str] = None
) -> datetime:
    """Combine the form's date and time fields into an aware timestamp.

    A time that already carries a UTC offset is kept as is; a naive time
    is read as wall-clock time in the business timezone.
    """
    combined = datetime.combine(due_date, due_time)
    if combined.tzinfo is None:
        combined = combined.replace(
            tzinfo=ZoneInfo(timezone_name or settings.BUSINESS_TIMEZONE)
        )
    return combined


class TaskCreationService:
    """Creates follow-up tasks together with their best-effort side effects.

    The task INSERT is the only step whose failure reaches the caller.
    The mirrored calendar event and the assignee's reminder notification
    are attempted independently; their failures are logged and reported
    in the result but never undo the task.
    """

    def __init__(
        self,
        timezone_name: Optional[str] = None,
        calendar_duration_minutes: Optional[int] = None,
    ) -> None:
        self._timezone_name = timezone_name or settings.BUSINESS_TIMEZONE
        self._calendar_duration = timedelta(
            minutes=calendar_duration_minutes
            or settings.CALENDAR_EVENT_DURATION_MINUTES
        )

    async def create_follow_up_task(
        self,
        task_data: FollowUpTaskCreate,
        created_by_user_id: UUID,
        task_repo: TaskRepository,
        calendar_repo: CalendarEventRepository,
        notification_repo: NotificationRepository,
    ) -> Dict[str, Any]:
        """Create a pending ``lead_followup`` task.

        Steps:
        1. Combine due date + due time
        2. Insert the task (hard failure)
        3. Insert a calendar event spanning the due window (best-effort)
        4. Insert the assignee's "due in 1 hour" reminder (best-effort)
        5. Commit

        Returns a dict with the task, every side-effect result, and the
        names of the side effects that failed.
        """
        due_at = combine_due_datetime(
            task_data.due_date, task_data.due_time, self._timezone_name
        )

        task = await task_repo.create(
            title=task_data.title,
            description=task_data.description,
            task_type=TaskType.lead_followup.value,
            status=TaskStatus.pending.value,
            priority=task_data.priority.value,
            due_date=due_at,
            estimated_duration_minutes=FOLLOW_UP_ESTIMATED_MINUTES,
            created_by_user_id=created_by_user_id,
            assigned_to_user_id=task_data.assigned_to_user_id,
            restaurant_id=task_data.restaurant_id,
        )
        logger.info("Created follow-up task %s due %s", task.id, due_at.isoformat())

        side_effects = SideEffectLog(savepoint=task_repo.savepoint)

        await side_effects.attempt(
            "calendar_event",
            lambda: calendar_repo.create(
                title=f"Follow-up: {task_data.title}",
                description=task_data.description,
                event_type="task",
                start_datetime=due_at,
                end_datetime=due_at + self._calendar_duration,
                created_by_user_id=created_by_user_id,
                assigned_to_user_id=task_data.assigned_to_user_id,
                restaurant_id=task_data.restaurant_id,
                task_id=task.id,
                status="scheduled",
                priority=task_data.priority.value,
            ),
        )

        # Written now; the inbox shows it immediately rather than an hour
        # before the due time.
        await side_effects.attempt(
            "reminder_notification",
            lambda: notification_repo.create(
                user_id=task_data.assigned_to_user_id,
                title=REMINDER_TITLE,
                message=f'Follow-up task "{task_data.title}" is due in 1 hour',
                link=restaurant_link(task_data.restaurant_id),
            ),
        )

        await task_repo.commit()

        return {
            "task": task,
            "side_effects": side_effects.results,
            "side_effect_failures": side_effects.failed_names,
        }
