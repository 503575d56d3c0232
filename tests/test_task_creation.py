from datetime import date, datetime, time, timedelta, timezone
from unittest.mock import MagicMock
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from app.repositories.calendar_event_repository import CalendarEventRepository
from app.repositories.notification_repository import NotificationRepository
from app.repositories.task_repository import TaskRepository
from app.schemas.common import TaskPriority
from app.schemas.task import FollowUpTaskCreate
from app.services.task_creation_service import (
    TaskCreationService,
    combine_due_datetime,
)


def _task_data(**overrides) -> FollowUpTaskCreate:
    data = {
        "title": "Call about gas refill",
        "description": "Ask about the weekly cylinder count",
        "due_date": date(2026, 10, 20),
        "due_time": time(14, 30),
        "assigned_to_user_id": uuid4(),
        "priority": TaskPriority.high,
        "restaurant_id": uuid4(),
    }
    data.update(overrides)
    return FollowUpTaskCreate(**data)


@pytest.fixture
def repos(repo_factory):
    task_repo = repo_factory(TaskRepository)
    created = MagicMock()
    created.id = uuid4()
    task_repo.create.return_value = created
    return (
        task_repo,
        repo_factory(CalendarEventRepository),
        repo_factory(NotificationRepository),
    )


class TestCombineDueDatetime:
    def test_naive_time_uses_business_timezone(self):
        due = combine_due_datetime(date(2026, 10, 20), time(9, 0), "Asia/Yangon")

        assert due.tzinfo == ZoneInfo("Asia/Yangon")
        assert due.astimezone(timezone.utc) == datetime(
            2026, 10, 20, 2, 30, tzinfo=timezone.utc
        )

    def test_aware_time_is_kept(self):
        due = combine_due_datetime(
            date(2026, 10, 20), time(9, 0, tzinfo=timezone.utc), "Asia/Yangon"
        )

        assert due == datetime(2026, 10, 20, 9, 0, tzinfo=timezone.utc)


class TestCreateFollowUpTask:
    """Verify follow-up task creation and its best-effort side effects."""

    @pytest.mark.asyncio
    async def test_creates_pending_followup_task(self, repos):
        task_repo, calendar_repo, notification_repo = repos
        data = _task_data()
        creator = uuid4()

        result = await TaskCreationService().create_follow_up_task(
            data, creator, task_repo, calendar_repo, notification_repo
        )

        kwargs = task_repo.create.await_args.kwargs
        assert kwargs["task_type"] == "lead_followup"
        assert kwargs["status"] == "pending"
        assert kwargs["priority"] == "high"
        assert kwargs["estimated_duration_minutes"] == 30
        assert kwargs["created_by_user_id"] == creator
        assert result["task"] is task_repo.create.return_value
        assert result["side_effect_failures"] == []
        task_repo.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_calendar_event_spans_thirty_minutes(self, repos):
        task_repo, calendar_repo, notification_repo = repos
        data = _task_data()

        await TaskCreationService().create_follow_up_task(
            data, uuid4(), task_repo, calendar_repo, notification_repo
        )

        event = calendar_repo.create.await_args.kwargs
        assert event["title"] == "Follow-up: Call about gas refill"
        assert event["end_datetime"] - event["start_datetime"] == timedelta(minutes=30)
        assert event["task_id"] == task_repo.create.return_value.id

    @pytest.mark.asyncio
    async def test_reminder_goes_to_assignee(self, repos):
        task_repo, calendar_repo, notification_repo = repos
        data = _task_data()

        await TaskCreationService().create_follow_up_task(
            data, uuid4(), task_repo, calendar_repo, notification_repo
        )

        reminder = notification_repo.create.await_args.kwargs
        assert reminder["user_id"] == data.assigned_to_user_id
        assert reminder["title"] == "Follow-up Reminder"
        assert reminder["message"] == 'Follow-up task "Call about gas refill" is due in 1 hour'
        assert reminder["link"] == f"/restaurants/{data.restaurant_id}"

    @pytest.mark.asyncio
    async def test_calendar_failure_does_not_undo_task(self, repos):
        task_repo, calendar_repo, notification_repo = repos
        calendar_repo.create.side_effect = RuntimeError("calendar table locked")

        result = await TaskCreationService().create_follow_up_task(
            _task_data(), uuid4(), task_repo, calendar_repo, notification_repo
        )

        assert result["task"] is task_repo.create.return_value
        assert result["side_effect_failures"] == ["calendar_event"]
        notification_repo.create.assert_awaited_once()
        task_repo.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_both_side_effects_failing_still_returns_task(self, repos):
        task_repo, calendar_repo, notification_repo = repos
        calendar_repo.create.side_effect = RuntimeError("x")
        notification_repo.create.side_effect = RuntimeError("y")

        result = await TaskCreationService().create_follow_up_task(
            _task_data(), uuid4(), task_repo, calendar_repo, notification_repo
        )

        assert result["side_effect_failures"] == [
            "calendar_event",
            "reminder_notification",
        ]

    @pytest.mark.asyncio
    async def test_task_insert_failure_propagates(self, repos):
        task_repo, calendar_repo, notification_repo = repos
        task_repo.create.side_effect = RuntimeError("foreign key violation")

        with pytest.raises(RuntimeError):
            await TaskCreationService().create_follow_up_task(
                _task_data(), uuid4(), task_repo, calendar_repo, notification_repo
            )

        calendar_repo.create.assert_not_awaited()
        notification_repo.create.assert_not_awaited()
        task_repo.commit.assert_not_awaited()
