import os
from datetime import date, datetime, time, timedelta, timezone
from typing import AsyncGenerator
from uuid import UUID, uuid4

import asyncpg
import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.models import (
    Base,
    Escalation,
    Lead,
    Notification,
    Order,
    Restaurant,
    Task,
    User,
)

_PG_HOST = os.getenv("TEST_PG_HOST", "localhost")
_PG_PORT = int(os.getenv("TEST_PG_PORT", "5432"))
_PG_USER = os.getenv("TEST_PG_USER", "postgres")
_PG_PASS = os.getenv("TEST_PG_PASSWORD", "postgres")
_TEST_DB = "dualline_ops_test"

_TEST_DB_URL = (
    f"postgresql+asyncpg://{_PG_USER}:{_PG_PASS}@{_PG_HOST}:{_PG_PORT}/{_TEST_DB}"
)

# NullPool: every test runs on its own event loop, so connections are not reused
_TEST_ENGINE = create_async_engine(_TEST_DB_URL, echo=False, poolclass=NullPool)

_TestSessionLocal = async_sessionmaker(
    _TEST_ENGINE,
    class_=AsyncSession,
    expire_on_commit=False,
)

NOW = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture(autouse=True)
async def _ensure_pg_database():
    """Create the test database if needed.

    Skips every test in this module when PostgreSQL cannot be reached.
    """
    try:
        conn = await asyncpg.connect(
            user=_PG_USER,
            password=_PG_PASS,
            host=_PG_HOST,
            port=_PG_PORT,
            database="postgres",
        )
        exists = await conn.fetchval(
            "SELECT 1 FROM pg_database WHERE datname = $1", _TEST_DB
        )
        if not exists:
            await conn.execute(f'CREATE DATABASE "{_TEST_DB}"')
        await conn.close()
    except (OSError, asyncpg.PostgresError, ConnectionRefusedError) as exc:
        pytest.skip(f"PostgreSQL not available ({_PG_HOST}:{_PG_PORT}): {exc}")


@pytest_asyncio.fixture(autouse=True)
async def _setup_database(_ensure_pg_database):
    """Create all tables before each test and drop them after."""
    async with _TEST_ENGINE.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with _TEST_ENGINE.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async DB session for direct repository tests."""
    async with _TestSessionLocal() as session:
        yield session


async def _seed_user(session: AsyncSession, role: str = "salesperson", **overrides):
    """Insert a user row and return its UUID."""
    defaults = {
        "id": uuid4(),
        "email": f"user_{uuid4().hex[:8]}@dualline.test",
        "full_name": f"Test {role.title()}",
        "role": role,
        "is_active": True,
    }
    defaults.update(overrides)
    session.add(User(**defaults))
    await session.commit()
    return defaults["id"]


async def _seed_restaurant(session: AsyncSession, name: str, salesperson_id=None):
    """Insert a restaurant with one lead; return ``(restaurant_id, lead_id)``."""
    restaurant_id, lead_id = uuid4(), uuid4()
    session.add(
        Restaurant(
            id=restaurant_id,
            name=name,
            township="Bahan",
            salesperson_id=salesperson_id,
        )
    )
    await session.flush()
    session.add(
        Lead(
            id=lead_id,
            restaurant_id=restaurant_id,
            name=name,
            status="CONTACT_STAGE",
            assigned_to_user_id=salesperson_id,
        )
    )
    await session.commit()
    return restaurant_id, lead_id


async def _seed_task(session: AsyncSession, assignee: UUID, **overrides):
    """Insert a pending follow-up task and return its UUID."""
    defaults = {
        "id": uuid4(),
        "title": "Follow up",
        "task_type": "lead_followup",
        "status": "pending",
        "priority": "medium",
        "due_date": NOW,
        "assigned_to_user_id": assignee,
        "created_by_user_id": assignee,
    }
    defaults.update(overrides)
    session.add(Task(**defaults))
    await session.commit()
    return defaults["id"]


async def _scalar(session: AsyncSession, query):
    result = await session.execute(query)
    return result.scalar_one()


class TestTaskRepositoryIntegration:
    """Test TaskRepository's overdue and due-window queries."""

    @pytest.mark.asyncio
    async def test_find_overdue_joins_names_and_hours(self, db_session: AsyncSession):
        from app.repositories.task_repository import TaskRepository

        rep = await _seed_user(db_session, full_name="Ko Aung")
        restaurant_id, _ = await _seed_restaurant(db_session, "Golden Bowl", rep)
        overdue_id = await _seed_task(
            db_session,
            rep,
            restaurant_id=restaurant_id,
            due_date=NOW - timedelta(hours=3),
        )
        orphan_id = await _seed_task(db_session, rep, due_date=NOW - timedelta(hours=1))
        await _seed_task(db_session, rep, due_date=NOW + timedelta(hours=1))
        await _seed_task(
            db_session, rep, status="completed", due_date=NOW - timedelta(hours=5)
        )

        rows = await TaskRepository(db_session).find_overdue(NOW)

        assert [r["task_id"] for r in rows] == [overdue_id, orphan_id]
        assert rows[0]["restaurant_name"] == "Golden Bowl"
        assert rows[0]["assigned_user_name"] == "Ko Aung"
        assert rows[0]["hours_overdue"] == pytest.approx(3.0)
        assert rows[1]["restaurant_name"] == "Unknown restaurant"

    @pytest.mark.asyncio
    async def test_find_due_between_is_inclusive(self, db_session: AsyncSession):
        from app.repositories.task_repository import TaskRepository
        from app.services.escalation_sweep import reminder_window

        rep = await _seed_user(db_session)
        ids = {
            minutes: await _seed_task(
                db_session, rep, due_date=NOW + timedelta(minutes=minutes)
            )
            for minutes in (50, 55, 60, 65, 70)
        }
        await _seed_task(
            db_session,
            rep,
            task_type="delivery",
            due_date=NOW + timedelta(minutes=60),
        )

        start, end = reminder_window(NOW, lead_minutes=60, window_minutes=5)
        tasks = await TaskRepository(db_session).find_due_between(
            "lead_followup", start, end
        )

        assert {t.id for t in tasks} == {ids[55], ids[60], ids[65]}


class TestNotificationRepositoryIntegration:
    """Read flags only ever change for the targeted rows."""

    @pytest.mark.asyncio
    async def test_mark_read_touches_only_that_row(self, db_session: AsyncSession):
        from app.repositories.notification_repository import NotificationRepository

        user = await _seed_user(db_session)
        repo = NotificationRepository(db_session)
        first = await repo.create(user_id=user, title="a", message="a")
        second = await repo.create(user_id=user, title="b", message="b")
        await repo.commit()

        assert await repo.mark_read(first.id, user) == 1
        await repo.commit()

        flags = dict(
            (
                await db_session.execute(
                    select(Notification.id, Notification.is_read)
                )
            ).all()
        )
        assert flags == {first.id: True, second.id: False}
        assert await repo.count_unread(user) == 1

    @pytest.mark.asyncio
    async def test_mark_read_ignores_other_users_row(self, db_session: AsyncSession):
        from app.repositories.notification_repository import NotificationRepository

        owner = await _seed_user(db_session)
        intruder = await _seed_user(db_session)
        repo = NotificationRepository(db_session)
        row = await repo.create(user_id=owner, title="a", message="a")
        await repo.commit()

        assert await repo.mark_read(row.id, intruder) == 0
        assert await repo.count_unread(owner) == 1

    @pytest.mark.asyncio
    async def test_mark_all_read_is_scoped_to_user(self, db_session: AsyncSession):
        from app.repositories.notification_repository import NotificationRepository

        user = await _seed_user(db_session)
        other = await _seed_user(db_session)
        repo = NotificationRepository(db_session)
        await repo.create_many(
            [{"user_id": user, "title": "t", "message": str(i)} for i in range(3)]
            + [{"user_id": other, "title": "t", "message": "x"}]
        )
        await repo.commit()
        first = (await repo.list_for_user(user))[0]
        await repo.mark_read(first.id, user)
        await repo.commit()

        assert await repo.mark_all_read(user) == 2
        await repo.commit()

        assert await repo.count_unread(user) == 0
        assert await repo.count_unread(other) == 1


class TestEscalationSweepIntegration:
    """Run the sweep against real tables."""

    @pytest.mark.asyncio
    async def test_repeat_sweep_writes_no_duplicates(self, db_session: AsyncSession):
        from app.services.escalation_sweep import sweep_follow_ups

        rep = await _seed_user(db_session)
        managers = [
            await _seed_user(db_session, role="manager"),
            await _seed_user(db_session, role="admin"),
        ]
        await _seed_user(db_session, role="manager", is_active=False)
        for hours in (1, 2, 3):
            await _seed_task(db_session, rep, due_date=NOW - timedelta(hours=hours))

        first = await sweep_follow_ups(db_session, now=NOW)
        second = await sweep_follow_ups(db_session, now=NOW)

        assert first["escalations_created"] == 3 * len(managers)
        assert first["notifications_created"] == 3 * len(managers)
        assert second["escalations_created"] == 0
        assert second["notifications_created"] == 0
        assert second["side_effect_failures"] == []
        assert await _scalar(db_session, select(func.count(Escalation.id))) == 6
        assert await _scalar(db_session, select(func.count(Notification.id))) == 6

    @pytest.mark.asyncio
    async def test_open_pair_index_rejects_duplicates(self, db_session: AsyncSession):
        from app.services.escalation_sweep import _escalate_overdue
        from app.repositories.escalation_repository import EscalationRepository
        from app.repositories.notification_repository import NotificationRepository
        from app.services.side_effects import SideEffectLog

        rep = await _seed_user(db_session)
        manager = await _seed_user(db_session, role="manager")
        task_id = await _seed_task(db_session, rep, due_date=NOW - timedelta(hours=2))
        escalation_repo = EscalationRepository(db_session)
        await escalation_repo.create_many(
            [{"task_id": task_id, "escalated_to_user_id": manager}]
        )
        await escalation_repo.commit()

        side_effects = SideEffectLog(savepoint=escalation_repo.savepoint)
        overdue = [
            {
                "task_id": task_id,
                "restaurant_name": "Golden Bowl",
                "assigned_user_name": "Rep",
                "hours_overdue": 2.0,
            }
        ]
        # An empty open-pair set forces the insert past the sweep's own check
        await _escalate_overdue(
            overdue,
            [manager],
            set(),
            NotificationRepository(db_session),
            escalation_repo,
            side_effects,
        )

        assert side_effects.failed_names == [f"escalation_records:{task_id}"]
        await db_session.commit()
        assert await _scalar(db_session, select(func.count(Escalation.id))) == 1


class TestFollowUpLifecycleIntegration:
    """Create a follow-up, let it go overdue, then record its outcome."""

    @pytest.mark.asyncio
    async def test_create_escalate_and_close(self, db_session: AsyncSession):
        from app.repositories.activity_repository import ActivityRepository
        from app.repositories.calendar_event_repository import CalendarEventRepository
        from app.repositories.escalation_repository import EscalationRepository
        from app.repositories.lead_repository import LeadRepository
        from app.repositories.notification_repository import NotificationRepository
        from app.repositories.order_repository import OrderRepository
        from app.repositories.task_outcome_repository import TaskOutcomeRepository
        from app.repositories.task_repository import TaskRepository
        from app.schemas.common import LeadStatus
        from app.schemas.task import FollowUpTaskCreate, TaskOutcomeCreate
        from app.services.escalation_sweep import sweep_follow_ups
        from app.services.outcome_recorder import OutcomeRecorder
        from app.services.task_creation_service import (
            TaskCreationService,
            combine_due_datetime,
        )

        u1 = await _seed_user(db_session)
        managers = {
            await _seed_user(db_session, role="manager"),
            await _seed_user(db_session, role="admin"),
        }
        r1, lead_id = await _seed_restaurant(db_session, "Golden Palace", u1)
        tomorrow = date.today() + timedelta(days=1)

        # 1. Create
        created = await TaskCreationService().create_follow_up_task(
            FollowUpTaskCreate(
                title="Follow up with Golden Palace",
                due_date=tomorrow,
                due_time=time(9, 0),
                assigned_to_user_id=u1,
                restaurant_id=r1,
            ),
            created_by_user_id=u1,
            task_repo=TaskRepository(db_session),
            calendar_repo=CalendarEventRepository(db_session),
            notification_repo=NotificationRepository(db_session),
        )
        task_id = created["task"].id
        due_at = combine_due_datetime(tomorrow, time(9, 0))

        assert created["side_effect_failures"] == []
        row = (
            await db_session.execute(
                select(Task.status, Task.due_date).where(Task.id == task_id)
            )
        ).one()
        assert row.status == "pending"
        assert row.due_date == due_at

        # 2. Sweep after the due time
        async with _TestSessionLocal() as session:
            summary = await sweep_follow_ups(session, now=due_at + timedelta(hours=2))

        assert summary["overdue_tasks_processed"] == 1
        escalated_to = set(
            (
                await db_session.execute(
                    select(Escalation.escalated_to_user_id).where(
                        Escalation.task_id == task_id
                    )
                )
            ).scalars()
        )
        assert escalated_to == managers
        notified = (
            await db_session.execute(
                select(Notification.user_id).where(
                    Notification.title == "Overdue Follow-up Task"
                )
            )
        ).scalars().all()
        assert sorted(notified) == sorted(managers)

        # 3. Outcome
        async with _TestSessionLocal() as session:
            result = await OutcomeRecorder().record_outcome(
                task_id,
                TaskOutcomeCreate(lead_status=LeadStatus.CLOSED_WON, create_order=True),
                user_id=u1,
                task_repo=TaskRepository(session),
                order_repo=OrderRepository(session),
                lead_repo=LeadRepository(session),
                outcome_repo=TaskOutcomeRepository(session),
                escalation_repo=EscalationRepository(session),
                activity_repo=ActivityRepository(session),
                now=due_at + timedelta(hours=3),
            )

        assert result["side_effect_failures"] == []
        lead_status = await _scalar(
            db_session, select(Lead.status).where(Lead.id == lead_id)
        )
        assert lead_status == "CLOSED_WON"
        orders = (
            await db_session.execute(
                select(Order.id, Order.status, Order.total_amount_kyats).where(
                    Order.restaurant_id == r1
                )
            )
        ).all()
        assert len(orders) == 1
        assert orders[0].id == result["order_id"]
        assert orders[0].status == "PENDING_CONFIRMATION"
        assert orders[0].total_amount_kyats == 0
        task_status = await _scalar(
            db_session, select(Task.status).where(Task.id == task_id)
        )
        assert task_status == "completed"
        still_open = await _scalar(
            db_session,
            select(func.count(Escalation.id)).where(
                Escalation.task_id == task_id, Escalation.resolved_at.is_(None)
            ),
        )
        assert still_open == 0
