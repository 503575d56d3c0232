import asyncio
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import CacheService
from app.core.config import settings
from app.core.constants import (
    ESCALATION_LINK,
    ESCALATION_REASON_OVERDUE,
    ESCALATION_TITLE,
    REMINDER_TITLE,
    restaurant_link,
)
from app.core.exceptions import SweepQueryError
from app.repositories.escalation_repository import EscalationRepository
from app.repositories.notification_repository import NotificationRepository
from app.repositories.task_repository import TaskRepository
from app.repositories.user_repository import UserRepository
from app.schemas.common import TaskType
from app.services.side_effects import SideEffectLog

logger = logging.getLogger(__name__)

# Redis key guarding against overlapping sweeps
_LOCK_KEY: str = "sweep:follow-up:lock"


def reminder_window(
    now: datetime,
    lead_minutes: Optional[int] = None,
    window_minutes: Optional[int] = None,
) -> Tuple[datetime, datetime]:
    """Return the due-date window for "due in 1 hour" reminders.

    The window is centred on ``now + lead_minutes`` and extends
    ``window_minutes`` to either side, both ends inclusive: 55 and 65
    minutes ahead are in, 70 is out with the defaults.
    """
    lead = lead_minutes if lead_minutes is not None else settings.REMINDER_LEAD_MINUTES
    half = (
        window_minutes
        if window_minutes is not None
        else settings.REMINDER_WINDOW_MINUTES
    )
    centre = now + timedelta(minutes=lead)
    return centre - timedelta(minutes=half), centre + timedelta(minutes=half)


def _escalation_message(task: Dict[str, Any]) -> str:
    # Half-hours round up: 2.5 h reads "3 hours"
    hours = math.floor(task["hours_overdue"] + 0.5)
    return (
        f"Follow-up task for {task['restaurant_name']} is "
        f"{hours} hours overdue. "
        f"Assigned to: {task['assigned_user_name']}"
    )


def _empty_summary(skipped: bool = False) -> Dict[str, Any]:
    return {
        "overdue_tasks_processed": 0,
        "upcoming_reminders": 0,
        "escalations_created": 0,
        "notifications_created": 0,
        "skipped": skipped,
        "side_effect_failures": [],
    }


async def _escalate_overdue(
    overdue: List[Dict[str, Any]],
    manager_ids: List[Any],
    open_pairs: set,
    notification_repo: NotificationRepository,
    escalation_repo: EscalationRepository,
    side_effects: SideEffectLog,
) -> Tuple[int, int]:
    """Fan out one notification and one escalation row per manager per task.

    Pairs present in *open_pairs* are skipped.  Returns the number of
    notifications and escalation rows written.
    """
    notifications_created = 0
    escalations_created = 0

    for task in overdue:
        task_id = task["task_id"]
        targets = [m for m in manager_ids if (task_id, m) not in open_pairs]
        if not targets:
            logger.debug("Task %s already escalated to every manager", task_id)
            continue

        message = _escalation_message(task)
        notification_rows = [
            {
                "user_id": manager_id,
                "title": ESCALATION_TITLE,
                "message": message,
                "link": ESCALATION_LINK,
            }
            for manager_id in targets
        ]
        escalation_rows = [
            {
                "task_id": task_id,
                "escalated_to_user_id": manager_id,
                "escalation_reason": ESCALATION_REASON_OVERDUE,
            }
            for manager_id in targets
        ]

        # Two independent batches: a failed notification insert must not
        # stop the escalation rows, and vice versa.
        written = await side_effects.attempt(
            f"escalation_notifications:{task_id}",
            lambda rows=notification_rows: notification_repo.create_many(rows),
        )
        notifications_created += written or 0

        written = await side_effects.attempt(
            f"escalation_records:{task_id}",
            lambda rows=escalation_rows: escalation_repo.create_many(rows),
        )
        escalations_created += written or 0

        logger.info("Escalated task %s to %d manager(s)", task_id, len(targets))

    return notifications_created, escalations_created


async def sweep_follow_ups(
    session: AsyncSession,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Run one escalation + reminder pass inside *session*.

    Raises ``SweepQueryError`` when the overdue-task or manager query
    fails; every step after that is best-effort.  A task is escalated to
    a manager at most once while that escalation stays unresolved.
    """
    now = now or datetime.now(timezone.utc)

    task_repo = TaskRepository(session)
    user_repo = UserRepository(session)
    notification_repo = NotificationRepository(session)
    escalation_repo = EscalationRepository(session)
    side_effects = SideEffectLog(savepoint=task_repo.savepoint)
    summary = _empty_summary()

    # 1. Overdue tasks
    try:
        overdue = await task_repo.find_overdue(now)
    except Exception as exc:
        logger.error("Overdue task query failed", exc_info=True)
        raise SweepQueryError(f"Failed to query overdue tasks: {exc}") from exc

    logger.info("Found %d overdue task(s)", len(overdue))
    summary["overdue_tasks_processed"] = len(overdue)

    # 2. Managers
    manager_ids: List[Any] = []
    if overdue:
        try:
            manager_ids = await user_repo.get_manager_ids()
        except Exception as exc:
            logger.error("Manager lookup failed", exc_info=True)
            raise SweepQueryError(f"Failed to query managers: {exc}") from exc
        logger.info("Found %d manager(s) for escalation", len(manager_ids))

    # 3. Fan-out, skipping pairs that are already escalated
    if overdue and manager_ids:
        task_ids = [t["task_id"] for t in overdue]
        open_pairs = await side_effects.attempt(
            "open_escalation_lookup",
            lambda: escalation_repo.get_open_pairs(task_ids),
        )
        if open_pairs is None:
            logger.warning(
                "Open escalations unknown; skipping fan-out for %d task(s)",
                len(overdue),
            )
        else:
            (
                summary["notifications_created"],
                summary["escalations_created"],
            ) = await _escalate_overdue(
                overdue,
                manager_ids,
                open_pairs,
                notification_repo,
                escalation_repo,
                side_effects,
            )

    # 4. Reminders for follow-ups due in about an hour
    # TODO: reminders repeat on every sweep while a task stays inside the
    # window; needs a reminder_sent_at column on tasks to send exactly once.
    window_start, window_end = reminder_window(now)
    upcoming = await side_effects.attempt(
        "upcoming_query",
        lambda: task_repo.find_due_between(
            TaskType.lead_followup.value, window_start, window_end
        ),
    )
    upcoming = upcoming or []
    summary["upcoming_reminders"] = len(upcoming)

    if upcoming:
        logger.info("Found %d task(s) due in 1 hour", len(upcoming))
        reminder_rows = [
            {
                "user_id": task.assigned_to_user_id,
                "title": REMINDER_TITLE,
                "message": f'Follow-up task "{task.title}" is due in 1 hour',
                "link": (
                    restaurant_link(task.restaurant_id)
                    if task.restaurant_id
                    else ESCALATION_LINK
                ),
            }
            for task in upcoming
        ]
        written = await side_effects.attempt(
            "reminder_notifications",
            lambda: notification_repo.create_many(reminder_rows),
        )
        summary["notifications_created"] += written or 0

    await session.commit()

    summary["side_effect_failures"] = side_effects.failed_names
    return summary


async def run_escalation_sweep(
    session_factory: Callable[..., AsyncSession],
    cache: Optional[CacheService] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """One-shot: take the sweep lock, open a session, and sweep.

    Parameters:
        session_factory: An async context-manager callable that yields
            an ``AsyncSession`` (e.g. ``AsyncSessionLocal``).
        cache: Optional cache used for the single-instance lock.  When
            another sweep holds the lock the call returns immediately with
            ``skipped=True``.

    Returns the sweep summary dict.
    """
    if cache is None or not cache.is_available:
        logger.warning("Redis unavailable; escalation sweep running unguarded")
        cache = cache or CacheService()

    async with cache.hold_lock(
        _LOCK_KEY, settings.SWEEP_LOCK_TTL_SECONDS
    ) as acquired:
        if not acquired:
            logger.info("Another escalation sweep is running; skipping")
            return _empty_summary(skipped=True)

        async with session_factory() as session:
            summary = await sweep_follow_ups(session, now=now)

    logger.info(
        "Escalation sweep complete: %d overdue, %d reminder(s)",
        summary["overdue_tasks_processed"],
        summary["upcoming_reminders"],
    )
    return summary


async def start_escalation_sweep_loop(
    session_factory: Callable[..., AsyncSession],
    cache: Optional[CacheService] = None,
) -> None:
    """Infinite loop that runs the sweep on a fixed interval.

    Parameters:
        session_factory: An async context-manager callable that yields
            an ``AsyncSession``.
        cache: Optional cache for the single-instance lock.
    """
    logger.info(
        "Escalation sweep background task started (interval=%ds)",
        settings.SWEEP_INTERVAL_SECONDS,
    )
    while True:
        try:
            await run_escalation_sweep(session_factory, cache=cache)
        except Exception:
            logger.error("Escalation sweep cycle failed", exc_info=True)
        await asyncio.sleep(settings.SWEEP_INTERVAL_SECONDS)
