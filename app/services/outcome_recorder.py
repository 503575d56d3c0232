import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from app.core.constants import ACTIVITY_OUTCOME_RECORDED, ACTIVITY_TARGET_VISIT
from app.core.exceptions import (
    OrderCreationError,
    OutcomeRecordingError,
    TaskNotFoundError,
)
from app.models.lead import Lead
from app.models.task import Task
from app.repositories.activity_repository import ActivityRepository
from app.repositories.escalation_repository import EscalationRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.task_outcome_repository import TaskOutcomeRepository
from app.repositories.task_repository import TaskRepository
from app.schemas.common import OrderStatus
from app.schemas.task import TaskOutcomeCreate
from app.services.side_effects import SideEffectLog

logger = logging.getLogger(__name__)


def fallback_order_number(now: datetime) -> str:
    """Timestamp-based order number used when the DB generator fails."""
    return f"ORD-{int(now.timestamp() * 1000)}"


class OutcomeRecorder:
    """Closes out a task and applies everything its outcome implies.

    Hard steps (the caller sees an error): fetching the task, inserting
    the requested order, inserting the outcome audit row.  Everything else
    is best-effort and only reported through ``side_effect_failures``.

    All writes share one session; a hard failure rolls back the whole
    request, while a failed best-effort step is rolled back to its own
    savepoint.  Nothing is compensated after commit.
    """

    async def record_outcome(
        self,
        task_id: UUID,
        outcome: TaskOutcomeCreate,
        user_id: UUID,
        task_repo: TaskRepository,
        order_repo: OrderRepository,
        lead_repo: LeadRepository,
        outcome_repo: TaskOutcomeRepository,
        escalation_repo: EscalationRepository,
        activity_repo: ActivityRepository,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Record the outcome of *task_id*.

        Steps:
        1. Fetch the task with its restaurant
        2. Create a pending-confirmation order (if requested and possible)
        3. Update the restaurant's lead pipeline stage (best-effort)
        4. Insert the task-outcome audit row
        5. Mark the task completed (best-effort)
        6. Resolve open escalations for the task (best-effort)
        7. Append an activity-log entry (best-effort)

        Returns a dict suitable for building ``TaskOutcomeResponse``.

        Raises:
            TaskNotFoundError: If the task does not exist.
            OrderCreationError: If the requested order cannot be inserted.
            OutcomeRecordingError: If the audit row cannot be inserted.
        """
        now = now or datetime.now(timezone.utc)

        # 1. Task + restaurant
        task = await task_repo.get_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")

        side_effects = SideEffectLog(savepoint=task_repo.savepoint)
        restaurant_id = task.restaurant_id

        lead: Optional[Lead] = None
        if restaurant_id and (outcome.lead_status or outcome.create_order):
            lead = await side_effects.attempt(
                "lead_lookup", lambda: lead_repo.get_first_for_restaurant(restaurant_id)
            )

        # 2. Order
        order_id: Optional[UUID] = None
        if outcome.create_order:
            if restaurant_id:
                order_id = await self._create_order(
                    task, lead, outcome, user_id, order_repo, now
                )
            else:
                logger.warning(
                    "Task %s has no restaurant; skipping requested order", task_id
                )

        # 3. Lead pipeline
        if outcome.lead_status and restaurant_id:
            if lead is None:
                logger.warning(
                    "No lead found for restaurant %s; lead status not updated",
                    restaurant_id,
                )
            else:
                await side_effects.attempt(
                    "lead_update",
                    lambda: lead_repo.update_pipeline(
                        lead_id=lead.id,
                        status=outcome.lead_status.value,
                        next_action_description=outcome.next_action,
                        next_action_date=outcome.next_action_date,
                        updated_at=now,
                    ),
                )

        # 4. Audit row
        try:
            outcome_row = await outcome_repo.create(
                task_id=task_id,
                lead_status=outcome.lead_status.value if outcome.lead_status else None,
                next_action=outcome.next_action,
                next_action_date=outcome.next_action_date,
                order_id=order_id,
                notes=outcome.notes,
                created_by=user_id,
            )
        except Exception as exc:
            logger.error("Failed to record outcome for task %s", task_id, exc_info=True)
            raise OutcomeRecordingError() from exc

        # 5. Task status
        await side_effects.attempt(
            "task_status",
            lambda: task_repo.mark_completed(task_id, now, outcome.notes),
        )

        # 6. Escalations
        await side_effects.attempt(
            "escalation_resolution",
            lambda: escalation_repo.resolve_for_task(task_id, user_id, now),
        )

        # 7. Activity log
        restaurant_name = task.restaurant.name if task.restaurant else task.title
        await side_effects.attempt(
            "activity_log",
            lambda: activity_repo.create(
                user_id=user_id,
                target_id=task_id,
                target_type=ACTIVITY_TARGET_VISIT,
                activity_type=ACTIVITY_OUTCOME_RECORDED,
                activity_message=f"Visit outcome recorded for {restaurant_name}",
                context_data={
                    "lead_status": (
                        outcome.lead_status.value if outcome.lead_status else None
                    ),
                    "order_created": order_id is not None,
                    "restaurant_id": str(restaurant_id) if restaurant_id else None,
                },
            ),
        )

        await task_repo.commit()

        if side_effects.failures:
            logger.warning(
                "Outcome for task %s recorded with failed side effects: %s",
                task_id,
                ", ".join(side_effects.failed_names),
            )
        else:
            logger.info("Outcome for task %s recorded", task_id)

        return {
            "outcome_id": outcome_row.id,
            "order_id": order_id,
            "side_effects": side_effects.results,
            "side_effect_failures": side_effects.failed_names,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _next_order_number(
        self, order_repo: OrderRepository, now: datetime
    ) -> str:
        """Ask the database for an order number, falling back to a timestamp."""
        number: Optional[str] = None
        try:
            async with order_repo.savepoint():
                number = await order_repo.generate_order_number()
        except Exception:
            logger.warning("Order number generation failed", exc_info=True)
        return number or fallback_order_number(now)

    async def _create_order(
        self,
        task: Task,
        lead: Optional[Lead],
        outcome: TaskOutcomeCreate,
        user_id: UUID,
        order_repo: OrderRepository,
        now: datetime,
    ) -> UUID:
        order_number = await self._next_order_number(order_repo, now)
        try:
            order = await order_repo.create(
                order_number=order_number,
                restaurant_id=task.restaurant_id,
                lead_id=lead.id if lead else None,
                order_date=now,
                status=OrderStatus.PENDING_CONFIRMATION.value,
                total_amount_kyats=0,
                notes=outcome.order_notes,
                created_by_user_id=user_id,
            )
        except Exception as exc:
            logger.error("Failed to create order for task %s", task.id, exc_info=True)
            raise OrderCreationError() from exc

        logger.info("Created order %s (%s) from task %s", order.id, order_number, task.id)
        return order.id
