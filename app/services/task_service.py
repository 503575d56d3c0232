import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from app.core.exceptions import TaskNotFoundError
from app.models.task import Task
from app.repositories.escalation_repository import EscalationRepository
from app.repositories.task_repository import TaskRepository
from app.schemas.common import TaskStatus
from app.services.side_effects import SideEffectLog

logger = logging.getLogger(__name__)


class TaskService:
    """Task reads and plain completion (without an outcome record)."""

    async def get_task(self, task_id: UUID, task_repo: TaskRepository) -> Task:
        task = await task_repo.get_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")
        return task

    async def list_tasks(
        self,
        task_repo: TaskRepository,
        statuses: Optional[List[str]] = None,
        assigned_to_user_id: Optional[UUID] = None,
        task_types: Optional[List[str]] = None,
        due_before: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[Task]:
        return await task_repo.list_tasks(
            statuses=statuses,
            assigned_to_user_id=assigned_to_user_id,
            task_types=task_types,
            due_before=due_before,
            limit=limit,
        )

    async def complete_task(
        self,
        task_id: UUID,
        completion_notes: Optional[str],
        user_id: UUID,
        task_repo: TaskRepository,
        escalation_repo: EscalationRepository,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Complete a task and resolve its open escalations.

        Completing an already-completed task is a no-op that returns the
        task unchanged.  Escalation resolution is best-effort.
        """
        now = now or datetime.now(timezone.utc)

        task = await self.get_task(task_id, task_repo)
        if task.status == TaskStatus.completed.value:
            logger.info("Task %s already completed", task_id)
            return {"task": task, "side_effects": [], "side_effect_failures": []}

        await task_repo.mark_completed(task_id, now, completion_notes)

        side_effects = SideEffectLog(savepoint=task_repo.savepoint)
        await side_effects.attempt(
            "escalation_resolution",
            lambda: escalation_repo.resolve_for_task(task_id, user_id, now),
        )

        await task_repo.commit()
        logger.info("Task %s completed by %s", task_id, user_id)

        task = await self.get_task(task_id, task_repo)
        return {
            "task": task,
            "side_effects": side_effects.results,
            "side_effect_failures": side_effects.failed_names,
        }
