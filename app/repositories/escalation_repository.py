from datetime import datetime
from typing import Any, Dict, List, Set, Tuple
from uuid import UUID

from sqlalchemy import insert, select, update

from app.models.escalation import Escalation
from app.repositories.base import BaseRepository


class EscalationRepository(BaseRepository):
    """Encapsulates queries against the ``follow_up_escalations`` table."""

    async def create_many(self, rows: List[Dict[str, Any]]) -> int:
        """Insert a batch of escalation rows in one statement."""
        if not rows:
            return 0
        await self._db.execute(insert(Escalation), rows)
        return len(rows)

    async def get_open_pairs(self, task_ids: List[UUID]) -> Set[Tuple[UUID, UUID]]:
        """Return ``(task_id, manager_id)`` pairs that are still unresolved."""
        if not task_ids:
            return set()
        result = await self._db.execute(
            select(Escalation.task_id, Escalation.escalated_to_user_id).where(
                Escalation.task_id.in_(task_ids),
                Escalation.resolved_at.is_(None),
            )
        )
        return {(row.task_id, row.escalated_to_user_id) for row in result.all()}

    async def resolve_for_task(
        self, task_id: UUID, resolved_by: UUID, resolved_at: datetime
    ) -> int:
        """Resolve every open escalation of a task; return rows touched."""
        result = await self._db.execute(
            update(Escalation)
            .where(
                Escalation.task_id == task_id,
                Escalation.resolved_at.is_(None),
            )
            .values(resolved_at=resolved_at, resolved_by_user_id=resolved_by)
        )
        return result.rowcount
