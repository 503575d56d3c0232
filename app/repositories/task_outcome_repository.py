from typing import Any

from app.models.task_outcome import TaskOutcome
from app.repositories.base import BaseRepository


class TaskOutcomeRepository(BaseRepository):
    """Append-only writes to the ``task_outcomes`` audit table."""

    async def create(self, **kwargs: Any) -> TaskOutcome:
        """Insert an outcome row and flush so its id is populated."""
        outcome = TaskOutcome(**kwargs)
        self._db.add(outcome)
        await self._db.flush()
        await self._db.refresh(outcome)
        return outcome
