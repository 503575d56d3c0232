from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, update, and_
from sqlalchemy.orm import selectinload

from app.models.restaurant import Restaurant
from app.models.task import Task
from app.models.user import User
from app.repositories.base import BaseRepository


class TaskRepository(BaseRepository):
    """Encapsulates queries against the ``tasks`` table."""

    async def create(self, **kwargs: Any) -> Task:
        """Insert a new task and flush so its server-side id is populated."""
        task = Task(**kwargs)
        self._db.add(task)
        await self._db.flush()
        await self._db.refresh(task)
        return task

    async def get_by_id(self, task_id: UUID) -> Optional[Task]:
        """Return a task with its restaurant eagerly loaded, or ``None``."""
        result = await self._db.execute(
            select(Task)
            .where(Task.id == task_id)
            .options(selectinload(Task.restaurant))
        )
        return result.scalar_one_or_none()

    async def list_tasks(
        self,
        statuses: Optional[Iterable[str]] = None,
        assigned_to_user_id: Optional[UUID] = None,
        task_types: Optional[Iterable[str]] = None,
        due_before: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[Task]:
        """Return tasks newest-first, narrowed by the optional filters."""
        query = select(Task).options(selectinload(Task.restaurant))
        if statuses:
            query = query.where(Task.status.in_(list(statuses)))
        if assigned_to_user_id:
            query = query.where(Task.assigned_to_user_id == assigned_to_user_id)
        if task_types:
            query = query.where(Task.task_type.in_(list(task_types)))
        if due_before:
            query = query.where(Task.due_date <= due_before)
        query = query.order_by(Task.created_at.desc()).limit(limit)

        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def mark_completed(
        self, task_id: UUID, completed_at: datetime, notes: Optional[str]
    ) -> int:
        """Move a task to ``completed``; return the number of rows touched.

        There is no version check: concurrent completions simply overwrite
        each other's notes.
        """
        result = await self._db.execute(
            update(Task)
            .where(Task.id == task_id)
            .values(
                status="completed",
                completed_at=completed_at,
                completion_notes=notes,
                updated_at=completed_at,
            )
        )
        return result.rowcount

    async def find_overdue(self, now: datetime) -> List[Dict[str, Any]]:
        """Return every pending task whose due date has passed.

        Each row carries the restaurant name, the assignee's name, the due
        date and the number of hours the task is overdue as of *now*.
        """
        query = (
            select(
                Task.id.label("task_id"),
                Restaurant.name.label("restaurant_name"),
                User.full_name.label("assigned_user_name"),
                Task.due_date,
            )
            .select_from(Task)
            .outerjoin(Restaurant, Task.restaurant_id == Restaurant.id)
            .outerjoin(User, Task.assigned_to_user_id == User.id)
            .where(
                and_(
                    Task.status == "pending",
                    Task.due_date.is_not(None),
                    Task.due_date < now,
                )
            )
            .order_by(Task.due_date.asc())
        )
        result = await self._db.execute(query)
        return [
            {
                "task_id": row.task_id,
                "restaurant_name": row.restaurant_name or "Unknown restaurant",
                "assigned_user_name": row.assigned_user_name or "Unassigned",
                "due_date": row.due_date,
                "hours_overdue": (now - row.due_date).total_seconds() / 3600,
            }
            for row in result.all()
        ]

    async def find_due_between(
        self, task_type: str, window_start: datetime, window_end: datetime
    ) -> List[Task]:
        """Return pending tasks of *task_type* due inside the closed window."""
        result = await self._db.execute(
            select(Task).where(
                and_(
                    Task.task_type == task_type,
                    Task.status == "pending",
                    Task.due_date >= window_start,
                    Task.due_date <= window_end,
                )
            )
        )
        return list(result.scalars().all())
