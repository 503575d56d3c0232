from typing import List
from uuid import UUID

from sqlalchemy import select

from app.core.constants import MANAGER_ROLES
from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    """Encapsulates queries against the ``users`` table."""

    async def get_manager_ids(self) -> List[UUID]:
        """Return ids of active users holding a manager-equivalent role."""
        result = await self._db.execute(
            select(User.id)
            .where(
                User.role.in_(sorted(MANAGER_ROLES)),
                User.is_active.is_(True),
            )
            .order_by(User.created_at.asc())
        )
        return list(result.scalars().all())
