from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update

from app.models.lead import Lead
from app.repositories.base import BaseRepository


class LeadRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``leads`` table."""

    async def get_first_for_restaurant(self, restaurant_id: UUID) -> Optional[Lead]:
        """Return the oldest lead of a restaurant, or ``None``."""
        result = await self._db.execute(
            select(Lead)
            .where(Lead.restaurant_id == restaurant_id)
            .order_by(Lead.created_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def update_pipeline(
        self,
        lead_id: UUID,
        status: str,
        next_action_description: Optional[str],
        next_action_date: Optional[datetime],
        updated_at: datetime,
    ) -> None:
        """Set the pipeline stage and next-action fields of a lead."""
        await self._db.execute(
            update(Lead)
            .where(Lead.id == lead_id)
            .values(
                status=status,
                next_action_description=next_action_description,
                next_action_date=next_action_date,
                updated_at=updated_at,
            )
        )
