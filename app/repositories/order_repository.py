from typing import Any, Optional

from sqlalchemy import text

from app.models.order import Order
from app.repositories.base import BaseRepository


class OrderRepository(BaseRepository):
    """Encapsulates queries against the ``orders`` table."""

    async def generate_order_number(self) -> Optional[str]:
        """Call the ``generate_order_number()`` database function."""
        result = await self._db.execute(text("SELECT generate_order_number()"))
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> Order:
        """Insert an order and flush so its id is populated."""
        order = Order(**kwargs)
        self._db.add(order)
        await self._db.flush()
        await self._db.refresh(order)
        return order
