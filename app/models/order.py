from sqlalchemy import (
    CheckConstraint,
    Column,
    String,
    Text,
    DateTime,
    ForeignKey,
    Numeric,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from app.models.base import Base
from sqlalchemy.sql import func

from app.core.constants import ORDER_STATUS_CHECK_CLAUSE


class Order(Base):
    """Gas sales order.

    Orders created from a task outcome start in ``PENDING_CONFIRMATION``
    with a zero total; line items are added later by the order screens.
    """

    __tablename__ = "orders"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    order_number = Column(String(40), unique=True, nullable=False)
    restaurant_id = Column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
    )
    lead_id = Column(UUID(as_uuid=True), ForeignKey("leads.id", ondelete="SET NULL"))
    order_date = Column(DateTime(timezone=True), server_default=func.now())
    status = Column(String(30), nullable=False, server_default="PENDING_CONFIRMATION")
    total_amount_kyats = Column(Numeric(15, 2), nullable=False, server_default=text("0"))
    notes = Column(Text)
    created_by_user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(ORDER_STATUS_CHECK_CLAUSE, name="ck_order_status"),
    )
