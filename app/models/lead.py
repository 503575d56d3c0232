from sqlalchemy import (
    CheckConstraint,
    Column,
    Index,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.models.base import Base
from sqlalchemy.sql import func

from app.core.constants import LEAD_STATUS_CHECK_CLAUSE


class Lead(Base):
    """Sales-pipeline record for a restaurant.

    A lead is distinct from the restaurant it references; a restaurant
    normally has one lead, and the outcome recorder only ever touches the
    first one it finds.
    """

    __tablename__ = "leads"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    restaurant_id = Column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
    )
    name = Column(String(200), nullable=False)
    status = Column(String(40), nullable=False, server_default="CONTACT_STAGE")
    next_action_description = Column(Text)
    next_action_date = Column(DateTime(timezone=True))
    assigned_to_user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    restaurant = relationship("Restaurant", back_populates="leads")

    __table_args__ = (
        CheckConstraint(LEAD_STATUS_CHECK_CLAUSE, name="ck_lead_status"),
        Index("ix_leads_restaurant_id", "restaurant_id"),
    )
