from sqlalchemy import (
    CheckConstraint,
    Column,
    Index,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.models.base import Base
from sqlalchemy.sql import func

from app.core.constants import (
    TASK_PRIORITY_CHECK_CLAUSE,
    TASK_STATUS_CHECK_CLAUSE,
    TASK_TYPE_CHECK_CLAUSE,
)


class Task(Base):
    """Work item assigned to a staff member, optionally tied to a restaurant.

    Tasks move one way from ``pending`` to ``completed`` and are never
    hard-deleted by the follow-up workflow.  ``completed_at`` and
    ``completion_notes`` are the task's own completion fields; the audit
    trail of what happened lives in ``task_outcomes``.
    """

    __tablename__ = "tasks"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    title = Column(String(255), nullable=False)
    description = Column(Text)
    task_type = Column(String(30), nullable=False)
    status = Column(String(20), nullable=False, server_default="pending")
    priority = Column(String(20), nullable=False, server_default="medium")
    due_date = Column(DateTime(timezone=True))
    estimated_duration_minutes = Column(Integer)
    assigned_to_user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by_user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    restaurant_id = Column(
        UUID(as_uuid=True), ForeignKey("restaurants.id", ondelete="SET NULL")
    )
    lead_id = Column(UUID(as_uuid=True), ForeignKey("leads.id", ondelete="SET NULL"))
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id", ondelete="SET NULL"))
    completed_at = Column(DateTime(timezone=True))
    completion_notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    restaurant = relationship("Restaurant")
    assignee = relationship("User", foreign_keys=[assigned_to_user_id])
    escalations = relationship("Escalation", back_populates="task")

    __table_args__ = (
        CheckConstraint(TASK_TYPE_CHECK_CLAUSE, name="ck_task_type"),
        CheckConstraint(TASK_STATUS_CHECK_CLAUSE, name="ck_task_status"),
        CheckConstraint(TASK_PRIORITY_CHECK_CLAUSE, name="ck_task_priority"),
        Index("ix_tasks_status_due_date", "status", "due_date"),
        Index("ix_tasks_assigned_to_user_id", "assigned_to_user_id"),
    )
