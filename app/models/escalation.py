from sqlalchemy import Column, Index, String, DateTime, ForeignKey, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.models.base import Base
from sqlalchemy.sql import func


class Escalation(Base):
    """Manager-directed record that a follow-up task went overdue.

    One row per (task, manager).  The partial unique index allows at most
    one *unresolved* row per pair; once the task's outcome is recorded
    the rows are resolved and a later overdue period may escalate again.
    """

    __tablename__ = "follow_up_escalations"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    task_id = Column(
        UUID(as_uuid=True), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    escalated_to_user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    escalation_reason = Column(String(50))
    escalated_at = Column(DateTime(timezone=True), server_default=func.now())
    resolved_at = Column(DateTime(timezone=True))
    resolved_by_user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL")
    )

    task = relationship("Task", back_populates="escalations")

    __table_args__ = (
        Index(
            "uq_escalation_open_task_manager",
            "task_id",
            "escalated_to_user_id",
            unique=True,
            postgresql_where=text("resolved_at IS NULL"),
        ),
    )
