from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, JSONB
from app.models.base import Base
from sqlalchemy.sql import func


class ActivityLog(Base):
    __tablename__ = "activity_logs"
    id = Column(UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid())
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    target_id = Column(UUID(as_uuid=True), nullable=False)
    target_type = Column(String(30), nullable=False)
    activity_type = Column(String(50))
    activity_message = Column(Text, nullable=False)
    context_data = Column(JSONB)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
