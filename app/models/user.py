from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String, text
from sqlalchemy.dialects.postgresql import UUID
from app.models.base import Base
from sqlalchemy.sql import func

from app.core.constants import USER_ROLE_CHECK_CLAUSE


class User(Base):
    """Staff member of the distribution company.

    Mirrors the hosted auth profile table.  ``role`` decides who receives
    overdue-task escalations (``admin`` and ``manager``).
    """

    __tablename__ = "users"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, server_default="salesperson")
    is_active = Column(Boolean, nullable=False, server_default=text("true"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (CheckConstraint(USER_ROLE_CHECK_CLAUSE, name="ck_user_role"),)
