"""initial schema: users, restaurants, leads, orders, tasks and follow-up tables

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-05 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0a1b2c3d4e5f"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Keep in sync with the enums in app.schemas.common
_TASK_TYPES_IN = "'lead_followup', 'visit', 'delivery', 'uco_collection', 'general'"
_TASK_STATUSES_IN = "'pending', 'completed'"
_TASK_PRIORITIES_IN = "'low', 'medium', 'high', 'urgent'"
_LEAD_STATUSES_IN = (
    "'CONTACT_STAGE', 'MEETING_STAGE', 'PRESENTATION_NEGOTIATION', "
    "'CLOSED_WON', 'CLOSED_LOST'"
)
_ORDER_STATUSES_IN = (
    "'PENDING_CONFIRMATION', 'CONFIRMED', 'OUT_FOR_DELIVERY', "
    "'DELIVERED', 'CANCELLED'"
)
_USER_ROLES_IN = "'admin', 'salesperson', 'staff', 'manager', 'viewer'"


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")
    )


def _user_fk(name: str, ondelete: str, nullable: bool = True) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="salesperson"),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")
        ),
        _created_at(),
        sa.CheckConstraint(f"role IN ({_USER_ROLES_IN})", name="ck_user_role"),
    )

    op.create_table(
        "restaurants",
        _id_column(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("township", sa.String(100)),
        sa.Column("phone", sa.String(30)),
        _user_fk("salesperson_id", "SET NULL"),
        _created_at(),
        _updated_at(),
    )

    op.create_table(
        "leads",
        _id_column(),
        sa.Column(
            "restaurant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("restaurants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column(
            "status", sa.String(40), nullable=False, server_default="CONTACT_STAGE"
        ),
        sa.Column("next_action_description", sa.Text()),
        sa.Column("next_action_date", sa.DateTime(timezone=True)),
        _user_fk("assigned_to_user_id", "SET NULL"),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(f"status IN ({_LEAD_STATUSES_IN})", name="ck_lead_status"),
    )
    op.create_index("ix_leads_restaurant_id", "leads", ["restaurant_id"])

    op.create_table(
        "orders",
        _id_column(),
        sa.Column("order_number", sa.String(40), nullable=False, unique=True),
        sa.Column(
            "restaurant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("restaurants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "lead_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("leads.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "order_date", sa.DateTime(timezone=True), server_default=sa.text("now()")
        ),
        sa.Column(
            "status",
            sa.String(30),
            nullable=False,
            server_default="PENDING_CONFIRMATION",
        ),
        sa.Column(
            "total_amount_kyats",
            sa.Numeric(15, 2),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("notes", sa.Text()),
        _user_fk("created_by_user_id", "SET NULL"),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(
            f"status IN ({_ORDER_STATUSES_IN})", name="ck_order_status"
        ),
    )

    op.create_table(
        "tasks",
        _id_column(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("task_type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("due_date", sa.DateTime(timezone=True)),
        sa.Column("estimated_duration_minutes", sa.Integer()),
        _user_fk("assigned_to_user_id", "CASCADE", nullable=False),
        _user_fk("created_by_user_id", "CASCADE", nullable=False),
        sa.Column(
            "restaurant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("restaurants.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "lead_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("leads.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "order_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("orders.id", ondelete="SET NULL"),
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("completion_notes", sa.Text()),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(f"task_type IN ({_TASK_TYPES_IN})", name="ck_task_type"),
        sa.CheckConstraint(f"status IN ({_TASK_STATUSES_IN})", name="ck_task_status"),
        sa.CheckConstraint(
            f"priority IN ({_TASK_PRIORITIES_IN})", name="ck_task_priority"
        ),
    )
    op.create_index("ix_tasks_status_due_date", "tasks", ["status", "due_date"])
    op.create_index("ix_tasks_assigned_to_user_id", "tasks", ["assigned_to_user_id"])

    op.create_table(
        "calendar_events",
        _id_column(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("event_type", sa.String(30), nullable=False),
        sa.Column("start_datetime", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_datetime", sa.DateTime(timezone=True)),
        sa.Column("status", sa.String(20), server_default="scheduled"),
        sa.Column("priority", sa.String(20)),
        _user_fk("created_by_user_id", "CASCADE", nullable=False),
        _user_fk("assigned_to_user_id", "SET NULL"),
        sa.Column(
            "restaurant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("restaurants.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "task_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("tasks.id", ondelete="SET NULL"),
        ),
        _created_at(),
    )

    op.create_table(
        "notifications",
        _id_column(),
        _user_fk("user_id", "CASCADE", nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("link", sa.String(500)),
        sa.Column(
            "is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        _created_at(),
    )
    op.create_index(
        "ix_notifications_user_created", "notifications", ["user_id", "created_at"]
    )

    op.create_table(
        "follow_up_escalations",
        _id_column(),
        sa.Column(
            "task_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("escalated_to_user_id", "CASCADE", nullable=False),
        sa.Column("escalation_reason", sa.String(50)),
        sa.Column(
            "escalated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")
        ),
        sa.Column("resolved_at", sa.DateTime(timezone=True)),
        _user_fk("resolved_by_user_id", "SET NULL"),
    )

    op.create_table(
        "task_outcomes",
        _id_column(),
        sa.Column(
            "task_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("lead_status", sa.String(40)),
        sa.Column("next_action", sa.Text()),
        sa.Column("next_action_date", sa.DateTime(timezone=True)),
        sa.Column(
            "order_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("orders.id", ondelete="SET NULL"),
        ),
        sa.Column("notes", sa.Text()),
        _user_fk("created_by", "SET NULL"),
        _created_at(),
    )

    op.create_table(
        "activity_logs",
        _id_column(),
        _user_fk("user_id", "CASCADE", nullable=False),
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("target_type", sa.String(30), nullable=False),
        sa.Column("activity_type", sa.String(50)),
        sa.Column("activity_message", sa.Text(), nullable=False),
        sa.Column("context_data", postgresql.JSONB()),
        _created_at(),
    )


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("task_outcomes")
    op.drop_table("follow_up_escalations")
    op.drop_index("ix_notifications_user_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("calendar_events")
    op.drop_index("ix_tasks_assigned_to_user_id", table_name="tasks")
    op.drop_index("ix_tasks_status_due_date", table_name="tasks")
    op.drop_table("tasks")
    op.drop_table("orders")
    op.drop_index("ix_leads_restaurant_id", table_name="leads")
    op.drop_table("leads")
    op.drop_table("restaurants")
    op.drop_table("users")
