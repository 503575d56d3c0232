"""add generate_order_number() and the open-escalation unique index

Revision ID: 1b2c3d4e5f6a
Revises: 0a1b2c3d4e5f
Create Date: 2026-10-05 09:30:00.000000

This migration:
  UPGRADE:
    1. Creates ``order_number_seq`` and ``generate_order_number()``,
       which returns ``ORD-YYYYMMDD-NNNNN``.
    2. Adds ``uq_escalation_open_task_manager``: at most one unresolved
       escalation per (task, manager).  Existing duplicate open rows are
       resolved first, keeping the earliest.

  DOWNGRADE:
    Drops the index, the function and the sequence.
"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "1b2c3d4e5f6a"
down_revision: Union[str, None] = "0a1b2c3d4e5f"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE SEQUENCE IF NOT EXISTS order_number_seq")
    op.execute("""
        CREATE OR REPLACE FUNCTION generate_order_number()
        RETURNS TEXT AS $$
        BEGIN
            RETURN 'ORD-'
                || to_char(now(), 'YYYYMMDD')
                || '-'
                || lpad(nextval('order_number_seq')::text, 5, '0');
        END;
        $$ LANGUAGE plpgsql;
    """)

    op.execute("""
        UPDATE follow_up_escalations e
        SET resolved_at = now()
        WHERE e.resolved_at IS NULL
          AND EXISTS (
              SELECT 1 FROM follow_up_escalations older
              WHERE older.task_id = e.task_id
                AND older.escalated_to_user_id = e.escalated_to_user_id
                AND older.resolved_at IS NULL
                AND (older.escalated_at, older.id) < (e.escalated_at, e.id)
          )
    """)
    op.execute("""
        CREATE UNIQUE INDEX uq_escalation_open_task_manager
        ON follow_up_escalations (task_id, escalated_to_user_id)
        WHERE resolved_at IS NULL
    """)


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS uq_escalation_open_task_manager")
    op.execute("DROP FUNCTION IF EXISTS generate_order_number()")
    op.execute("DROP SEQUENCE IF EXISTS order_number_seq")
