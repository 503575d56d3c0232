from typing import FrozenSet

from app.schemas.common import (
    LeadStatus,
    OrderStatus,
    TaskPriority,
    TaskStatus,
    TaskType,
    UserRole,
)


def _check_clause(column: str, values) -> str:
    """Build a SQL ``IN`` CHECK clause from enum members."""
    return f"{column} IN ({', '.join(repr(v.value) for v in values)})"


TASK_TYPES: FrozenSet[str] = frozenset(t.value for t in TaskType)
TASK_STATUSES: FrozenSet[str] = frozenset(s.value for s in TaskStatus)
TASK_PRIORITIES: FrozenSet[str] = frozenset(p.value for p in TaskPriority)
LEAD_STATUSES: FrozenSet[str] = frozenset(s.value for s in LeadStatus)
ORDER_STATUSES: FrozenSet[str] = frozenset(s.value for s in OrderStatus)
USER_ROLES: FrozenSet[str] = frozenset(r.value for r in UserRole)

# Roles that receive overdue-task escalations
MANAGER_ROLES: FrozenSet[str] = frozenset(
    {UserRole.admin.value, UserRole.manager.value}
)

TASK_TYPE_CHECK_CLAUSE: str = _check_clause("task_type", TaskType)
TASK_STATUS_CHECK_CLAUSE: str = _check_clause("status", TaskStatus)
TASK_PRIORITY_CHECK_CLAUSE: str = _check_clause("priority", TaskPriority)
LEAD_STATUS_CHECK_CLAUSE: str = _check_clause("status", LeadStatus)
ORDER_STATUS_CHECK_CLAUSE: str = _check_clause("status", OrderStatus)
USER_ROLE_CHECK_CLAUSE: str = _check_clause("role", UserRole)

# Task created by the follow-up form
FOLLOW_UP_ESTIMATED_MINUTES: int = 30

ESCALATION_REASON_OVERDUE: str = "overdue_followup"

# Activity log vocabulary
ACTIVITY_TARGET_VISIT: str = "VISIT"
ACTIVITY_OUTCOME_RECORDED: str = "OUTCOME_RECORDED"

# Notification copy and deep links
REMINDER_TITLE: str = "Follow-up Reminder"
ESCALATION_TITLE: str = "Overdue Follow-up Task"
ESCALATION_LINK: str = "/tasks"


def restaurant_link(restaurant_id) -> str:
    """Deep link to a restaurant page consumed by the UI."""
    return f"/restaurants/{restaurant_id}"
