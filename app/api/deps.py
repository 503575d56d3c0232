"""API-layer dependency functions.

Re-exports all dependency factories from ``app.dependencies`` so that
endpoint modules only need to import from ``app.api.deps``.
"""

from app.dependencies import (
    # Acting user
    get_current_user_id,
    # Repository factories
    get_task_repo,
    get_notification_repo,
    get_escalation_repo,
    get_calendar_repo,
    get_lead_repo,
    get_order_repo,
    get_outcome_repo,
    get_activity_repo,
    # Service factories
    get_task_creation_service,
    get_task_service,
    get_outcome_recorder,
    get_notification_service,
    # Redis
    get_redis_client,
    get_cache_service,
)

__all__ = [
    "get_current_user_id",
    "get_task_repo",
    "get_notification_repo",
    "get_escalation_repo",
    "get_calendar_repo",
    "get_lead_repo",
    "get_order_repo",
    "get_outcome_repo",
    "get_activity_repo",
    "get_task_creation_service",
    "get_task_service",
    "get_outcome_recorder",
    "get_notification_service",
    "get_redis_client",
    "get_cache_service",
]
