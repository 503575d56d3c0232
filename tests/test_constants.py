from app.core.constants import (
    LEAD_STATUS_CHECK_CLAUSE,
    MANAGER_ROLES,
    TASK_TYPE_CHECK_CLAUSE,
    TASK_TYPES,
)
from app.schemas.common import LeadStatus, TaskType


def test_task_type_check_clause_lists_every_type():
    for task_type in TaskType:
        assert repr(task_type.value) in TASK_TYPE_CHECK_CLAUSE
    assert TASK_TYPES == {t.value for t in TaskType}


def test_lead_status_check_clause_uses_pipeline_stages():
    assert LEAD_STATUS_CHECK_CLAUSE.startswith("status IN (")
    for status in LeadStatus:
        assert repr(status.value) in LEAD_STATUS_CHECK_CLAUSE


def test_only_admins_and_managers_receive_escalations():
    assert MANAGER_ROLES == {"admin", "manager"}
