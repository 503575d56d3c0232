from pydantic import BaseModel, ConfigDict, Field


class SweepResponse(BaseModel):
    """JSON body returned to the external scheduler.

    Field names are camelCase on the wire because the scheduler predates
    this service and parses exactly these keys.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    overdue_tasks_processed: int = Field(..., alias="overdueTasksProcessed")
    upcoming_reminders: int = Field(..., alias="upcomingReminders")
    # True when another sweep held the lock and nothing was processed
    skipped: bool = False
