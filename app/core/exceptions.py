class DualLineOpsError(Exception):
    """Base class for all domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except DualLineOpsError`` clause can catch any domain
    error.
    """

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class TaskNotFoundError(DualLineOpsError):
    """Raised when a requested task does not exist."""

    def __init__(self, detail: str = "Task not found"):
        super().__init__(detail)


class NotificationNotFoundError(DualLineOpsError):
    """Raised when a notification does not exist or belongs to another user."""

    def __init__(self, detail: str = "Notification not found"):
        super().__init__(detail)


class NotAuthenticatedError(DualLineOpsError):
    """Raised when a request carries no usable user identity."""

    def __init__(self, detail: str = "User must be authenticated"):
        super().__init__(detail)


class OrderCreationError(DualLineOpsError):
    """Raised when the order requested by an outcome cannot be inserted.

    Order creation is the only outcome step before the audit row that
    aborts the whole operation.
    """

    def __init__(self, detail: str = "Failed to create order"):
        super().__init__(detail)


class OutcomeRecordingError(DualLineOpsError):
    """Raised when the task-outcome audit row cannot be written."""

    def __init__(self, detail: str = "Failed to record task outcome"):
        super().__init__(detail)


class SweepQueryError(DualLineOpsError):
    """Raised when the escalation sweep cannot read overdue tasks or managers.

    Everything after these initial queries is best-effort, so this is
    the only way a sweep invocation fails as a whole.
    """

    def __init__(self, detail: str = "Failed to query overdue tasks"):
        super().__init__(detail)
