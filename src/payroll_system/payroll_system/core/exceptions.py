class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, period, entry or record does not exist."""


class InvalidPeriodError(ValidationError):
    """Raised when a payroll period is missing or its date range is inverted.

    Aborts a whole generation batch.
    """


class DuplicateEntryError(DomainError):
    """Raised by storage when an (employee, period) entry already exists."""

    def __init__(self, employee_id: int, period_id: int):
        super().__init__(f"Payroll entry already exists for employee {employee_id} in period {period_id}")
        self.employee_id = employee_id
        self.period_id = period_id


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not allowed by the workflow."""


class PayrollBatchError(DomainError):
    """Raised when a batch is run with abort_on_failure and any employee fails.

    Nothing from the batch has been written.
    """

    def __init__(self, result):
        super().__init__(f"Payroll batch for period {result.period_id} aborted: {result.failed_count} failure(s)")
        self.result = result


class StaleEntryError(DomainError):
    """Raised when an entry planned for replacement is gone or already paid at write time."""

    def __init__(self, entry_id: int):
        super().__init__(f"Payroll entry {entry_id} changed while the batch was running")
        self.entry_id = entry_id
