"""Domain exceptions for the payslip engine.

The HTTP layer maps these onto status codes; nothing in here knows about HTTP.
"""

from __future__ import annotations

from datetime import date
from typing import Any


class PayslipEngineError(Exception):
    """Base class for all engine errors."""

    code = "ENGINE_ERROR"


class NotFound(PayslipEngineError):
    """Employee, payslip or referenced record is absent."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, identifier: Any):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class AlreadyProcessed(PayslipEngineError):
    """A payslip already exists for the employee and period."""

    code = "ALREADY_PROCESSED"

    def __init__(self, employee_id: int, period_start: date, period_end: date):
        self.employee_id = employee_id
        self.period_start = period_start
        self.period_end = period_end
        super().__init__("payslip already exists for this period")


class FetchFailed(PayslipEngineError):
    """An underlying read failed; ``source`` names which one."""

    code = "FETCH_FAILED"

    def __init__(self, source: str, cause: BaseException):
        self.source = source
        self.cause = cause
        super().__init__(f"failed to get {source}: {cause}")


class PersistFailed(PayslipEngineError):
    """The final write failed."""

    code = "PERSIST_FAILED"

    def __init__(self, entity: str, cause: BaseException):
        self.entity = entity
        self.cause = cause
        super().__init__(f"failed to persist {entity}: {cause}")


class Forbidden(PayslipEngineError):
    """The Access Guard denied the request."""

    code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class ValidationError(PayslipEngineError):
    """Input violates a business rule."""

    code = "VALIDATION_ERROR"


class DeadlineExceeded(PayslipEngineError):
    """The caller's deadline passed before the work started."""

    code = "DEADLINE_EXCEEDED"

    def __init__(self, message: str = "deadline exceeded"):
        super().__init__(message)
