"""Error kinds raised by the calculation core."""

from __future__ import annotations

from datetime import date
from typing import Any


class PayrollError(Exception):
    """Base class for payroll calculation and validation errors."""

    code = "PayrollError"


class InvalidInputError(PayrollError):
    """Raised for negative pay, malformed dates and similar bad inputs."""

    code = "InvalidInput"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class InvalidTaxCodeError(PayrollError):
    """Raised when a tax code is not in the active policy table."""

    code = "InvalidTaxCode"

    def __init__(self, tax_code: str):
        self.tax_code = tax_code
        super().__init__(f"Unrecognised tax code '{tax_code}'")


class InsufficientBalanceError(PayrollError):
    """Raised when a leave request exceeds the available balance."""

    code = "InsufficientBalance"

    def __init__(self, requested_hours: Any, available_hours: Any):
        self.requested_hours = requested_hours
        self.available_hours = available_hours
        super().__init__(
            f"Insufficient leave balance. Available: {available_hours}h, "
            f"Requested: {requested_hours}h"
        )


class QualifyingPeriodNotMetError(PayrollError):
    """Raised when an employee has not served the qualifying period."""

    code = "QualifyingPeriodNotMet"

    def __init__(self, leave_type: str, months_required: int, months_employed: int):
        self.leave_type = leave_type
        self.months_required = months_required
        self.months_employed = months_employed
        super().__init__(
            f"Must be employed for {months_required} months to take {leave_type} leave"
        )


class NoticePeriodNotMetError(PayrollError):
    """Raised when leave is requested with too little notice."""

    code = "NoticePeriodNotMet"

    def __init__(self, leave_type: str, days_required: int, days_given: int):
        self.leave_type = leave_type
        self.days_required = days_required
        self.days_given = days_given
        super().__init__(
            f"{leave_type.capitalize()} leave requests require {days_required} days notice"
        )


class InvalidDateRangeError(PayrollError):
    """Raised when a date range is reversed or otherwise unusable."""

    code = "InvalidDateRange"

    def __init__(self, start: date | None, end: date | None, reason: str):
        self.start = start
        self.end = end
        self.reason = reason
        super().__init__(f"Invalid date range {start} to {end}: {reason}")


class PolicyNotFoundError(PayrollError):
    """Raised when no policy table version is effective on a date."""

    code = "PolicyNotFound"

    def __init__(self, as_of_date: date):
        self.as_of_date = as_of_date
        super().__init__(f"No payroll policy effective {as_of_date}")


class InvalidTransitionError(PayrollError):
    """Raised when an invalid leave status transition is attempted."""

    code = "InvalidTransition"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class LeaveValidationError(PayrollError):
    """Raised when a leave transition is attempted on an invalid request."""

    code = "LeaveValidationFailed"

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__(
            "Leave request failed validation: "
            + "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        )
