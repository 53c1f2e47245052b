"""Leave request validation.

Unlike the pay calculators, validation does not stop at the first problem:
every rule is checked and all violations are returned together, keyed by
the request field they concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Literal, Union

from nz_payroll.calculators.errors import (
    InsufficientBalanceError,
    InvalidDateRangeError,
    InvalidInputError,
    NoticePeriodNotMetError,
    PayrollError,
    QualifyingPeriodNotMetError,
)
from nz_payroll.calculators.money import Number, non_negative
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.types import LeaveRequest, LeaveType
from nz_payroll.leave.entitlement import months_employed
from nz_payroll.leave.holidays import HolidayCalendar, calculate_work_days


@dataclass(frozen=True)
class LeaveViolation:
    """One failed rule: the field it concerns, its error kind and a message."""

    field: str
    kind: str
    message: str
    error: PayrollError | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class LeaveRequestSummary:
    work_days: int
    hours: Decimal


@dataclass(frozen=True)
class LeaveRequestAccepted:
    value: LeaveRequestSummary
    kind: Literal["ok"] = "ok"

    @property
    def valid(self) -> bool:
        return True

    @property
    def errors(self) -> dict[str, str]:
        return {}


@dataclass(frozen=True)
class LeaveRequestRejected:
    violations: tuple[LeaveViolation, ...] = field(default_factory=tuple)
    kind: Literal["error"] = "error"

    @property
    def valid(self) -> bool:
        return False

    @property
    def errors(self) -> dict[str, str]:
        return {v.field: v.message for v in self.violations}


LeaveValidationResult = Union[LeaveRequestAccepted, LeaveRequestRejected]


class _Violations:
    """Ordered collector; a later violation on the same field replaces the earlier one."""

    def __init__(self) -> None:
        self._by_field: dict[str, LeaveViolation] = {}

    def add(self, field_name: str, kind: str, message: str) -> None:
        self._by_field[field_name] = LeaveViolation(field_name, kind, message)

    def add_error(self, field_name: str, error: PayrollError) -> None:
        self._by_field[field_name] = LeaveViolation(field_name, error.code, str(error), error)

    def __bool__(self) -> bool:
        return bool(self._by_field)

    def as_tuple(self) -> tuple[LeaveViolation, ...]:
        return tuple(self._by_field.values())


def validate_leave_request(
    request: LeaveRequest,
    employment_start_date: date,
    current_balance: Number,
    leave_type: LeaveType | str | None = None,
    as_of: date | None = None,
    policy: PayrollPolicy | None = None,
    calendar: HolidayCalendar | None = None,
) -> LeaveValidationResult:
    """Check a leave request against the statutory rules.

    `current_balance` is the available annual leave in hours. `leave_type`
    overrides the request's own type when given.
    """
    policy = policy or get_policy()
    rules = policy.leave
    as_of = as_of or date.today()
    balance = non_negative(current_balance, "current_balance")
    leave_type = LeaveType.coerce(leave_type or request.leave_type)

    start, end = request.start_date, request.end_date
    violations = _Violations()

    if start is None:
        violations.add("start_date", InvalidInputError.code, "Start date is required")
    if end is None:
        violations.add("end_date", InvalidInputError.code, "End date is required")
    if start is not None and end is not None and end < start:
        violations.add(
            "end_date", InvalidDateRangeError.code, "End date must be after start date"
        )

    required_months = rules.qualifying_months(leave_type)
    employed = months_employed(employment_start_date, as_of)
    if employed < required_months:
        violations.add_error(
            "qualifying",
            QualifyingPeriodNotMetError(leave_type.value, required_months, employed),
        )

    if start is not None:
        days_ahead = (start - as_of).days
        if leave_type == LeaveType.ANNUAL and days_ahead < rules.min_notice_days:
            violations.add_error(
                "notice",
                NoticePeriodNotMetError(leave_type.value, rules.min_notice_days, days_ahead),
            )
        if days_ahead > rules.max_future_days:
            violations.add(
                "future",
                InvalidDateRangeError.code,
                f"Leave cannot be booked more than {rules.max_future_days} days in advance",
            )

    work_days = 0
    if start is not None and end is not None and end >= start:
        work_days = calculate_work_days(start, end, calendar)
    hours = work_days * rules.hours_per_day

    if leave_type == LeaveType.ANNUAL and hours > balance:
        violations.add_error("balance", InsufficientBalanceError(hours, balance))

    if leave_type == LeaveType.BEREAVEMENT:
        max_days = (
            rules.bereavement_immediate_family_days
            if request.immediate_family
            else rules.bereavement_other_days
        )
        if work_days > max_days:
            violations.add(
                "duration",
                InvalidInputError.code,
                f"Maximum {max_days} days allowed for this type of bereavement leave",
            )

    if violations:
        return LeaveRequestRejected(violations.as_tuple())
    return LeaveRequestAccepted(LeaveRequestSummary(work_days=work_days, hours=hours))
