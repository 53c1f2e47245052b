"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from nz_payroll.calculators.errors import InvalidInputError
from nz_payroll.calculators.ird import validate_ird_number
from nz_payroll.calculators.money import ZERO, to_decimal


class PayPeriodType(str, Enum):
    """Pay frequencies."""

    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"

    @classmethod
    def coerce(cls, value: PayPeriodType | str) -> PayPeriodType:
        """Accept an enum member or its string value."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError("pay_period", value, "unknown pay period") from None


PERIODS_PER_YEAR: dict[PayPeriodType, int] = {
    PayPeriodType.WEEKLY: 52,
    PayPeriodType.FORTNIGHTLY: 26,
    PayPeriodType.MONTHLY: 12,
}

# Monthly is 40 * 52 / 12, truncated to cents
HOURS_PER_PERIOD: dict[PayPeriodType, Decimal] = {
    PayPeriodType.WEEKLY: Decimal("40"),
    PayPeriodType.FORTNIGHTLY: Decimal("80"),
    PayPeriodType.MONTHLY: Decimal("173.33"),
}


class EmploymentType(str, Enum):
    """How an employee is paid."""

    SALARY = "salary"
    HOURLY = "hourly"
    TRAINING = "training"


class LeaveType(str, Enum):
    """Statutory leave types."""

    ANNUAL = "annual"
    SICK = "sick"
    BEREAVEMENT = "bereavement"
    FAMILY_VIOLENCE = "family_violence"
    PARENTAL = "parental"

    @classmethod
    def coerce(cls, value: LeaveType | str) -> LeaveType:
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError("leave_type", value, "unknown leave type") from None


class LeaveStatus(str, Enum):
    """Leave request status values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


def _parse_date(value: Any, field_name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise InvalidInputError(field_name, value, "expected YYYY-MM-DD") from None


def _parse_time(value: Any, field_name: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value))
    except ValueError:
        raise InvalidInputError(field_name, value, "expected HH:MM[:SS]") from None


@dataclass(frozen=True)
class Employee:
    """Employee profile as consumed by the calculators."""

    employee_id: UUID | str
    hourly_rate: Decimal
    employment_type: EmploymentType = EmploymentType.HOURLY
    tax_code: str = "M"
    kiwisaver_enrolled: bool = False
    kiwisaver_rate: Decimal = Decimal("3")  # Percent, e.g. 3 for 3%
    ird_number: str | None = None
    employment_start_date: date | None = None
    status: str = "active"  # Soft status; employees are never hard-deleted

    def __post_init__(self) -> None:
        rate = to_decimal(self.hourly_rate, "hourly_rate")
        if rate <= 0:
            raise InvalidInputError("hourly_rate", self.hourly_rate, "must be greater than 0")
        object.__setattr__(self, "hourly_rate", rate)
        object.__setattr__(self, "kiwisaver_rate", to_decimal(self.kiwisaver_rate, "kiwisaver_rate"))

        try:
            object.__setattr__(self, "employment_type", EmploymentType(self.employment_type))
        except ValueError:
            raise InvalidInputError(
                "employment_type", self.employment_type, "unknown employment type"
            ) from None

        if self.ird_number is not None and not validate_ird_number(self.ird_number):
            raise InvalidInputError("ird_number", self.ird_number, "failed checksum validation")


@dataclass(frozen=True)
class TimesheetEntry:
    """A single worked shift. Immutable once approved."""

    work_date: date
    start_time: time
    end_time: time
    break_minutes: int = 0
    is_overtime: bool = False
    overtime_rate: Decimal | None = None
    rate_multiplier: Decimal | None = None

    def __post_init__(self) -> None:
        if self.break_minutes < 0:
            raise InvalidInputError("break_minutes", self.break_minutes, "must not be negative")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimesheetEntry:
        """Build an entry from ISO strings as stored by the data layer."""
        overtime_rate = data.get("overtime_rate")
        rate_multiplier = data.get("rate_multiplier")
        return cls(
            work_date=_parse_date(data.get("work_date", data.get("date")), "date"),
            start_time=_parse_time(data["start_time"], "start_time"),
            end_time=_parse_time(data["end_time"], "end_time"),
            break_minutes=int(data.get("break_minutes") or 0),
            is_overtime=bool(data.get("is_overtime", False)),
            overtime_rate=to_decimal(overtime_rate, "overtime_rate") if overtime_rate else None,
            rate_multiplier=(
                to_decimal(rate_multiplier, "rate_multiplier") if rate_multiplier else None
            ),
        )


@dataclass(frozen=True)
class LeaveRequest:
    """A leave request. Immutable; status changes produce new instances."""

    leave_type: LeaveType
    start_date: date | None
    end_date: date | None
    status: LeaveStatus = LeaveStatus.PENDING
    employee_id: UUID | str | None = None
    immediate_family: bool = False  # Bereavement only
    request_id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class KiwiSaverResult:
    """Employee and employer KiwiSaver amounts for one pay."""

    employee_deduction: Decimal
    employer_contribution: Decimal
    applied_rate: Decimal  # Fraction after clamping, 0 when not enrolled


@dataclass(frozen=True)
class ACCLevyResult:
    """ACC earners' levy for one pay and the updated year-to-date figure."""

    levy: Decimal
    ytd_earnings: Decimal
    remaining_cap: Decimal
    capped_earnings: Decimal
    levy_rate: Decimal
    period: PayPeriodType


@dataclass(frozen=True)
class MinimumWageCheck:
    """Advisory minimum wage comparison."""

    compliant: bool
    required_rate: Decimal
    actual_rate: Decimal


@dataclass(frozen=True)
class DeductionResult:
    """All statutory deductions for one pay."""

    gross_pay: Decimal
    paye_tax: Decimal
    kiwisaver_deduction: Decimal
    employer_kiwisaver: Decimal
    acc_levy: Decimal
    acc_ytd_earnings: Decimal
    acc_remaining_cap: Decimal
    net_pay: Decimal
    minimum_wage_check: MinimumWageCheck

    @property
    def total_deductions(self) -> Decimal:
        return self.paye_tax + self.kiwisaver_deduction + self.acc_levy


@dataclass(frozen=True)
class PayrollCalculationResult:
    """Payslip figures for one employee in one run. Never mutated."""

    employee_id: UUID | str
    calculation_id: UUID
    period: PayPeriodType
    policy_version: str
    deductions: DeductionResult
    period_start: date | None = None
    period_end: date | None = None

    @property
    def gross_pay(self) -> Decimal:
        return self.deductions.gross_pay

    @property
    def net_pay(self) -> Decimal:
        return self.deductions.net_pay

    @property
    def paye_tax(self) -> Decimal:
        return self.deductions.paye_tax

    @property
    def acc_levy(self) -> Decimal:
        return self.deductions.acc_levy

    @property
    def kiwisaver_deduction(self) -> Decimal:
        return self.deductions.kiwisaver_deduction

    @property
    def employer_kiwisaver(self) -> Decimal:
        return self.deductions.employer_kiwisaver

    def to_dict(self) -> dict[str, Any]:
        """Flat representation for persistence and export."""
        d = self.deductions
        return {
            "employee_id": str(self.employee_id),
            "calculation_id": str(self.calculation_id),
            "period": self.period.value,
            "policy_version": self.policy_version,
            "period_start": self.period_start.isoformat() if self.period_start else None,
            "period_end": self.period_end.isoformat() if self.period_end else None,
            "gross_pay": str(d.gross_pay),
            "paye_tax": str(d.paye_tax),
            "kiwisaver_deduction": str(d.kiwisaver_deduction),
            "employer_kiwisaver": str(d.employer_kiwisaver),
            "acc_levy": str(d.acc_levy),
            "net_pay": str(d.net_pay),
            "minimum_wage_compliant": d.minimum_wage_check.compliant,
        }


@dataclass(frozen=True)
class EmployeeFailure:
    """A per-employee failure recorded during a batch run."""

    employee_id: UUID | str
    code: str
    message: str


@dataclass
class PayRunCalculationResult:
    """Result of calculating an entire pay run."""

    results: dict[Any, PayrollCalculationResult] = field(default_factory=dict)
    failures: dict[Any, EmployeeFailure] = field(default_factory=dict)
    total_gross: Decimal = ZERO
    total_net: Decimal = ZERO

    @property
    def error_count(self) -> int:
        return len(self.failures)

    @property
    def success(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class YTDTotals:
    """Year-to-date totals summed across payslips."""

    gross: Decimal = ZERO
    paye: Decimal = ZERO
    acc: Decimal = ZERO
    kiwisaver: Decimal = ZERO
    total_deductions: Decimal = ZERO
    net: Decimal = ZERO
