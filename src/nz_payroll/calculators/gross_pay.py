"""Worked hours and gross pay from timesheet entries."""

from __future__ import annotations

from datetime import time
from decimal import Decimal
from typing import Iterable

from nz_payroll.calculators.errors import InvalidInputError
from nz_payroll.calculators.money import ZERO, round_to_cents
from nz_payroll.calculators.types import (
    PERIODS_PER_YEAR,
    Employee,
    EmploymentType,
    PayPeriodType,
    TimesheetEntry,
)

# 40 hours * 52 weeks
STANDARD_ANNUAL_HOURS = Decimal("2080")

_SECONDS_PER_DAY = 24 * 60 * 60


def _seconds(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


def worked_hours(entry: TimesheetEntry) -> Decimal:
    """Hours worked for an entry, net of breaks.

    An end time earlier than the start time is a shift crossing midnight.
    """
    elapsed = _seconds(entry.end_time) - _seconds(entry.start_time)
    if elapsed < 0:
        elapsed += _SECONDS_PER_DAY
    elapsed -= entry.break_minutes * 60

    if elapsed < 0:
        raise InvalidInputError(
            "break_minutes", entry.break_minutes, "break is longer than the shift"
        )
    return Decimal(elapsed) / Decimal(3600)


def calculate_gross_pay(
    employee: Employee,
    entries: Iterable[TimesheetEntry],
    period: PayPeriodType | str = PayPeriodType.FORTNIGHTLY,
) -> Decimal:
    """Gross pay for one period.

    Salaried employees receive their annualised rate spread evenly across
    the year's periods. Everyone else is paid worked hours at the hourly
    rate times each entry's rate multiplier.
    """
    period = PayPeriodType.coerce(period)

    if employee.employment_type == EmploymentType.SALARY:
        annual_salary = employee.hourly_rate * STANDARD_ANNUAL_HOURS
        return round_to_cents(annual_salary / PERIODS_PER_YEAR[period])

    total = ZERO
    for entry in entries:
        multiplier = entry.rate_multiplier or Decimal("1")
        total += worked_hours(entry) * employee.hourly_rate * multiplier
    return round_to_cents(total)
