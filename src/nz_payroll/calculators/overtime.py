"""Daily and weekly overtime breakdowns."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from nz_payroll.calculators.gross_pay import worked_hours
from nz_payroll.calculators.money import ZERO
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.types import TimesheetEntry


@dataclass(frozen=True)
class OvertimeBreakdown:
    """Hours split into ordinary, time-and-a-half and double time."""

    regular_hours: Decimal
    overtime_hours: Decimal
    double_time_hours: Decimal

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours + self.double_time_hours

    def pay(self, hourly_rate: Decimal, policy: PayrollPolicy | None = None) -> Decimal:
        """Pay for the breakdown at the policy's overtime multipliers."""
        ot = (policy or get_policy()).overtime
        return hourly_rate * (
            self.regular_hours
            + self.overtime_hours * ot.time_and_half_rate
            + self.double_time_hours * ot.double_time_rate
        )


def _split(total: Decimal, regular_limit: Decimal, overtime_limit: Decimal) -> OvertimeBreakdown:
    regular = min(total, regular_limit)
    remaining = max(total - regular, ZERO)
    overtime = min(remaining, overtime_limit)
    return OvertimeBreakdown(
        regular_hours=regular,
        overtime_hours=overtime,
        double_time_hours=max(remaining - overtime, ZERO),
    )


def calculate_daily_overtime(
    entries: Iterable[TimesheetEntry],
    on: date,
    policy: PayrollPolicy | None = None,
) -> OvertimeBreakdown:
    """Break down one day's hours (8 ordinary, then 4 at time and a half)."""
    ot = (policy or get_policy()).overtime
    total = sum((worked_hours(e) for e in entries if e.work_date == on), ZERO)
    return _split(total, ot.daily_regular_hours, ot.daily_time_and_half_hours)


def calculate_weekly_overtime(
    entries: Iterable[TimesheetEntry],
    week_start: date,
    policy: PayrollPolicy | None = None,
) -> OvertimeBreakdown:
    """Break down a week's hours (40 ordinary, then 20 at time and a half)."""
    ot = (policy or get_policy()).overtime
    week_end = week_start + timedelta(days=6)
    total = sum(
        (worked_hours(e) for e in entries if week_start <= e.work_date <= week_end),
        ZERO,
    )
    return _split(total, ot.weekly_regular_hours, ot.weekly_time_and_half_hours)
