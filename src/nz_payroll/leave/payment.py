"""Holidays Act leave payment rates.

Three rates are derived from timesheet history:

- Ordinary weekly pay (OWP): the greater of a standard week at the hourly
  rate and average earnings over the trailing four weeks.
- Average weekly earnings (AWE): earnings over the trailing 52 weeks
  divided by the weeks elapsed in that window.
- Relevant daily pay (RDP): earnings over the trailing four weeks divided
  by the number of days worked.

Annual leave is always paid at the greater of OWP and AWE.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from nz_payroll.calculators.errors import InvalidDateRangeError
from nz_payroll.calculators.gross_pay import worked_hours
from nz_payroll.calculators.money import ZERO, Number, non_negative, round_to_cents
from nz_payroll.calculators.policy import LeavePolicy, PayrollPolicy, get_policy
from nz_payroll.calculators.types import TimesheetEntry
from nz_payroll.leave.holidays import HolidayCalendar, calculate_work_days

FOUR_WEEKS = timedelta(days=28)
FIFTY_TWO_WEEKS = timedelta(weeks=52)


@dataclass(frozen=True)
class LeaveCost:
    """Cost of a leave request under the greater-of rule."""

    work_days: int
    ordinary_weekly_pay: Decimal
    average_weekly_earnings: Decimal
    weekly_rate: Decimal
    daily_rate: Decimal
    amount: Decimal


@dataclass(frozen=True)
class PublicHolidayPay:
    """Pay for working a public holiday."""

    pay: Decimal
    paid_hours: Decimal
    alternative_holiday_earned: bool


def _entry_earnings(
    entry: TimesheetEntry,
    hourly_rate: Decimal,
    include_overtime: bool,
    leave: LeavePolicy,
) -> Decimal:
    pay = worked_hours(entry) * hourly_rate
    if include_overtime and leave.include_overtime and entry.is_overtime:
        pay *= entry.overtime_rate or leave.default_overtime_rate
    return pay


def _in_window(
    entries: Iterable[TimesheetEntry], start: date, end: date
) -> list[TimesheetEntry]:
    return [e for e in entries if start <= e.work_date <= end]


def _trailing_start(as_of: date, length: timedelta) -> date:
    """First date of the window of `length` days ending on `as_of`."""
    return as_of - length + timedelta(days=1)


def _standard_week(hourly_rate: Decimal, leave: LeavePolicy) -> Decimal:
    return hourly_rate * leave.hours_per_day * leave.days_per_week


def calculate_ordinary_weekly_pay(
    hourly_rate: Number,
    entries: Iterable[TimesheetEntry],
    include_overtime: bool = True,
    as_of: date | None = None,
    policy: PayrollPolicy | None = None,
) -> Decimal:
    """Greater of a standard 40-hour week and the trailing 4-week average."""
    policy = policy or get_policy()
    rate = non_negative(hourly_rate, "hourly_rate")
    as_of = as_of or date.today()

    regular_weekly_pay = _standard_week(rate, policy.leave)
    recent = _in_window(entries, _trailing_start(as_of, FOUR_WEEKS), as_of)
    if not recent:
        return round_to_cents(regular_weekly_pay)

    total = sum(
        (_entry_earnings(e, rate, include_overtime, policy.leave) for e in recent), ZERO
    )
    return round_to_cents(max(regular_weekly_pay, total / 4))


def calculate_average_weekly_earnings(
    hourly_rate: Number,
    entries: Iterable[TimesheetEntry],
    include_overtime: bool = True,
    as_of: date | None = None,
    employment_start: date | None = None,
    policy: PayrollPolicy | None = None,
) -> Decimal:
    """Trailing 52-week earnings divided by the weeks in the window.

    The window starts at the later of 52 weeks ago and the employment start
    date; a partial final week counts as a whole week.
    """
    policy = policy or get_policy()
    rate = non_negative(hourly_rate, "hourly_rate")
    as_of = as_of or date.today()

    window_start = _trailing_start(as_of, FIFTY_TWO_WEEKS)
    if employment_start is not None and employment_start > window_start:
        window_start = employment_start

    year_entries = _in_window(entries, window_start, as_of)
    if not year_entries:
        return round_to_cents(_standard_week(rate, policy.leave))

    total = sum(
        (_entry_earnings(e, rate, include_overtime, policy.leave) for e in year_entries), ZERO
    )
    weeks = max(1, math.ceil(((as_of - window_start).days + 1) / 7))
    return round_to_cents(total / weeks)


def calculate_relevant_daily_pay(
    hourly_rate: Number,
    entries: Iterable[TimesheetEntry],
    include_overtime: bool = True,
    as_of: date | None = None,
    policy: PayrollPolicy | None = None,
) -> Decimal:
    """Trailing 4-week earnings divided by the distinct days worked."""
    policy = policy or get_policy()
    rate = non_negative(hourly_rate, "hourly_rate")
    as_of = as_of or date.today()

    recent = _in_window(entries, _trailing_start(as_of, FOUR_WEEKS), as_of)
    if not recent:
        return round_to_cents(rate * policy.leave.hours_per_day)

    total = sum(
        (_entry_earnings(e, rate, include_overtime, policy.leave) for e in recent), ZERO
    )
    days_worked = len({e.work_date for e in recent})
    return round_to_cents(total / days_worked)


def calculate_leave_pay(
    ordinary_weekly_pay: Number,
    average_weekly_earnings: Number,
    days: Number,
    policy: PayrollPolicy | None = None,
) -> Decimal:
    """Pay for leave days at the greater of OWP and AWE.

    The greater-of rule is statutory and deliberately has no switch.
    """
    policy = policy or get_policy()
    weekly_rate = max(
        non_negative(ordinary_weekly_pay, "ordinary_weekly_pay"),
        non_negative(average_weekly_earnings, "average_weekly_earnings"),
    )
    daily_rate = weekly_rate / policy.leave.days_per_week
    return round_to_cents(daily_rate * non_negative(days, "days"))


def calculate_leave_cost(
    hourly_rate: Number,
    entries: Iterable[TimesheetEntry],
    start_date: date,
    end_date: date,
    include_overtime: bool = True,
    as_of: date | None = None,
    employment_start: date | None = None,
    policy: PayrollPolicy | None = None,
    calendar: HolidayCalendar | None = None,
) -> LeaveCost:
    """Cost a leave request from timesheet history."""
    if end_date < start_date:
        raise InvalidDateRangeError(start_date, end_date, "end date is before start date")

    policy = policy or get_policy()
    entries = list(entries)

    owp = calculate_ordinary_weekly_pay(hourly_rate, entries, include_overtime, as_of, policy)
    awe = calculate_average_weekly_earnings(
        hourly_rate, entries, include_overtime, as_of, employment_start, policy
    )
    work_days = calculate_work_days(start_date, end_date, calendar)
    weekly_rate = max(owp, awe)

    return LeaveCost(
        work_days=work_days,
        ordinary_weekly_pay=owp,
        average_weekly_earnings=awe,
        weekly_rate=weekly_rate,
        daily_rate=round_to_cents(weekly_rate / policy.leave.days_per_week),
        amount=calculate_leave_pay(owp, awe, work_days, policy),
    )


def calculate_public_holiday_pay(
    hourly_rate: Number,
    hours: Number,
    is_working_day: bool,
    policy: PayrollPolicy | None = None,
) -> PublicHolidayPay:
    """Time and a half for public holiday work.

    On an otherwise working day at least the minimum hours are paid and an
    alternative holiday is earned.
    """
    leave = (policy or get_policy()).leave
    rate = non_negative(hourly_rate, "hourly_rate")
    worked = non_negative(hours, "hours")

    paid_hours = max(worked, leave.public_holiday_minimum_hours) if is_working_day else worked
    return PublicHolidayPay(
        pay=round_to_cents(paid_hours * rate * leave.public_holiday_rate),
        paid_hours=paid_hours,
        alternative_holiday_earned=is_working_day and worked > 0,
    )


def calculate_annual_leave_entitlement(
    weeks_employed: Number,
    policy: PayrollPolicy | None = None,
) -> Decimal:
    """Annual leave hours, pro-rata for under a year of employment."""
    leave = (policy or get_policy()).leave
    weeks = non_negative(weeks_employed, "weeks_employed")
    full = leave.annual_leave_weeks * leave.days_per_week * leave.hours_per_day
    if weeks < 52:
        return full * weeks / 52
    return full
