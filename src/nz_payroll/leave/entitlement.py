"""Leave entitlements: hours requested, balances and statutory eligibility."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from nz_payroll.calculators.errors import InvalidDateRangeError, PayrollError
from nz_payroll.calculators.money import ZERO, Number, non_negative
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.types import LeaveRequest, LeaveStatus, TimesheetEntry
from nz_payroll.leave.holidays import HolidayCalendar, calculate_work_days, is_public_holiday

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30.44
OTHERWISE_WORKING_DAY_THRESHOLD = 3

# Requests that still consume balance
_COUNTED_STATUSES = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED})


def months_employed(employment_start: date, as_of: date | None = None) -> int:
    """Whole months of employment, using a 30.44-day average month."""
    as_of = as_of or date.today()
    days = (as_of - employment_start).days
    if days <= 0:
        return 0
    return math.floor(days / DAYS_PER_MONTH)


def calculate_leave_hours(
    start_date: date,
    end_date: date,
    policy: PayrollPolicy | None = None,
    calendar: HolidayCalendar | None = None,
) -> Decimal:
    """Hours of leave a date range consumes: work days × hours per day."""
    if end_date < start_date:
        raise InvalidDateRangeError(start_date, end_date, "end date is before start date")

    work_days = calculate_work_days(start_date, end_date, calendar)
    if work_days == 0:
        raise InvalidDateRangeError(start_date, end_date, "no working days in range")

    return work_days * (policy or get_policy()).leave.hours_per_day


def calculate_total_leave_hours(
    requests: Iterable[LeaveRequest],
    policy: PayrollPolicy | None = None,
    calendar: HolidayCalendar | None = None,
) -> Decimal:
    """Sum hours over pending and approved requests.

    Requests with unusable dates are logged and skipped.
    """
    total = ZERO
    for request in requests:
        if LeaveStatus(request.status) not in _COUNTED_STATUSES:
            continue
        if request.start_date is None or request.end_date is None:
            logger.warning("Skipping leave request %s without dates", request.request_id)
            continue
        try:
            total += calculate_leave_hours(request.start_date, request.end_date, policy, calendar)
        except PayrollError as e:
            logger.warning("Skipping leave request %s: %s", request.request_id, e)
    return total


@dataclass(frozen=True)
class FamilyViolenceLeaveEntitlement:
    eligible: bool
    days_available: int
    days_used: Decimal
    days_remaining: Decimal
    proof_may_be_requested: bool = False


def calculate_family_violence_leave(
    employment_start: date,
    days_used: Number = ZERO,
    as_of: date | None = None,
    policy: PayrollPolicy | None = None,
) -> FamilyViolenceLeaveEntitlement:
    """Family violence leave available after the qualifying period."""
    leave = (policy or get_policy()).leave
    used = non_negative(days_used, "days_used")

    if months_employed(employment_start, as_of) < leave.family_violence_qualifying_months:
        return FamilyViolenceLeaveEntitlement(
            eligible=False, days_available=0, days_used=ZERO, days_remaining=ZERO
        )

    available = leave.family_violence_days_per_year
    return FamilyViolenceLeaveEntitlement(
        eligible=True,
        days_available=available,
        days_used=used,
        days_remaining=max(ZERO, available - used),
        proof_may_be_requested=True,
    )


@dataclass(frozen=True)
class ParentalLeaveEntitlement:
    eligible: bool
    primary_carer_weeks: int
    partner_weeks: int
    extended_leave_weeks: int


def calculate_parental_leave_entitlement(
    employment_start: date,
    average_hours_per_week: Number,
    is_primary_carer: bool,
    as_of: date | None = None,
    policy: PayrollPolicy | None = None,
) -> ParentalLeaveEntitlement:
    """Parental leave weeks by carer role.

    Eligibility needs both the qualifying months and the minimum average
    weekly hours; extended leave is only offered when eligible.
    """
    leave = (policy or get_policy()).leave
    hours = non_negative(average_hours_per_week, "average_hours_per_week")

    eligible = (
        months_employed(employment_start, as_of) >= leave.parental_qualifying_months
        and hours >= leave.parental_min_weekly_hours
    )
    return ParentalLeaveEntitlement(
        eligible=eligible,
        primary_carer_weeks=leave.parental_primary_carer_weeks if is_primary_carer else 0,
        partner_weeks=0 if is_primary_carer else leave.parental_partner_weeks,
        extended_leave_weeks=leave.parental_extended_weeks if eligible else 0,
    )


def is_otherwise_working_day(entries: Iterable[TimesheetEntry], on: date) -> bool:
    """True when the same weekday was worked at least 3 times in the prior 4 weeks."""
    window_start = on - timedelta(days=28)
    worked = {
        e.work_date
        for e in entries
        if window_start <= e.work_date < on and e.work_date.weekday() == on.weekday()
    }
    return len(worked) >= OTHERWISE_WORKING_DAY_THRESHOLD


@dataclass(frozen=True)
class AlternativeHoliday:
    entitled: bool
    reason: str


def calculate_alternative_holiday(
    entries: Iterable[TimesheetEntry],
    on: date,
    calendar: HolidayCalendar | None = None,
) -> AlternativeHoliday:
    """Whether working a public holiday earns a day in lieu."""
    if not is_public_holiday(on, calendar):
        return AlternativeHoliday(False, "Not a public holiday")

    entries = list(entries)
    if not any(e.work_date == on for e in entries):
        return AlternativeHoliday(False, "No hours worked on this public holiday")

    if not is_otherwise_working_day(entries, on):
        return AlternativeHoliday(False, "Not an otherwise working day")

    return AlternativeHoliday(
        True, "Worked on a public holiday that would otherwise be a working day"
    )
