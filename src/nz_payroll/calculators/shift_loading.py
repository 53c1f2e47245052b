"""Weekend, night and public holiday shift loadings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal

from nz_payroll.calculators.money import ZERO, Number, non_negative
from nz_payroll.leave.holidays import SATURDAY, HolidayCalendar, is_public_holiday


@dataclass(frozen=True)
class ShiftLoadingRules:
    """Loading multipliers and the night window."""

    weekend_rate: Decimal = Decimal("1.25")
    night_rate: Decimal = Decimal("1.15")
    public_holiday_rate: Decimal = Decimal("1.5")
    night_start_hour: int = 22
    night_end_hour: int = 6


DEFAULT_SHIFT_RULES = ShiftLoadingRules()


@dataclass(frozen=True)
class ShiftLoading:
    """Loaded hourly rate and the loading each rule contributed."""

    loaded_rate: Decimal
    weekend: Decimal = ZERO
    night: Decimal = ZERO
    public_holiday: Decimal = ZERO


def calculate_shift_loading(
    base_rate: Number,
    start_time: time,
    end_time: time,
    on: date,
    rules: ShiftLoadingRules | None = None,
    calendar: HolidayCalendar | None = None,
) -> ShiftLoading:
    """Apply compounding loadings to a base hourly rate.

    Each reported loading is the increment over the base rate; the loaded
    rate multiplies all applicable loadings together.
    """
    rules = rules or DEFAULT_SHIFT_RULES
    base = non_negative(base_rate, "base_rate")
    loaded = base
    weekend = night = holiday = ZERO

    if on.weekday() >= SATURDAY:
        weekend = base * (rules.weekend_rate - 1)
        loaded *= rules.weekend_rate

    if start_time.hour >= rules.night_start_hour or end_time.hour <= rules.night_end_hour:
        night = base * (rules.night_rate - 1)
        loaded *= rules.night_rate

    if is_public_holiday(on, calendar):
        holiday = base * (rules.public_holiday_rate - 1)
        loaded *= rules.public_holiday_rate

    return ShiftLoading(loaded_rate=loaded, weekend=weekend, night=night, public_holiday=holiday)
