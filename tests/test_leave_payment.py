"""Tests for Holidays Act leave payment rates."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from nz_payroll.calculators.errors import InvalidDateRangeError, InvalidInputError
from nz_payroll.leave.payment import (
    calculate_annual_leave_entitlement,
    calculate_average_weekly_earnings,
    calculate_leave_cost,
    calculate_leave_pay,
    calculate_ordinary_weekly_pay,
    calculate_public_holiday_pay,
    calculate_relevant_daily_pay,
)
from tests.conftest import shift, weekdays

AS_OF = date(2024, 5, 3)

# Four full weeks of weekdays ending on AS_OF
FOUR_WEEKS = weekdays(date(2024, 4, 8), AS_OF)


def long_days(**kwargs):
    """10-hour days."""
    return [shift(d, start="08:00", end="18:30", **kwargs) for d in FOUR_WEEKS]


def normal_days(**kwargs):
    return [shift(d, **kwargs) for d in FOUR_WEEKS]


class TestOrdinaryWeeklyPay:
    def test_no_history_uses_standard_week(self, policy_2024):
        assert calculate_ordinary_weekly_pay(
            Decimal("25"), [], as_of=AS_OF, policy=policy_2024
        ) == Decimal("1000.00")

    def test_four_week_average_above_standard(self, policy_2024):
        pay = calculate_ordinary_weekly_pay(Decimal("25"), long_days(), as_of=AS_OF, policy=policy_2024)
        assert pay == Decimal("1250.00")

    def test_never_below_standard_week(self, policy_2024):
        part_time = [shift(d) for d in FOUR_WEEKS if d.weekday() < 3]
        pay = calculate_ordinary_weekly_pay(Decimal("25"), part_time, as_of=AS_OF, policy=policy_2024)
        assert pay == Decimal("1000.00")

    def test_overtime_multiplier(self, policy_2024):
        entries = normal_days(is_overtime=True)

        with_overtime = calculate_ordinary_weekly_pay(
            Decimal("25"), entries, as_of=AS_OF, policy=policy_2024
        )
        without = calculate_ordinary_weekly_pay(
            Decimal("25"), entries, include_overtime=False, as_of=AS_OF, policy=policy_2024
        )

        assert with_overtime == Decimal("1500.00")
        assert without == Decimal("1000.00")

    def test_entry_overtime_rate_wins(self, policy_2024):
        entries = normal_days(is_overtime=True, overtime_rate=Decimal("2"))
        pay = calculate_ordinary_weekly_pay(Decimal("25"), entries, as_of=AS_OF, policy=policy_2024)
        assert pay == Decimal("2000.00")

    def test_entries_outside_window_ignored(self, policy_2024):
        entries = long_days() + [shift(date(2024, 3, 1), start="06:00", end="22:00")]
        pay = calculate_ordinary_weekly_pay(Decimal("25"), entries, as_of=AS_OF, policy=policy_2024)
        assert pay == Decimal("1250.00")

    def test_window_is_exactly_28_days(self, policy_2024):
        """Every day for 29 days: the oldest day falls outside the window."""
        as_of = date(2024, 5, 6)
        entries = [
            shift(as_of - timedelta(days=n), start="08:00", end="18:30") for n in range(29)
        ]
        pay = calculate_ordinary_weekly_pay(Decimal("10"), entries, as_of=as_of, policy=policy_2024)
        # 28 days x 100 / 4
        assert pay == Decimal("700.00")

    def test_entry_28_days_back_ignored(self, policy_2024):
        as_of = date(2024, 5, 6)
        entries = [shift(as_of - timedelta(days=28), start="06:00", end="22:00")]
        pay = calculate_ordinary_weekly_pay(Decimal("25"), entries, as_of=as_of, policy=policy_2024)
        assert pay == Decimal("1000.00")

    def test_negative_rate(self, policy_2024):
        with pytest.raises(InvalidInputError):
            calculate_ordinary_weekly_pay(Decimal("-1"), [], as_of=AS_OF, policy=policy_2024)


class TestAverageWeeklyEarnings:
    def test_full_year_window(self, policy_2024):
        awe = calculate_average_weekly_earnings(
            Decimal("25"), long_days(), as_of=AS_OF, policy=policy_2024
        )
        # 5000 / 52
        assert awe == Decimal("96.15")

    def test_window_clipped_to_employment_start(self, policy_2024):
        """26 days employed counts as 4 weeks."""
        awe = calculate_average_weekly_earnings(
            Decimal("25"),
            long_days(),
            as_of=AS_OF,
            employment_start=date(2024, 4, 8),
            policy=policy_2024,
        )
        assert awe == Decimal("1250.00")

    def test_window_is_exactly_52_weeks(self, policy_2024):
        outside = [shift(AS_OF - timedelta(weeks=52), start="08:00", end="18:30")]
        inside = [shift(AS_OF - timedelta(days=363), start="08:00", end="18:30")]

        assert calculate_average_weekly_earnings(
            Decimal("25"), outside, as_of=AS_OF, policy=policy_2024
        ) == Decimal("1000.00")
        # 250 / 52
        assert calculate_average_weekly_earnings(
            Decimal("25"), inside, as_of=AS_OF, policy=policy_2024
        ) == Decimal("4.81")

    def test_no_history(self, policy_2024):
        awe = calculate_average_weekly_earnings(Decimal("30"), [], as_of=AS_OF, policy=policy_2024)
        assert awe == Decimal("1200.00")


class TestRelevantDailyPay:
    def test_divides_by_days_worked(self, policy_2024):
        rdp = calculate_relevant_daily_pay(Decimal("25"), normal_days(), as_of=AS_OF, policy=policy_2024)
        assert rdp == Decimal("200.00")

    def test_split_shifts_count_as_one_day(self, policy_2024):
        entries = [
            shift(date(2024, 5, 1), start="07:00", end="11:00", break_minutes=0),
            shift(date(2024, 5, 1), start="13:00", end="17:00", break_minutes=0),
            shift(date(2024, 5, 2), start="08:00", end="12:00", break_minutes=0),
        ]
        rdp = calculate_relevant_daily_pay(Decimal("25"), entries, as_of=AS_OF, policy=policy_2024)
        # 12 hours over 2 days
        assert rdp == Decimal("150.00")

    def test_entry_28_days_back_ignored(self, policy_2024):
        entries = [
            shift(AS_OF - timedelta(days=28), start="06:00", end="22:00", break_minutes=0),
            shift(AS_OF - timedelta(days=27)),
        ]
        rdp = calculate_relevant_daily_pay(Decimal("25"), entries, as_of=AS_OF, policy=policy_2024)
        assert rdp == Decimal("200.00")

    def test_no_history_is_one_standard_day(self, policy_2024):
        assert calculate_relevant_daily_pay(
            Decimal("30"), [], as_of=AS_OF, policy=policy_2024
        ) == Decimal("240.00")


class TestLeavePay:
    def test_greater_of_owp_and_awe(self, policy_2024):
        assert calculate_leave_pay(Decimal("1000"), Decimal("1250"), 3, policy_2024) == Decimal("750.00")
        assert calculate_leave_pay(Decimal("1250"), Decimal("1000"), 3, policy_2024) == Decimal("750.00")

    def test_zero_days(self, policy_2024):
        assert calculate_leave_pay(Decimal("1000"), Decimal("900"), 0, policy_2024) == Decimal("0.00")


class TestLeaveCost:
    def test_week_of_leave(self, policy_2024):
        cost = calculate_leave_cost(
            Decimal("25"),
            long_days(),
            date(2024, 5, 20),
            date(2024, 5, 24),
            as_of=AS_OF,
            employment_start=date(2024, 4, 8),
            policy=policy_2024,
        )

        assert cost.work_days == 5
        assert cost.weekly_rate == Decimal("1250.00")
        assert cost.daily_rate == Decimal("250.00")
        assert cost.amount == Decimal("1250.00")

    def test_public_holiday_not_charged(self, policy_2024):
        cost = calculate_leave_cost(
            Decimal("25"), [], date(2024, 12, 23), date(2024, 12, 27), as_of=AS_OF, policy=policy_2024
        )
        assert cost.work_days == 3
        assert cost.amount == Decimal("600.00")

    def test_reversed_range(self, policy_2024):
        with pytest.raises(InvalidDateRangeError):
            calculate_leave_cost(
                Decimal("25"), [], date(2024, 5, 24), date(2024, 5, 20), policy=policy_2024
            )


class TestPublicHolidayPay:
    def test_minimum_hours_on_working_day(self, policy_2024):
        result = calculate_public_holiday_pay(Decimal("20"), Decimal("2"), True, policy_2024)

        assert result.paid_hours == Decimal("3")
        assert result.pay == Decimal("90.00")
        assert result.alternative_holiday_earned is True

    def test_non_working_day(self, policy_2024):
        result = calculate_public_holiday_pay(Decimal("20"), Decimal("2"), False, policy_2024)

        assert result.pay == Decimal("60.00")
        assert result.alternative_holiday_earned is False

    def test_full_shift(self, policy_2024):
        result = calculate_public_holiday_pay(Decimal("25"), Decimal("8"), True, policy_2024)
        assert result.pay == Decimal("300.00")


class TestAnnualLeaveEntitlement:
    @pytest.mark.parametrize(
        "weeks,hours",
        [(0, Decimal("0")), (26, Decimal("80")), (52, Decimal("160")), (104, Decimal("160"))],
    )
    def test_pro_rata_under_a_year(self, policy_2024, weeks, hours):
        assert calculate_annual_leave_entitlement(weeks, policy_2024) == hours
