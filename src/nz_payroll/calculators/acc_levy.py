"""ACC earners' levy with year-to-date capping."""

from __future__ import annotations

from datetime import date

from nz_payroll.calculators.money import ZERO, Number, non_negative, round_to_cents
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.types import ACCLevyResult, PayPeriodType


def calculate_acc_levy_with_ytd(
    gross_pay: Number,
    ytd_earnings: Number,
    period: PayPeriodType | str = PayPeriodType.FORTNIGHTLY,
    policy: PayrollPolicy | None = None,
) -> ACCLevyResult:
    """Calculate the levy on this pay given earnings so far in the levy year.

    Pure function of (gross, prior YTD); the caller persists the returned
    ``ytd_earnings`` and resets it at the levy-year boundary.
    """
    policy = policy or get_policy()
    period = PayPeriodType.coerce(period)
    gross = non_negative(gross_pay, "gross_pay")
    ytd = non_negative(ytd_earnings, "ytd_earnings")

    max_earnings = policy.acc.max_earnings
    rate = policy.acc.earners_levy_rate

    remaining_cap = max(max_earnings - ytd, ZERO)
    capped_earnings = min(gross, remaining_cap)

    return ACCLevyResult(
        levy=round_to_cents(capped_earnings * rate),
        ytd_earnings=min(ytd + gross, max_earnings),
        remaining_cap=remaining_cap,
        capped_earnings=capped_earnings,
        levy_rate=rate,
        period=period,
    )


def acc_levy_year(on: date) -> tuple[date, date]:
    """Return (start, end) of the 1 April – 31 March levy year containing a date."""
    start_year = on.year if on.month >= 4 else on.year - 1
    return date(start_year, 4, 1), date(start_year + 1, 3, 31)
