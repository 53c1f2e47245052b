"""PAYE tax calculation from policy bracket tables."""

from __future__ import annotations

from decimal import Decimal

from nz_payroll.calculators.errors import InvalidTaxCodeError
from nz_payroll.calculators.money import ZERO, Number, non_negative, round_to_cents
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.types import PERIODS_PER_YEAR, PayPeriodType


def normalise_tax_code(tax_code: str) -> str:
    """Upper-case and trim a tax code."""
    return (tax_code or "").strip().upper()


def is_valid_tax_code(tax_code: str, policy: PayrollPolicy | None = None) -> bool:
    """Check a tax code against the active policy table."""
    policy = policy or get_policy()
    return normalise_tax_code(tax_code) in policy.tax_codes


def periods_per_year(period: PayPeriodType | str) -> int:
    """Pay periods in a year for a frequency."""
    return PERIODS_PER_YEAR[PayPeriodType.coerce(period)]


def calculate_annual_paye_tax(
    annual_pay: Number,
    tax_code: str,
    policy: PayrollPolicy | None = None,
) -> Decimal:
    """Calculate PAYE for a given annual income.

    Secondary codes apply their flat rate to the whole amount. Primary
    codes are taxed progressively; the running total is rounded to cents
    after every band.

    Raises:
        InvalidInputError: If annual_pay is negative
        InvalidTaxCodeError: If tax_code is not in the policy table
    """
    policy = policy or get_policy()
    pay = non_negative(annual_pay, "annual_pay")
    code = normalise_tax_code(tax_code)

    if code in policy.secondary_rates:
        return round_to_cents(pay * policy.secondary_rates[code])

    if code not in policy.primary_tax_codes:
        raise InvalidTaxCodeError(tax_code)

    return _calculate_progressive_tax(pay, policy)


def _calculate_progressive_tax(pay: Decimal, policy: PayrollPolicy) -> Decimal:
    """Sum tax over cumulative bands, stopping once pay is exhausted."""
    total_tax = ZERO
    remaining = pay
    previous_threshold = ZERO

    for bracket in policy.paye_brackets:
        if remaining <= 0:
            break

        if bracket.threshold is None:
            taxable_in_bracket = remaining
        else:
            taxable_in_bracket = min(remaining, bracket.threshold - previous_threshold)
            previous_threshold = bracket.threshold

        total_tax = round_to_cents(total_tax + taxable_in_bracket * bracket.rate)
        remaining -= taxable_in_bracket

    return total_tax


def calculate_period_paye_tax(
    period_pay: Number,
    tax_code: str,
    period: PayPeriodType | str,
    policy: PayrollPolicy | None = None,
) -> Decimal:
    """Calculate PAYE for one pay period.

    The period pay is annualised, taxed as annual income and the annual
    tax divided back across the periods.
    """
    periods = periods_per_year(period)
    pay = non_negative(period_pay, "period_pay")
    annual_tax = calculate_annual_paye_tax(pay * periods, tax_code, policy)
    return round_to_cents(annual_tax / periods)
