"""KiwiSaver contribution calculation."""

from __future__ import annotations

from nz_payroll.calculators.money import ZERO, Number, non_negative, round_to_cents, to_decimal
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.types import KiwiSaverResult


def calculate_kiwisaver_deductions(
    gross_pay: Number,
    employee_rate_percent: Number,
    enrolled: bool,
    policy: PayrollPolicy | None = None,
) -> KiwiSaverResult:
    """Calculate employee and employer KiwiSaver for one pay.

    The employee rate is a percentage (3 for 3%) and is silently clamped
    into the policy's allowed range. The employer rate is fixed by policy.
    """
    if not enrolled:
        return KiwiSaverResult(
            employee_deduction=ZERO, employer_contribution=ZERO, applied_rate=ZERO
        )

    policy = policy or get_policy()
    ks = policy.kiwisaver
    gross = non_negative(gross_pay, "gross_pay")

    requested = to_decimal(employee_rate_percent, "kiwisaver_rate") / 100
    rate = max(ks.min_employee_rate, min(requested, ks.max_employee_rate))

    return KiwiSaverResult(
        employee_deduction=round_to_cents(gross * rate),
        employer_contribution=round_to_cents(gross * ks.employer_rate),
        applied_rate=rate,
    )
