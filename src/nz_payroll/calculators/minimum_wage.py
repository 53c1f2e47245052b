"""Advisory minimum wage compliance check."""

from __future__ import annotations

import logging
from decimal import Decimal

from nz_payroll.calculators.errors import InvalidInputError
from nz_payroll.calculators.money import Number, non_negative, round_to_cents
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.types import (
    HOURS_PER_PERIOD,
    EmploymentType,
    MinimumWageCheck,
    PayPeriodType,
)

logger = logging.getLogger(__name__)


def hours_in_period(period: PayPeriodType | str) -> Decimal:
    """Standard hours for a pay frequency."""
    return HOURS_PER_PERIOD[PayPeriodType.coerce(period)]


def check_minimum_wage(
    gross_pay: Number,
    employment_type: EmploymentType | str,
    period: PayPeriodType | str,
    policy: PayrollPolicy | None = None,
) -> MinimumWageCheck:
    """Compare the effective hourly rate with the statutory minimum.

    Does not block processing; non-compliance is logged and returned for
    manual remediation.
    """
    policy = policy or get_policy()
    gross = non_negative(gross_pay, "gross_pay")

    try:
        employment_type = EmploymentType(employment_type)
    except ValueError:
        raise InvalidInputError(
            "employment_type", employment_type, "unknown employment type"
        ) from None

    actual_rate = round_to_cents(gross / hours_in_period(period))
    if employment_type == EmploymentType.TRAINING:
        required_rate = policy.minimum_wage.training
    else:
        required_rate = policy.minimum_wage.adult

    compliant = actual_rate >= required_rate
    if not compliant:
        logger.warning(
            "Effective hourly rate %s is below the minimum wage %s (%s)",
            actual_rate,
            required_rate,
            policy.version,
        )

    return MinimumWageCheck(
        compliant=compliant,
        required_rate=required_rate,
        actual_rate=actual_rate,
    )
