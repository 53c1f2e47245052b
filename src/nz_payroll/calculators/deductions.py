"""Statutory deduction aggregation: gross pay to net pay."""

from __future__ import annotations

from nz_payroll.calculators.acc_levy import calculate_acc_levy_with_ytd
from nz_payroll.calculators.errors import InvalidInputError
from nz_payroll.calculators.kiwisaver import calculate_kiwisaver_deductions
from nz_payroll.calculators.minimum_wage import check_minimum_wage
from nz_payroll.calculators.money import Number, non_negative, round_to_cents
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.tax_calculator import calculate_period_paye_tax
from nz_payroll.calculators.types import DeductionResult, Employee, PayPeriodType


def calculate_deductions(
    gross_pay: Number,
    employee: Employee,
    period: PayPeriodType | str,
    ytd_earnings: Number = 0,
    policy: PayrollPolicy | None = None,
) -> DeductionResult:
    """Calculate PAYE, ACC, KiwiSaver and the minimum wage check for one pay.

    Any failing sub-calculation aborts the whole aggregation with its own
    error kind; there is no partial result.
    """
    policy = policy or get_policy()
    period = PayPeriodType.coerce(period)
    gross = non_negative(gross_pay, "gross_pay")

    minimum_wage_check = check_minimum_wage(gross, employee.employment_type, period, policy)
    paye_tax = calculate_period_paye_tax(gross, employee.tax_code, period, policy)
    acc = calculate_acc_levy_with_ytd(gross, ytd_earnings, period, policy)
    kiwisaver = calculate_kiwisaver_deductions(
        gross, employee.kiwisaver_rate, employee.kiwisaver_enrolled, policy
    )

    net_pay = round_to_cents(gross - paye_tax - kiwisaver.employee_deduction - acc.levy)
    if net_pay < 0:
        raise InvalidInputError("net_pay", net_pay, "deductions exceed gross pay")

    return DeductionResult(
        gross_pay=gross,
        paye_tax=paye_tax,
        kiwisaver_deduction=kiwisaver.employee_deduction,
        employer_kiwisaver=kiwisaver.employer_contribution,
        acc_levy=acc.levy,
        acc_ytd_earnings=acc.ytd_earnings,
        acc_remaining_cap=acc.remaining_cap,
        net_pay=net_pay,
        minimum_wage_check=minimum_wage_check,
    )
