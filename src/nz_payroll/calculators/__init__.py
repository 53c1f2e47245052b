"""Payroll calculators: PAYE, KiwiSaver, ACC levy, minimum wage and deductions."""

from nz_payroll.calculators.deductions import calculate_deductions
from nz_payroll.calculators.engine import EmployeePayInput, PayrollEngine, calculate_ytd_totals
from nz_payroll.calculators.policy import PayrollPolicy, PolicySchedule, get_policy
from nz_payroll.calculators.tax_calculator import (
    calculate_annual_paye_tax,
    calculate_period_paye_tax,
)

__all__ = [
    "EmployeePayInput",
    "PayrollEngine",
    "PayrollPolicy",
    "PolicySchedule",
    "calculate_annual_paye_tax",
    "calculate_deductions",
    "calculate_period_paye_tax",
    "calculate_ytd_totals",
    "get_policy",
]
