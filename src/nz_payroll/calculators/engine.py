"""Payroll calculation engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence
from uuid import UUID

from nz_payroll.calculators.deductions import calculate_deductions
from nz_payroll.calculators.errors import PayrollError
from nz_payroll.calculators.gross_pay import calculate_gross_pay
from nz_payroll.calculators.money import ZERO, Number, non_negative
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.types import (
    Employee,
    EmployeeFailure,
    PayPeriodType,
    PayrollCalculationResult,
    PayRunCalculationResult,
    TimesheetEntry,
    YTDTotals,
)
from nz_payroll.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeePayInput:
    """Everything needed to calculate one employee's pay."""

    employee: Employee
    entries: Sequence[TimesheetEntry] = field(default_factory=tuple)
    ytd_earnings: Number = ZERO


class PayrollEngine:
    """Main payroll calculation engine.

    Calculation pipeline (stable order per employee):
    1) Gross pay from salary or timesheet entries
    2) Minimum wage check (advisory)
    3) PAYE on the annualised period pay
    4) ACC earners' levy against year-to-date earnings
    5) KiwiSaver employee and employer contributions
    6) Net pay = gross - PAYE - KiwiSaver - ACC

    Per-employee calculation fails fast; batches record the failure and
    continue with the remaining employees.
    """

    def __init__(self, policy: PayrollPolicy | None = None):
        self.policy = policy or get_policy()
        self.settings = get_settings()

    def calculate_employee(
        self,
        employee: Employee,
        entries: Iterable[TimesheetEntry],
        period: PayPeriodType | str,
        ytd_earnings: Number = ZERO,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> PayrollCalculationResult:
        """Calculate one employee's payslip figures."""
        period = PayPeriodType.coerce(period)
        ytd = non_negative(ytd_earnings, "ytd_earnings")

        gross = calculate_gross_pay(employee, entries, period)
        deductions = calculate_deductions(gross, employee, period, ytd, self.policy)

        return PayrollCalculationResult(
            employee_id=employee.employee_id,
            calculation_id=self._generate_calculation_id(
                employee.employee_id, period, gross, ytd, period_start, period_end
            ),
            period=period,
            policy_version=self.policy.version,
            deductions=deductions,
            period_start=period_start,
            period_end=period_end,
        )

    def calculate_batch(
        self,
        items: Iterable[EmployeePayInput],
        period: PayPeriodType | str,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> PayRunCalculationResult:
        """Calculate pay for many employees, continuing past failures."""
        run = PayRunCalculationResult()

        for item in items:
            employee_id = item.employee.employee_id
            try:
                result = self.calculate_employee(
                    item.employee,
                    item.entries,
                    period,
                    item.ytd_earnings,
                    period_start,
                    period_end,
                )
            except PayrollError as e:
                logger.warning("Payroll calculation failed for employee %s: %s", employee_id, e)
                run.failures[employee_id] = EmployeeFailure(employee_id, e.code, str(e))
                continue

            run.results[employee_id] = result
            run.total_gross += result.gross_pay
            run.total_net += result.net_pay

        return run

    def _generate_calculation_id(
        self,
        employee_id: UUID | str,
        period: PayPeriodType,
        gross: Decimal,
        ytd_earnings: Decimal,
        period_start: date | None,
        period_end: date | None,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "employee_id": str(employee_id),
            "period": period.value,
            "period_start": str(period_start),
            "period_end": str(period_end),
            "gross": str(gross),
            "ytd_earnings": str(ytd_earnings),
            "policy_version": self.policy.version,
            "engine_version": self.settings.engine_version,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])


def calculate_ytd_totals(results: Iterable[PayrollCalculationResult]) -> YTDTotals:
    """Sum payslip figures for year-to-date reporting."""
    gross = paye = acc = kiwisaver = net = ZERO
    for r in results:
        gross += r.gross_pay
        paye += r.paye_tax
        acc += r.acc_levy
        kiwisaver += r.kiwisaver_deduction
        net += r.net_pay

    return YTDTotals(
        gross=gross,
        paye=paye,
        acc=acc,
        kiwisaver=kiwisaver,
        total_deductions=paye + acc + kiwisaver,
        net=net,
    )
