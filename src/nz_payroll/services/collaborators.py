"""Interfaces the pay-run service needs from storage."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol, Sequence, runtime_checkable
from uuid import UUID

from nz_payroll.calculators.types import Employee, PayrollCalculationResult, TimesheetEntry


@runtime_checkable
class PayrollDataSource(Protocol):
    """Storage the pay-run service reads inputs from and writes results to.

    Year-to-date ACC earnings are keyed by the start of the levy year so a
    new levy year starts from zero without any reset job.
    """

    async def load_employee(self, employee_id: UUID) -> Employee | None: ...

    async def load_timesheet_entries(
        self, employee_id: UUID, start: date, end: date
    ) -> Sequence[TimesheetEntry]: ...

    async def load_ytd_earnings(self, employee_id: UUID, levy_year_start: date) -> Decimal: ...

    async def save_ytd_earnings(
        self, employee_id: UUID, levy_year_start: date, value: Decimal
    ) -> None: ...

    async def persist_payslip(self, result: PayrollCalculationResult) -> None: ...
