"""SQLAlchemy-backed payroll data source."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nz_payroll.calculators.errors import PayrollError
from nz_payroll.calculators.money import ZERO
from nz_payroll.calculators.types import Employee, PayrollCalculationResult, TimesheetEntry
from nz_payroll.models import AccYtdEarnings, Payslip
from nz_payroll.models import Employee as EmployeeRecord
from nz_payroll.models import TimesheetEntry as TimesheetEntryRecord

logger = logging.getLogger(__name__)


def employee_from_record(record: EmployeeRecord) -> Employee:
    """Map an ORM employee row onto the calculator's Employee."""
    return Employee(
        employee_id=record.employee_id,
        hourly_rate=record.hourly_rate,
        employment_type=record.employment_type,
        tax_code=record.tax_code,
        kiwisaver_enrolled=record.kiwisaver_enrolled,
        kiwisaver_rate=record.kiwisaver_rate,
        ird_number=record.ird_number,
        employment_start_date=record.employment_start_date,
        status=record.status,
    )


def entry_from_record(record: TimesheetEntryRecord) -> TimesheetEntry:
    return TimesheetEntry(
        work_date=record.work_date,
        start_time=record.start_time,
        end_time=record.end_time,
        break_minutes=record.break_minutes,
        is_overtime=record.is_overtime,
        overtime_rate=record.overtime_rate,
        rate_multiplier=record.rate_multiplier,
    )


class CalculationMismatchError(PayrollError):
    """Raised when a payslip with the same calculation ID holds different figures."""

    code = "CalculationMismatch"

    def __init__(self, calculation_id: UUID):
        self.calculation_id = calculation_id
        super().__init__(
            f"Payslip for calculation {calculation_id} already exists with different figures"
        )


class DuplicatePayslipError(PayrollError):
    """Raised when an employee already has a different payslip for the same period."""

    code = "DuplicatePayslip"

    def __init__(self, employee_id: UUID, period_start: date, period_end: date):
        self.employee_id = employee_id
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Employee {employee_id} already has a payslip for {period_start} to {period_end}"
        )


class SqlPayrollRepository:
    """PayrollDataSource over the ORM models.

    Each operation runs in its own session and transaction, so the
    repository can be shared by concurrently processed employees.

    Key invariants:
    1. One acc_ytd_earnings row per (employee, levy year)
    2. Payslips are written once per calculation_id; retries are no-ops
    3. At most one payslip per employee and pay period
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def load_employee(self, employee_id: UUID) -> Employee | None:
        async with self.session_factory() as session:
            record = await session.get(EmployeeRecord, employee_id)
            if record is None:
                return None
            return employee_from_record(record)

    async def load_timesheet_entries(
        self, employee_id: UUID, start: date, end: date
    ) -> Sequence[TimesheetEntry]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TimesheetEntryRecord)
                .where(
                    TimesheetEntryRecord.employee_id == employee_id,
                    TimesheetEntryRecord.work_date >= start,
                    TimesheetEntryRecord.work_date <= end,
                )
                .order_by(TimesheetEntryRecord.work_date, TimesheetEntryRecord.start_time)
            )
            return [entry_from_record(r) for r in result.scalars()]

    async def load_ytd_earnings(self, employee_id: UUID, levy_year_start: date) -> Decimal:
        async with self.session_factory() as session:
            row = await self._get_ytd_row(session, employee_id, levy_year_start)
            return Decimal(row.earnings) if row is not None else ZERO

    async def save_ytd_earnings(
        self, employee_id: UUID, levy_year_start: date, value: Decimal
    ) -> None:
        async with self.session_factory() as session, session.begin():
            row = await self._get_ytd_row(session, employee_id, levy_year_start)
            if row is None:
                session.add(
                    AccYtdEarnings(
                        employee_id=employee_id,
                        levy_year_start=levy_year_start,
                        earnings=value,
                    )
                )
            else:
                row.earnings = value

    async def persist_payslip(self, result: PayrollCalculationResult) -> None:
        """Insert the payslip unless this calculation was already stored."""
        async with self.session_factory() as session, session.begin():
            existing = await session.execute(
                select(Payslip).where(Payslip.calculation_id == result.calculation_id)
            )
            payslip = existing.scalar_one_or_none()
            if payslip is not None:
                if Decimal(payslip.net_pay) != result.net_pay:
                    raise CalculationMismatchError(result.calculation_id)
                logger.debug("Payslip %s already stored", result.calculation_id)
                return

            employee_id = UUID(str(result.employee_id))
            if result.period_start is not None and result.period_end is not None:
                same_period = await session.execute(
                    select(Payslip.payslip_id).where(
                        Payslip.employee_id == employee_id,
                        Payslip.period_start == result.period_start,
                        Payslip.period_end == result.period_end,
                    )
                )
                if same_period.first() is not None:
                    raise DuplicatePayslipError(
                        employee_id, result.period_start, result.period_end
                    )

            logger.debug(
                "Storing payslip %s for employee %s", result.calculation_id, employee_id
            )
            session.add(
                Payslip(
                    employee_id=employee_id,
                    calculation_id=result.calculation_id,
                    pay_period=result.period.value,
                    period_start=result.period_start,
                    period_end=result.period_end,
                    policy_version=result.policy_version,
                    gross_pay=result.gross_pay,
                    paye_tax=result.paye_tax,
                    kiwisaver_deduction=result.kiwisaver_deduction,
                    employer_kiwisaver=result.employer_kiwisaver,
                    acc_levy=result.acc_levy,
                    net_pay=result.net_pay,
                )
            )

    async def list_payslips(self, employee_id: UUID) -> list[Payslip]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Payslip)
                .where(Payslip.employee_id == employee_id)
                .order_by(Payslip.period_start)
            )
            return list(result.scalars())

    @staticmethod
    async def _get_ytd_row(
        session: AsyncSession, employee_id: UUID, levy_year_start: date
    ) -> AccYtdEarnings | None:
        result = await session.execute(
            select(AccYtdEarnings).where(
                AccYtdEarnings.employee_id == employee_id,
                AccYtdEarnings.levy_year_start == levy_year_start,
            )
        )
        return result.scalar_one_or_none()
