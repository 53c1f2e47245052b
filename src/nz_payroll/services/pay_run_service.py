"""Pay run service - runs payroll for a set of employees against storage."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Iterable
from uuid import UUID

from nz_payroll.calculators.acc_levy import acc_levy_year
from nz_payroll.calculators.engine import PayrollEngine
from nz_payroll.calculators.errors import InvalidDateRangeError, InvalidInputError, PayrollError
from nz_payroll.calculators.policy import PolicySchedule, default_schedule
from nz_payroll.calculators.types import (
    EmployeeFailure,
    PayPeriodType,
    PayrollCalculationResult,
    PayRunCalculationResult,
)
from nz_payroll.config import get_settings
from nz_payroll.services.collaborators import PayrollDataSource
from nz_payroll.services.locking import EmployeeLockRegistry, get_employee_locks

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "InternalError"


class PayRunService:
    """Service for running payroll over many employees.

    Operations per employee (under that employee's lock):
    1. Load employee, timesheet entries and ACC year-to-date earnings
    2. Calculate the payslip with the policy in force on the pay date
    3. Persist the payslip, then the new year-to-date earnings

    Employees run concurrently up to ``max_concurrency``. Employee locks come
    from a registry shared by all services in the process, so overlapping
    runs for one employee are serialised. A failure for one employee is
    recorded and does not stop the others.
    """

    def __init__(
        self,
        data_source: PayrollDataSource,
        policy_schedule: PolicySchedule | None = None,
        max_concurrency: int | None = None,
        locks: EmployeeLockRegistry | None = None,
    ):
        self.data_source = data_source
        self.policy_schedule = policy_schedule or default_schedule()
        self.max_concurrency = max_concurrency or get_settings().max_concurrency
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.locks = locks if locks is not None else get_employee_locks()

    async def run(
        self,
        employee_ids: Iterable[UUID],
        period: PayPeriodType | str,
        period_start: date,
        period_end: date,
        pay_date: date | None = None,
    ) -> PayRunCalculationResult:
        """Run payroll for the given employees.

        The policy is resolved once for ``pay_date`` (default: period end);
        a missing policy fails the whole run with PolicyNotFoundError.
        """
        period = PayPeriodType.coerce(period)
        if period_end < period_start:
            raise InvalidDateRangeError(period_start, period_end, "period end is before start")

        pay_date = pay_date or period_end
        policy = self.policy_schedule.for_date(pay_date)
        engine = PayrollEngine(policy)
        levy_year_start, _ = acc_levy_year(pay_date)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        # Preserve order, drop duplicates
        unique_ids = list(dict.fromkeys(employee_ids))

        logger.info(
            "Starting %s pay run for %d employee(s), %s to %s, policy %s",
            period.value,
            len(unique_ids),
            period_start,
            period_end,
            policy.version,
        )

        outcomes = await asyncio.gather(
            *(
                self._process_employee(
                    semaphore, engine, employee_id, period, period_start, period_end, levy_year_start
                )
                for employee_id in unique_ids
            )
        )

        run = PayRunCalculationResult()
        for employee_id, outcome in zip(unique_ids, outcomes):
            if isinstance(outcome, EmployeeFailure):
                run.failures[employee_id] = outcome
                continue
            run.results[employee_id] = outcome
            run.total_gross += outcome.gross_pay
            run.total_net += outcome.net_pay

        logger.info(
            "Pay run complete: %d succeeded, %d failed", len(run.results), run.error_count
        )
        return run

    async def _process_employee(
        self,
        semaphore: asyncio.Semaphore,
        engine: PayrollEngine,
        employee_id: UUID,
        period: PayPeriodType,
        period_start: date,
        period_end: date,
        levy_year_start: date,
    ) -> PayrollCalculationResult | EmployeeFailure:
        async with semaphore:
            async with self.locks.hold(employee_id):
                try:
                    return await self._calculate_and_store(
                        engine, employee_id, period, period_start, period_end, levy_year_start
                    )
                except PayrollError as e:
                    logger.warning(
                        "Pay run failed for employee %s (%s): %s", employee_id, e.code, e
                    )
                    return EmployeeFailure(employee_id, e.code, str(e))
                except Exception as e:
                    logger.exception("Unexpected error in pay run for employee %s", employee_id)
                    return EmployeeFailure(employee_id, INTERNAL_ERROR, str(e))

    async def _calculate_and_store(
        self,
        engine: PayrollEngine,
        employee_id: UUID,
        period: PayPeriodType,
        period_start: date,
        period_end: date,
        levy_year_start: date,
    ) -> PayrollCalculationResult:
        employee = await self.data_source.load_employee(employee_id)
        if employee is None:
            raise InvalidInputError("employee_id", employee_id, "employee not found")
        if employee.status != "active":
            raise InvalidInputError("employee_id", employee_id, "employee is not active")

        entries = await self.data_source.load_timesheet_entries(
            employee_id, period_start, period_end
        )
        ytd = await self.data_source.load_ytd_earnings(employee_id, levy_year_start)

        result = engine.calculate_employee(
            employee, entries, period, ytd, period_start, period_end
        )

        await self.data_source.persist_payslip(result)
        await self.data_source.save_ytd_earnings(
            employee_id, levy_year_start, result.deductions.acc_ytd_earnings
        )
        logger.debug(
            "Employee %s: gross %s net %s", employee_id, result.gross_pay, result.net_pay
        )
        return result
