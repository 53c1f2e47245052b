"""Tests for the concurrent pay run service."""

import asyncio
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from nz_payroll.calculators.errors import InvalidDateRangeError, PolicyNotFoundError
from nz_payroll.services.collaborators import PayrollDataSource
from nz_payroll.services.locking import EmployeeLockRegistry, get_employee_locks
from nz_payroll.services.pay_run_service import INTERNAL_ERROR, PayRunService
from tests.conftest import shift, weekdays

PERIOD_START = date(2024, 4, 8)
PERIOD_END = date(2024, 4, 19)
LEVY_YEAR = date(2024, 4, 1)


class InMemoryDataSource:
    """PayrollDataSource backed by dicts, with a small delay on each load."""

    def __init__(self, employees, entries=None, ytd=None, delay=0.0):
        self.employees = {e.employee_id: e for e in employees}
        self.entries = entries or {}
        self.ytd = dict(ytd or {})
        self.payslips = []
        self.delay = delay
        self.active = 0
        self.peak = 0

    async def load_employee(self, employee_id):
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            return self.employees.get(employee_id)
        finally:
            self.active -= 1

    async def load_timesheet_entries(self, employee_id, start, end):
        return [e for e in self.entries.get(employee_id, []) if start <= e.work_date <= end]

    async def load_ytd_earnings(self, employee_id, levy_year_start):
        value = self.ytd.get((employee_id, levy_year_start), Decimal("0"))
        await asyncio.sleep(self.delay)
        return value

    async def save_ytd_earnings(self, employee_id, levy_year_start, value):
        self.ytd[(employee_id, levy_year_start)] = value

    async def persist_payslip(self, result):
        self.payslips.append(result)


class FailingYtdDataSource(InMemoryDataSource):
    """Loses its connection when reading YTD for one employee."""

    def __init__(self, *args, failing_id, **kwargs):
        super().__init__(*args, **kwargs)
        self.failing_id = failing_id

    async def load_ytd_earnings(self, employee_id, levy_year_start):
        if employee_id == self.failing_id:
            raise ConnectionError("db connection reset")
        return await super().load_ytd_earnings(employee_id, levy_year_start)


def fortnight(start=PERIOD_START, end=PERIOD_END):
    return [shift(d) for d in weekdays(start, end)]


@pytest.fixture
def staff(hourly_employee):
    return [
        hourly_employee,
        replace(hourly_employee, employee_id="emp-003", hourly_rate=Decimal("30.00"), kiwisaver_enrolled=False),
    ]


@pytest.fixture
def data_source(staff):
    return InMemoryDataSource(staff, entries={e.employee_id: fortnight() for e in staff})


class TestPayRunService:
    def test_fake_satisfies_protocol(self, data_source):
        assert isinstance(data_source, PayrollDataSource)

    async def test_run_persists_payslips_and_ytd(self, data_source, schedule):
        service = PayRunService(data_source, schedule, max_concurrency=4)

        run = await service.run(["emp-001", "emp-003"], "fortnightly", PERIOD_START, PERIOD_END)

        assert run.success is True
        assert run.results["emp-001"].net_pay == Decimal("1580.66")
        assert run.results["emp-003"].gross_pay == Decimal("2400.00")
        assert run.total_gross == Decimal("4400.00")
        assert run.total_net == Decimal("3495.76")
        assert len(data_source.payslips) == 2
        assert data_source.ytd[("emp-001", LEVY_YEAR)] == Decimal("2000.00")

    async def test_ytd_cap_carried_forward(self, data_source, schedule):
        data_source.ytd[("emp-001", LEVY_YEAR)] = Decimal("139000")
        service = PayRunService(data_source, schedule)

        run = await service.run(["emp-001"], "fortnightly", PERIOD_START, PERIOD_END)

        assert run.results["emp-001"].acc_levy == Decimal("5.34")
        assert data_source.ytd[("emp-001", LEVY_YEAR)] == Decimal("139384")

    async def test_failures_do_not_stop_the_run(self, data_source, staff, schedule):
        data_source.employees["emp-bad"] = replace(staff[0], employee_id="emp-bad", tax_code="XX")
        data_source.employees["emp-left"] = replace(staff[0], employee_id="emp-left", status="inactive")
        service = PayRunService(data_source, schedule)

        run = await service.run(
            ["emp-001", "emp-bad", "emp-left", "emp-missing"], "fortnightly", PERIOD_START, PERIOD_END
        )

        assert list(run.results) == ["emp-001"]
        assert run.error_count == 3
        assert run.failures["emp-bad"].code == "InvalidTaxCode"
        assert run.failures["emp-left"].code == "InvalidInput"
        assert run.failures["emp-missing"].code == "InvalidInput"
        assert ("emp-bad", LEVY_YEAR) not in data_source.ytd
        assert len(data_source.payslips) == 1

    async def test_unexpected_error_recorded_as_failure(self, staff, schedule, caplog):
        source = FailingYtdDataSource(
            staff, entries={e.employee_id: fortnight() for e in staff}, failing_id="emp-003"
        )
        service = PayRunService(source, schedule)

        run = await service.run(["emp-001", "emp-003"], "fortnightly", PERIOD_START, PERIOD_END)

        assert run.results["emp-001"].net_pay == Decimal("1580.66")
        assert run.failures["emp-003"].code == INTERNAL_ERROR
        assert "db connection reset" in run.failures["emp-003"].message
        assert run.total_net == Decimal("1580.66")
        assert len(source.payslips) == 1
        assert "Unexpected error in pay run for employee emp-003" in caplog.text

    async def test_duplicate_ids_processed_once(self, data_source, schedule):
        service = PayRunService(data_source, schedule)

        run = await service.run(["emp-001", "emp-001"], "fortnightly", PERIOD_START, PERIOD_END)

        assert len(run.results) == 1
        assert len(data_source.payslips) == 1

    async def test_no_policy_for_pay_date(self, data_source, schedule):
        service = PayRunService(data_source, schedule)
        with pytest.raises(PolicyNotFoundError):
            await service.run(["emp-001"], "fortnightly", date(2020, 1, 6), date(2020, 1, 19))

    async def test_reversed_period(self, data_source, schedule):
        service = PayRunService(data_source, schedule)
        with pytest.raises(InvalidDateRangeError):
            await service.run(["emp-001"], "fortnightly", PERIOD_END, PERIOD_START)

    def test_max_concurrency_must_be_positive(self, data_source, schedule):
        with pytest.raises(ValueError):
            PayRunService(data_source, schedule, max_concurrency=0)


class TestConcurrency:
    async def test_fan_out_is_bounded(self, hourly_employee, schedule):
        staff = [replace(hourly_employee, employee_id=f"emp-{i}") for i in range(6)]
        source = InMemoryDataSource(
            staff, entries={e.employee_id: fortnight() for e in staff}, delay=0.01
        )
        service = PayRunService(source, schedule, max_concurrency=2)

        run = await service.run([e.employee_id for e in staff], "fortnightly", PERIOD_START, PERIOD_END)

        assert len(run.results) == 6
        assert source.peak == 2

    async def test_overlapping_runs_serialise_ytd(self, hourly_employee, schedule):
        """Two runs for one employee must not both read the same YTD."""
        second_start, second_end = date(2024, 4, 22), date(2024, 5, 3)
        source = InMemoryDataSource(
            [hourly_employee],
            entries={"emp-001": fortnight() + fortnight(second_start, second_end)},
            delay=0.01,
        )
        service = PayRunService(source, schedule)

        await asyncio.gather(
            service.run(["emp-001"], "fortnightly", PERIOD_START, PERIOD_END),
            service.run(["emp-001"], "fortnightly", second_start, second_end),
        )

        assert source.ytd[("emp-001", LEVY_YEAR)] == Decimal("4000.00")

    async def test_separate_services_serialise_ytd(self, hourly_employee, schedule):
        """Each request builds its own service; the employee lock is still shared."""
        second_start, second_end = date(2024, 4, 22), date(2024, 5, 3)
        source = InMemoryDataSource(
            [hourly_employee],
            entries={"emp-001": fortnight() + fortnight(second_start, second_end)},
            delay=0.01,
        )

        await asyncio.gather(
            PayRunService(source, schedule).run(["emp-001"], "fortnightly", PERIOD_START, PERIOD_END),
            PayRunService(source, schedule).run(["emp-001"], "fortnightly", second_start, second_end),
        )

        assert source.ytd[("emp-001", LEVY_YEAR)] == Decimal("4000.00")
        assert len(get_employee_locks()) == 0


class TestEmployeeLockRegistry:
    async def test_same_employee_waits(self):
        locks = EmployeeLockRegistry()
        order = []

        async def hold(name):
            async with locks.hold("emp-001"):
                order.append(f"{name} in")
                await asyncio.sleep(0.01)
                order.append(f"{name} out")

        await asyncio.gather(hold("a"), hold("b"))

        assert order == ["a in", "a out", "b in", "b out"]

    async def test_locks_dropped_after_release(self):
        locks = EmployeeLockRegistry()

        async with locks.hold("emp-001"):
            assert len(locks) == 1

        assert len(locks) == 0

    async def test_lock_released_on_error(self):
        locks = EmployeeLockRegistry()

        with pytest.raises(RuntimeError):
            async with locks.hold("emp-001"):
                raise RuntimeError("boom")

        assert len(locks) == 0
