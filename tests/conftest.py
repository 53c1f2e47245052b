"""Pytest fixtures for payroll engine tests."""

from __future__ import annotations

from datetime import date, time, timedelta
from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from nz_payroll.calculators.policy import (
    NZ_2024_25_PAYLOAD,
    NZ_2025_26_PAYLOAD,
    PayrollPolicy,
    PolicySchedule,
)
from nz_payroll.calculators.types import Employee, EmploymentType, TimesheetEntry
from nz_payroll.models import Base
from nz_payroll.models import Employee as EmployeeRecord
from nz_payroll.models import TimesheetEntry as TimesheetEntryRecord


@pytest.fixture
def policy_2024() -> PayrollPolicy:
    """2024/25 tables (ACC 1.39% capped at 139,384)."""
    return PayrollPolicy.from_payload(NZ_2024_25_PAYLOAD)


@pytest.fixture
def policy_2025() -> PayrollPolicy:
    return PayrollPolicy.from_payload(NZ_2025_26_PAYLOAD)


@pytest.fixture
def schedule(policy_2024: PayrollPolicy, policy_2025: PayrollPolicy) -> PolicySchedule:
    return PolicySchedule([policy_2024, policy_2025])


@pytest.fixture
def hourly_employee() -> Employee:
    return Employee(
        employee_id="emp-001",
        hourly_rate=Decimal("25.00"),
        tax_code="M",
        kiwisaver_enrolled=True,
        kiwisaver_rate=Decimal("3"),
        ird_number="49-091-850",
        employment_start_date=date(2023, 1, 9),
    )


@pytest.fixture
def salaried_employee() -> Employee:
    return Employee(
        employee_id="emp-002",
        hourly_rate=Decimal("40.00"),
        employment_type=EmploymentType.SALARY,
        tax_code="M",
    )


def shift(
    work_date: date,
    start: str = "09:00",
    end: str = "17:30",
    break_minutes: int = 30,
    **kwargs,
) -> TimesheetEntry:
    """An 8-hour day by default."""
    return TimesheetEntry(
        work_date=work_date,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
        break_minutes=break_minutes,
        **kwargs,
    )


def weekdays(start: date, end: date) -> list[date]:
    days = []
    current = start
    while current <= end:
        if current.weekday() < 5:
            days.append(current)
        current += timedelta(days=1)
    return days


# Use a file-backed SQLite database so separate sessions see the same data
@pytest.fixture
async def engine(tmp_path):
    """Create test database engine."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def stored_employees(session_factory) -> list[EmployeeRecord]:
    """Two hourly employees with a fortnight of 8-hour days in April 2024."""
    employees = []
    async with session_factory() as session, session.begin():
        for first, last, rate, enrolled in [
            ("Aroha", "Ngata", Decimal("25.00"), True),
            ("Ben", "Walker", Decimal("30.00"), False),
        ]:
            employee = EmployeeRecord(
                employee_id=uuid4(),
                first_name=first,
                last_name=last,
                tax_code="M",
                employment_type="hourly",
                hourly_rate=rate,
                kiwisaver_enrolled=enrolled,
                kiwisaver_rate=Decimal("3"),
                employment_start_date=date(2022, 2, 1),
            )
            session.add(employee)
            await session.flush()

            for work_date in weekdays(date(2024, 4, 8), date(2024, 4, 19)):
                session.add(
                    TimesheetEntryRecord(
                        employee_id=employee.employee_id,
                        work_date=work_date,
                        start_time=time(9, 0),
                        end_time=time(17, 30),
                        break_minutes=30,
                    )
                )
            employees.append(employee)
    return employees
