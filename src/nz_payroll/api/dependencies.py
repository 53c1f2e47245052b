"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from datetime import date
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nz_payroll.calculators.policy import PayrollPolicy, PolicySchedule, default_schedule
from nz_payroll.config import get_settings
from nz_payroll.database import init_db


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the process-wide session factory."""
    _, factory = init_db()
    return factory


async def get_db_session(
    factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_policy_schedule() -> PolicySchedule:
    """Get the policy schedule used for calculations."""
    return default_schedule()


def resolve_policy(schedule: PolicySchedule, as_of: date | None) -> PayrollPolicy:
    """Policy for an explicit date, else the configured date, else today."""
    return schedule.for_date(as_of or get_settings().policy_as_of or date.today())


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
Schedule = Annotated[PolicySchedule, Depends(get_policy_schedule)]
