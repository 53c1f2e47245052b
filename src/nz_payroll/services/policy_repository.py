"""Storage for versioned policy tables."""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nz_payroll.calculators.errors import PolicyNotFoundError
from nz_payroll.calculators.policy import PayrollPolicy, PolicySchedule
from nz_payroll.models import PolicyVersion

logger = logging.getLogger(__name__)


class PolicyRepository:
    """Reads and writes policy_version rows.

    Rows hold the same JSON payload the built-in tables use, so a stored
    version round-trips through PayrollPolicy.from_payload unchanged.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, policy: PayrollPolicy, source_url: str | None = None) -> PolicyVersion:
        """Store a policy version, replacing the payload if the version exists."""
        existing = await self._get_by_version(policy.version)
        if existing is not None:
            existing.effective_start = policy.effective_start
            existing.effective_end = policy.effective_end
            existing.payload_json = policy.to_payload()
            if source_url is not None:
                existing.source_url = source_url
            await self.session.flush()
            logger.info("Updated policy version %s", policy.version)
            return existing

        row = PolicyVersion(
            version=policy.version,
            effective_start=policy.effective_start,
            effective_end=policy.effective_end,
            source_url=source_url,
            payload_json=policy.to_payload(),
        )
        self.session.add(row)
        await self.session.flush()
        logger.info("Stored policy version %s", policy.version)
        return row

    async def list_versions(self) -> list[PayrollPolicy]:
        result = await self.session.execute(
            select(PolicyVersion).order_by(PolicyVersion.effective_start)
        )
        return [PayrollPolicy.from_payload(row.payload_json) for row in result.scalars()]

    async def get_for_date(self, as_of_date: date) -> PayrollPolicy:
        """Get the policy version effective on a date."""
        result = await self.session.execute(
            select(PolicyVersion)
            .where(PolicyVersion.effective_start <= as_of_date)
            .order_by(PolicyVersion.effective_start.desc())
        )
        for row in result.scalars():
            if row.is_active_on(as_of_date):
                return PayrollPolicy.from_payload(row.payload_json)
        raise PolicyNotFoundError(as_of_date)

    async def load_schedule(self) -> PolicySchedule:
        """Build a schedule from every stored version."""
        return PolicySchedule(await self.list_versions())

    async def _get_by_version(self, version: str) -> PolicyVersion | None:
        result = await self.session.execute(
            select(PolicyVersion).where(PolicyVersion.version == version)
        )
        return result.scalar_one_or_none()
