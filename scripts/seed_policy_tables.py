"""Seed script for policy table versions.

Run with:
    python scripts/seed_policy_tables.py [policies.json]

Stores the built-in 2024/25 and 2025/26 tables, or the versions in the
given JSON file, as policy_version rows. Existing versions are replaced.
"""

from __future__ import annotations

import asyncio
import sys

from nz_payroll.calculators.policy import BUILTIN_POLICIES, PolicySchedule
from nz_payroll.database import dispose_db, get_session, init_db
from nz_payroll.models import Base
from nz_payroll.services.policy_repository import PolicyRepository

IRD_TAX_RATES_URL = (
    "https://www.ird.govt.nz/income-tax/income-tax-for-individuals/"
    "tax-codes-and-tax-rates-for-individuals/tax-rates-for-individuals"
)


async def create_tables() -> None:
    engine, _ = init_db()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main(path: str | None = None) -> None:
    """Run seed script."""
    policies = PolicySchedule.from_json_file(path).versions if path else BUILTIN_POLICIES
    print(f"Seeding {len(policies)} policy version(s)...")

    await create_tables()
    async with get_session() as session:
        repository = PolicyRepository(session)
        for policy in policies:
            await repository.add(policy, source_url=IRD_TAX_RATES_URL)
            print(f"Stored {policy.version} effective {policy.effective_start}")

    await dispose_db()

    print("\nDone! Policy tables seeded successfully.")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
