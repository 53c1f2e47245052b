"""Per-employee locks shared by every pay run in the process."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID


class EmployeeLockRegistry:
    """Hands out one asyncio.Lock per employee.

    A pay run holds an employee's lock from the YTD read to the YTD write, so
    two runs touching the same employee cannot both read the same YTD value.
    Locks are dropped once nothing holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, employee_id: UUID | str) -> AsyncIterator[None]:
        key = str(employee_id)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


_registry = EmployeeLockRegistry()


def get_employee_locks() -> EmployeeLockRegistry:
    """The process-wide registry used when a service is not given one."""
    return _registry
