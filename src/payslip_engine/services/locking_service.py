"""Per-(employee, period) serialization of payroll runs."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

LockKey = tuple[int, date, date]


class PayrollLockRegistry:
    """In-process locks keyed by (employee_id, period_start, period_end).

    Closes the check-then-create window in one process: the existence check
    and the payslip insert for a key run while holding that key's lock.
    Cross-process safety comes from the payslip unique constraint.

    Locks are reference-counted and dropped once no task holds or awaits them.
    """

    def __init__(self) -> None:
        self._locks: dict[LockKey, asyncio.Lock] = {}
        self._refs: dict[LockKey, int] = {}

    @asynccontextmanager
    async def hold(
        self, employee_id: int, period_start: date, period_end: date
    ) -> AsyncIterator[None]:
        key = (employee_id, period_start, period_end)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._refs[key] = self._refs.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._refs[key] -= 1
            if self._refs[key] == 0:
                del self._refs[key]
                del self._locks[key]

    def is_locked(self, employee_id: int, period_start: date, period_end: date) -> bool:
        lock = self._locks.get((employee_id, period_start, period_end))
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


# Shared by every PayrollService in this process.
payroll_locks = PayrollLockRegistry()
