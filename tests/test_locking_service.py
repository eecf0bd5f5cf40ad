"""Tests for the per-(employee, period) lock registry."""

import asyncio
from datetime import date

from payslip_engine.services.locking_service import PayrollLockRegistry

START = date(2025, 1, 1)
END = date(2025, 1, 31)


class TestPayrollLockRegistry:
    """Test lock serialization and cleanup."""

    async def test_same_key_serialized(self):
        locks = PayrollLockRegistry()
        order: list[str] = []

        async def worker(name: str):
            async with locks.hold(1, START, END):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )

    async def test_different_keys_independent(self):
        locks = PayrollLockRegistry()

        async with locks.hold(1, START, END):
            assert locks.is_locked(1, START, END)
            assert not locks.is_locked(2, START, END)
            async with locks.hold(2, START, END):
                assert locks.is_locked(2, START, END)

    async def test_idle_locks_dropped(self):
        locks = PayrollLockRegistry()

        async with locks.hold(1, START, END):
            assert len(locks) == 1

        assert len(locks) == 0
        assert not locks.is_locked(1, START, END)
