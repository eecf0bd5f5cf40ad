"""Pytest fixtures for payslip engine tests."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.database import create_all, create_engine_for_url, make_session_factory
from payslip_engine.models import (
    AttendanceRecord,
    Employee,
    OvertimeRequest,
    OvertimeStatus,
    Payslip,
    PayslipStatus,
    ReimbursementRequest,
    ReimbursementStatus,
    Role,
)
from payslip_engine.services.access_guard import Actor

# In-memory SQLite per test; StaticPool keeps one shared connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PERIOD_START = date(2025, 1, 1)
PERIOD_END = date(2025, 1, 31)


@pytest.fixture
async def engine():
    """Create test database engine with a fresh schema."""
    engine = create_engine_for_url(TEST_DATABASE_URL)
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def admin() -> Actor:
    return Actor(actor_id=1, role=Role.ADMIN)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    """UTC datetime on ``day``."""
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


class RecordFactory:
    """Inserts fixture rows directly, bypassing the services under test."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add(self, entity):
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def employee(
        self, name: str = "Employee", role: Role = Role.EMPLOYEE, active: bool = True
    ) -> Employee:
        return await self._add(Employee(name=name, role=role.value, active=active))

    async def attendance(
        self, employee: Employee, day: date, hours: int = 8
    ) -> AttendanceRecord:
        record = AttendanceRecord(
            employee_id=employee.employee_id,
            work_date=day,
            check_in=at(day, 9),
            check_out=at(day, 9) + timedelta(hours=hours),
        )
        record.calculate_hours()
        return await self._add(record)

    async def overtime(
        self,
        employee: Employee,
        day: date,
        hours: int,
        status: OvertimeStatus = OvertimeStatus.APPROVED,
    ) -> OvertimeRequest:
        return await self._add(
            OvertimeRequest(
                employee_id=employee.employee_id,
                overtime_date=day.isoformat(),
                hours=hours,
                reason="release",
                status=status.value,
            )
        )

    async def reimbursement(
        self,
        employee: Employee,
        day: date,
        amount: str,
        status: ReimbursementStatus = ReimbursementStatus.APPROVED,
    ) -> ReimbursementRequest:
        return await self._add(
            ReimbursementRequest(
                employee_id=employee.employee_id,
                reimbursement_date=day,
                amount=Decimal(amount),
                reason="taxi",
                status=status.value,
            )
        )

    async def payslip(
        self,
        employee: Employee,
        start: date = PERIOD_START,
        end: date = PERIOD_END,
        basic_salary: str = "5000.00",
        overtime_hours: int = 0,
        overtime_amount: str = "0.00",
        reimbursement_amount: str = "0.00",
        attendance_days: int = 0,
    ) -> Payslip:
        basic = Decimal(basic_salary)
        overtime = Decimal(overtime_amount)
        reimbursement = Decimal(reimbursement_amount)
        return await self._add(
            Payslip(
                employee_id=employee.employee_id,
                period_start=start,
                period_end=end,
                basic_salary=basic,
                overtime_hours=overtime_hours,
                overtime_amount=overtime,
                reimbursement_amount=reimbursement,
                total_amount=basic + overtime + reimbursement,
                attendance_days=attendance_days,
                processed_at=at(end, 12),
                status=PayslipStatus.PROCESSED.value,
            )
        )


@pytest.fixture
def factory(session) -> RecordFactory:
    return RecordFactory(session)
