"""Tests for single-employee payroll and the batch runner."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from payslip_engine.exceptions import (
    AlreadyProcessed,
    DeadlineExceeded,
    FetchFailed,
    PersistFailed,
)
from payslip_engine.models import OvertimeStatus, Payslip, ReimbursementStatus
from payslip_engine.services.locking_service import PayrollLockRegistry
from payslip_engine.services.payroll_service import PayrollService
from payslip_engine.services.record_store import RecordStore

PERIOD_START = date(2025, 1, 1)
PERIOD_END = date(2025, 1, 31)

SALARY = Decimal("5000.00")
RATE = Decimal("50.00")


def db_error() -> OperationalError:
    return OperationalError("SELECT", {}, Exception("connection lost"))


@pytest.fixture
def service(session) -> PayrollService:
    return PayrollService(session, locks=PayrollLockRegistry())


async def payslip_count(session) -> int:
    return await session.scalar(select(func.count()).select_from(Payslip))


class TestProcessEmployeePayroll:
    """Test the single-employee aggregator."""

    async def test_aggregates_period_records(self, service, factory, admin):
        employee = await factory.employee("Ana")
        for day in (6, 7, 8):
            await factory.attendance(employee, date(2025, 1, day))
        await factory.overtime(employee, date(2025, 1, 6), 2)
        await factory.overtime(employee, date(2025, 1, 7), 3)
        await factory.overtime(employee, date(2025, 1, 8), 5, status=OvertimeStatus.PENDING)
        await factory.reimbursement(employee, date(2025, 1, 6), "100.50")
        await factory.reimbursement(employee, date(2025, 1, 7), "250.75")
        await factory.reimbursement(
            employee, date(2025, 1, 8), "300.00", status=ReimbursementStatus.PENDING
        )

        payslip = await service.process_employee_payroll(
            employee.employee_id, PERIOD_START, PERIOD_END, SALARY, RATE, admin
        )

        assert payslip.payslip_id is not None
        assert payslip.attendance_days == 3
        assert payslip.overtime_hours == 5
        assert payslip.overtime_amount == Decimal("250.00")
        assert payslip.reimbursement_amount == Decimal("351.25")
        assert payslip.total_amount == Decimal("5601.25")
        assert payslip.status == "processed"
        assert payslip.created_by == admin.actor_id

    async def test_records_outside_period_ignored(self, service, factory, admin):
        employee = await factory.employee("Ben")
        await factory.attendance(employee, date(2024, 12, 31))
        await factory.overtime(employee, date(2025, 2, 1), 3)
        await factory.reimbursement(employee, date(2025, 2, 1), "99.00")

        payslip = await service.process_employee_payroll(
            employee.employee_id, PERIOD_START, PERIOD_END, SALARY, RATE, admin
        )

        assert payslip.attendance_days == 0
        assert payslip.overtime_hours == 0
        assert payslip.total_amount == SALARY

    async def test_second_run_already_processed(self, service, session, factory, admin):
        employee = await factory.employee("Cara")
        await service.process_employee_payroll(
            employee.employee_id, PERIOD_START, PERIOD_END, SALARY, RATE, admin
        )

        with pytest.raises(AlreadyProcessed) as exc_info:
            await service.process_employee_payroll(
                employee.employee_id, PERIOD_START, PERIOD_END, SALARY, RATE, admin
            )

        assert str(exc_info.value) == "payslip already exists for this period"
        assert await payslip_count(session) == 1

    async def test_fetch_failure_names_source(self, session, admin):
        store = AsyncMock(spec=RecordStore)
        store.payslip_exists.return_value = False
        store.attendance_in_range.side_effect = db_error()
        service = PayrollService(session, store=store, locks=PayrollLockRegistry())

        with pytest.raises(FetchFailed) as exc_info:
            await service.process_employee_payroll(1, PERIOD_START, PERIOD_END, SALARY, RATE, admin)

        assert exc_info.value.source == "attendance records"
        assert str(exc_info.value).startswith("failed to get attendance records:")
        store.create_payslip.assert_not_called()

    async def test_existence_check_failure(self, session, admin):
        store = AsyncMock(spec=RecordStore)
        store.payslip_exists.side_effect = db_error()
        service = PayrollService(session, store=store, locks=PayrollLockRegistry())

        with pytest.raises(FetchFailed) as exc_info:
            await service.process_employee_payroll(1, PERIOD_START, PERIOD_END, SALARY, RATE, admin)

        assert exc_info.value.source == "existing payslip"
        store.attendance_in_range.assert_not_called()

    async def test_concurrent_insert_maps_to_already_processed(self, session, factory, admin):
        employee = await factory.employee("Eve")
        await factory.payslip(employee, PERIOD_START, PERIOD_END)
        store = RecordStore(session)
        store.payslip_exists = AsyncMock(return_value=False)
        service = PayrollService(session, store=store, locks=PayrollLockRegistry())

        with pytest.raises(AlreadyProcessed) as exc_info:
            await service.process_employee_payroll(
                employee.employee_id, PERIOD_START, PERIOD_END, SALARY, RATE, admin
            )

        assert isinstance(exc_info.value.__cause__, IntegrityError)

    async def test_write_failure_maps_to_persist_failed(
        self, service, session, factory, admin, monkeypatch
    ):
        employee = await factory.employee("Finn")
        monkeypatch.setattr(session, "flush", AsyncMock(side_effect=db_error()))

        with pytest.raises(PersistFailed) as exc_info:
            await service.process_employee_payroll(
                employee.employee_id, PERIOD_START, PERIOD_END, SALARY, RATE, admin
            )

        assert exc_info.value.entity == "payslip"
        assert isinstance(exc_info.value.cause, OperationalError)

    async def test_expired_deadline(self, service, factory, session, admin):
        employee = await factory.employee("Dan")
        past = datetime.now(timezone.utc) - timedelta(seconds=1)

        with pytest.raises(DeadlineExceeded):
            await service.process_employee_payroll(
                employee.employee_id, PERIOD_START, PERIOD_END, SALARY, RATE, admin, deadline=past
            )

        assert await payslip_count(session) == 0


class TestProcessAllEmployees:
    """Test the batch runner."""

    async def test_partial_failure(self, service, session, factory, admin):
        employees = [await factory.employee(name) for name in ("Ana", "Ben", "Cara")]
        await factory.payslip(employees[1])

        result = await service.process_all_employees(
            PERIOD_START, PERIOD_END, SALARY, RATE, admin
        )

        assert result.processed_count == 2
        assert result.error_count == 1
        assert result.errors[0].startswith(f"Employee {employees[1].employee_id}:")
        assert "payslip already exists" in result.errors[0]
        assert {p.employee_id for p in result.payslips} == {
            employees[0].employee_id,
            employees[2].employee_id,
        }
        assert await payslip_count(session) == 3

    async def test_inactive_and_deleted_skipped(self, service, session, factory, admin):
        await factory.employee("Active")
        await factory.employee("Inactive", active=False)
        deleted = await factory.employee("Deleted")
        deleted.deleted_at = datetime.now(timezone.utc)
        await session.flush()

        result = await service.process_all_employees(
            PERIOD_START, PERIOD_END, SALARY, RATE, admin
        )

        assert result.processed_count == 1
        assert result.errors == []

    async def test_listing_failure(self, session, admin):
        store = AsyncMock(spec=RecordStore)
        store.active_employees.side_effect = db_error()
        service = PayrollService(session, store=store, locks=PayrollLockRegistry())

        result = await service.process_all_employees(
            PERIOD_START, PERIOD_END, SALARY, RATE, admin
        )

        assert result.payslips == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Failed to get employees:")

    async def test_deadline_marks_remaining(self, service, factory, admin):
        for name in ("Ana", "Ben"):
            await factory.employee(name)
        past = datetime.now(timezone.utc) - timedelta(seconds=1)

        result = await service.process_all_employees(
            PERIOD_START, PERIOD_END, SALARY, RATE, admin, deadline=past
        )

        assert result.processed_count == 0
        assert result.error_count == 2
        assert all(isinstance(f.error, DeadlineExceeded) for f in result.failures)

    async def test_empty_roster(self, service, admin):
        result = await service.process_all_employees(
            PERIOD_START, PERIOD_END, SALARY, RATE, admin
        )

        assert result.payslips == []
        assert result.errors == []
