"""Record store: the reads and writes the payroll engine depends on."""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.exceptions import AlreadyProcessed, NotFound, PersistFailed
from payslip_engine.models import (
    AttendanceRecord,
    Employee,
    OvertimeRequest,
    OvertimeStatus,
    Payslip,
    ReimbursementRequest,
    ReimbursementStatus,
)
from payslip_engine.services.audited_mutator import AuditedMutator


class RecordStore:
    """Queries over employees, attendance, requests and payslips.

    Soft-deleted rows are never returned. Read errors surface as
    SQLAlchemyError; callers decide how to wrap them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ----- Employees -----

    async def employee_by_id(self, employee_id: int) -> Employee:
        """Load a live employee, raising NotFound if absent or deleted."""
        result = await self.session.execute(
            select(Employee).where(
                Employee.employee_id == employee_id,
                Employee.deleted_at.is_(None),
            )
        )
        employee = result.scalar_one_or_none()
        if employee is None:
            raise NotFound("employee", employee_id)
        return employee

    async def active_employees(self) -> list[Employee]:
        result = await self.session.execute(
            select(Employee)
            .where(Employee.active.is_(True), Employee.deleted_at.is_(None))
            .order_by(Employee.employee_id)
        )
        return list(result.scalars().all())

    # ----- Payroll inputs -----

    async def attendance_in_range(
        self, employee_id: int, start: date, end: date
    ) -> list[AttendanceRecord]:
        """Attendance records with work_date in [start, end]."""
        result = await self.session.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.work_date >= start,
                AttendanceRecord.work_date <= end,
                AttendanceRecord.deleted_at.is_(None),
            )
            .order_by(AttendanceRecord.work_date)
        )
        return list(result.scalars().all())

    async def approved_overtime_in_range(
        self, employee_id: int, start: str, end: str
    ) -> list[OvertimeRequest]:
        """Approved overtime whose YYYY-MM-DD date string is in [start, end]."""
        result = await self.session.execute(
            select(OvertimeRequest)
            .where(
                OvertimeRequest.employee_id == employee_id,
                OvertimeRequest.overtime_date >= start,
                OvertimeRequest.overtime_date <= end,
                OvertimeRequest.status == OvertimeStatus.APPROVED.value,
                OvertimeRequest.deleted_at.is_(None),
            )
            .order_by(OvertimeRequest.overtime_date)
        )
        return list(result.scalars().all())

    async def approved_reimbursements_in_range(
        self, employee_id: int, start: date, end: date
    ) -> list[ReimbursementRequest]:
        result = await self.session.execute(
            select(ReimbursementRequest)
            .where(
                ReimbursementRequest.employee_id == employee_id,
                ReimbursementRequest.reimbursement_date >= start,
                ReimbursementRequest.reimbursement_date <= end,
                ReimbursementRequest.status == ReimbursementStatus.APPROVED.value,
                ReimbursementRequest.deleted_at.is_(None),
            )
            .order_by(ReimbursementRequest.reimbursement_date)
        )
        return list(result.scalars().all())

    async def reimbursements_for_display_in_range(
        self, employee_id: int, start: date, end: date
    ) -> list[ReimbursementRequest]:
        """Approved or already-paid claims; payslip breakdowns list both."""
        result = await self.session.execute(
            select(ReimbursementRequest)
            .where(
                ReimbursementRequest.employee_id == employee_id,
                ReimbursementRequest.reimbursement_date >= start,
                ReimbursementRequest.reimbursement_date <= end,
                ReimbursementRequest.status.in_(
                    [ReimbursementStatus.APPROVED.value, ReimbursementStatus.PAID.value]
                ),
                ReimbursementRequest.deleted_at.is_(None),
            )
            .order_by(ReimbursementRequest.reimbursement_date)
        )
        return list(result.scalars().all())

    # ----- Payslips -----

    async def payslip_exists(self, employee_id: int, start: date, end: date) -> bool:
        count = await self.session.scalar(
            select(func.count())
            .select_from(Payslip)
            .where(
                Payslip.employee_id == employee_id,
                Payslip.period_start == start,
                Payslip.period_end == end,
                Payslip.deleted_at.is_(None),
            )
        )
        return bool(count)

    async def create_payslip(self, payslip: Payslip, mutator: AuditedMutator) -> Payslip:
        """Insert a payslip through the audited mutator.

        A uniqueness violation means a concurrent run got there first.
        """
        try:
            return await mutator.create(payslip)
        except IntegrityError as e:
            raise AlreadyProcessed(
                payslip.employee_id, payslip.period_start, payslip.period_end
            ) from e
        except SQLAlchemyError as e:
            raise PersistFailed("payslip", e) from e

    async def payslip_by_id(self, payslip_id: int) -> Payslip:
        result = await self.session.execute(
            select(Payslip).where(
                Payslip.payslip_id == payslip_id,
                Payslip.deleted_at.is_(None),
            )
        )
        payslip = result.scalar_one_or_none()
        if payslip is None:
            raise NotFound("payslip", payslip_id)
        return payslip

    async def payslips_by_employee(self, employee_id: int) -> list[Payslip]:
        """Newest period first."""
        result = await self.session.execute(
            select(Payslip)
            .where(Payslip.employee_id == employee_id, Payslip.deleted_at.is_(None))
            .order_by(Payslip.period_start.desc())
        )
        return list(result.scalars().all())

    async def payslips_by_period(self, start: date, end: date) -> list[Payslip]:
        """Payslips whose period lies entirely within [start, end]."""
        result = await self.session.execute(
            select(Payslip)
            .where(
                Payslip.period_start >= start,
                Payslip.period_end <= end,
                Payslip.deleted_at.is_(None),
            )
            .order_by(Payslip.employee_id, Payslip.period_start)
        )
        return list(result.scalars().all())
