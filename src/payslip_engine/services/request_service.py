"""Overtime and reimbursement claims and their approval workflow."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.calculators.aggregation import ZERO, date_key, to_decimal
from payslip_engine.exceptions import NotFound, ValidationError
from payslip_engine.models import (
    OvertimeRequest,
    OvertimeStatus,
    ReimbursementCategory,
    ReimbursementRequest,
    ReimbursementStatus,
)
from payslip_engine.models.base import utcnow
from payslip_engine.services.access_guard import Actor, ensure_access, ensure_admin
from payslip_engine.services.attendance_service import AttendanceService, is_weekend
from payslip_engine.services.audited_mutator import AuditedMutator
from payslip_engine.services.record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_OVERTIME_HOURS = 3


class InvalidRequestTransition(ValidationError):
    """Raised when a claim is moved to a status its current one does not allow."""

    def __init__(self, kind: str, from_status: str, to_status: str):
        self.kind = kind
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"cannot move {kind} request from '{from_status}' to '{to_status}'")


# {from_status: [allowed_to_statuses]}
OVERTIME_TRANSITIONS: dict[str, list[str]] = {
    OvertimeStatus.PENDING.value: [OvertimeStatus.APPROVED.value, OvertimeStatus.REJECTED.value],
    OvertimeStatus.APPROVED.value: [],
    OvertimeStatus.REJECTED.value: [],
}

REIMBURSEMENT_TRANSITIONS: dict[str, list[str]] = {
    ReimbursementStatus.PENDING.value: [
        ReimbursementStatus.APPROVED.value,
        ReimbursementStatus.REJECTED.value,
    ],
    ReimbursementStatus.APPROVED.value: [ReimbursementStatus.PAID.value],
    ReimbursementStatus.REJECTED.value: [],
    ReimbursementStatus.PAID.value: [],
}


def _validate_transition(
    kind: str, table: dict[str, list[str]], from_status: str, to_status: str
) -> None:
    if to_status not in table.get(from_status, []):
        raise InvalidRequestTransition(kind, from_status, to_status)


class RequestService:
    """Files and resolves overtime and reimbursement claims.

    Employees file for themselves (admins may file on their behalf); only
    admins approve, reject or mark paid.
    """

    def __init__(
        self,
        session: AsyncSession,
        store: RecordStore | None = None,
        max_overtime_hours: int = DEFAULT_MAX_OVERTIME_HOURS,
    ):
        self.session = session
        self.store = store or RecordStore(session)
        self.max_overtime_hours = max_overtime_hours

    # ----- Overtime -----

    async def create_overtime(
        self,
        employee_id: int,
        hours: int,
        reason: str,
        actor: Actor,
        now: datetime | None = None,
    ) -> OvertimeRequest:
        """File today's overtime claim.

        On weekdays the employee must already have checked out; weekend
        overtime needs no attendance record.
        """
        ensure_access(actor, employee_id)
        today = (now or utcnow()).date()
        overtime_date = date_key(today)

        employee = await self.store.employee_by_id(employee_id)

        existing = await self.session.scalar(
            select(func.count())
            .select_from(OvertimeRequest)
            .where(
                OvertimeRequest.employee_id == employee_id,
                OvertimeRequest.overtime_date == overtime_date,
                OvertimeRequest.deleted_at.is_(None),
            )
        )
        if existing:
            raise ValidationError(
                f"overtime for employee {employee.name} already exists for today"
            )

        if not is_weekend(today):
            attendance = await AttendanceService(self.session, self.store).todays_record(
                employee_id, today
            )
            if attendance is None:
                raise ValidationError(f"attendance for employee {employee_id} not found")
            if attendance.check_out is None:
                raise ValidationError(f"employee {employee_id} has not checked out yet")

        if hours < 1:
            raise ValidationError("overtime hours must be at least 1")
        if hours > self.max_overtime_hours:
            raise ValidationError(
                f"overtime hours maximum is {self.max_overtime_hours} hours"
            )

        overtime = OvertimeRequest(
            employee_id=employee_id,
            overtime_date=overtime_date,
            hours=hours,
            reason=reason,
            status=OvertimeStatus.PENDING.value,
        )
        await AuditedMutator(self.session, actor.actor_id).create(overtime)
        logger.info("Overtime %s filed for employee %s", overtime.overtime_id, employee_id)
        return overtime

    async def overtime_by_id(self, overtime_id: int) -> OvertimeRequest:
        result = await self.session.execute(
            select(OvertimeRequest).where(
                OvertimeRequest.overtime_id == overtime_id,
                OvertimeRequest.deleted_at.is_(None),
            )
        )
        overtime = result.scalar_one_or_none()
        if overtime is None:
            raise NotFound("overtime request", overtime_id)
        return overtime

    async def approve_overtime(self, overtime_id: int, actor: Actor) -> OvertimeRequest:
        ensure_admin(actor)
        overtime = await self.overtime_by_id(overtime_id)
        _validate_transition(
            "overtime", OVERTIME_TRANSITIONS, overtime.status, OvertimeStatus.APPROVED.value
        )
        overtime.approve(actor.actor_id)
        return await AuditedMutator(self.session, actor.actor_id).save(overtime)

    async def reject_overtime(self, overtime_id: int, actor: Actor) -> OvertimeRequest:
        ensure_admin(actor)
        overtime = await self.overtime_by_id(overtime_id)
        _validate_transition(
            "overtime", OVERTIME_TRANSITIONS, overtime.status, OvertimeStatus.REJECTED.value
        )
        overtime.reject(actor.actor_id)
        return await AuditedMutator(self.session, actor.actor_id).save(overtime)

    # ----- Reimbursements -----

    async def create_reimbursement(
        self,
        employee_id: int,
        amount: Decimal | int | float | str,
        reason: str,
        actor: Actor,
        category: str = ReimbursementCategory.OTHER.value,
        now: datetime | None = None,
    ) -> ReimbursementRequest:
        """File today's reimbursement claim; one per employee per day."""
        ensure_access(actor, employee_id)
        today: date = (now or utcnow()).date()

        amount = to_decimal(amount)
        if amount <= ZERO:
            raise ValidationError("reimbursement amount must be greater than 0")
        try:
            category = ReimbursementCategory(category).value
        except ValueError:
            raise ValidationError(f"unknown reimbursement category '{category}'") from None

        employee = await self.store.employee_by_id(employee_id)

        existing = await self.session.scalar(
            select(func.count())
            .select_from(ReimbursementRequest)
            .where(
                ReimbursementRequest.employee_id == employee_id,
                ReimbursementRequest.reimbursement_date == today,
                ReimbursementRequest.deleted_at.is_(None),
            )
        )
        if existing:
            raise ValidationError(
                f"reimbursement for employee {employee.name} already claimed for today"
            )

        reimbursement = ReimbursementRequest(
            employee_id=employee_id,
            reimbursement_date=today,
            amount=amount,
            category=category,
            reason=reason,
            status=ReimbursementStatus.PENDING.value,
        )
        await AuditedMutator(self.session, actor.actor_id).create(reimbursement)
        logger.info(
            "Reimbursement %s filed for employee %s",
            reimbursement.reimbursement_id,
            employee_id,
        )
        return reimbursement

    async def reimbursement_by_id(self, reimbursement_id: int) -> ReimbursementRequest:
        result = await self.session.execute(
            select(ReimbursementRequest).where(
                ReimbursementRequest.reimbursement_id == reimbursement_id,
                ReimbursementRequest.deleted_at.is_(None),
            )
        )
        reimbursement = result.scalar_one_or_none()
        if reimbursement is None:
            raise NotFound("reimbursement request", reimbursement_id)
        return reimbursement

    async def approve_reimbursement(
        self, reimbursement_id: int, actor: Actor
    ) -> ReimbursementRequest:
        ensure_admin(actor)
        reimbursement = await self.reimbursement_by_id(reimbursement_id)
        _validate_transition(
            "reimbursement",
            REIMBURSEMENT_TRANSITIONS,
            reimbursement.status,
            ReimbursementStatus.APPROVED.value,
        )
        reimbursement.approve(actor.actor_id)
        return await AuditedMutator(self.session, actor.actor_id).save(reimbursement)

    async def reject_reimbursement(
        self, reimbursement_id: int, actor: Actor
    ) -> ReimbursementRequest:
        ensure_admin(actor)
        reimbursement = await self.reimbursement_by_id(reimbursement_id)
        _validate_transition(
            "reimbursement",
            REIMBURSEMENT_TRANSITIONS,
            reimbursement.status,
            ReimbursementStatus.REJECTED.value,
        )
        reimbursement.reject(actor.actor_id)
        return await AuditedMutator(self.session, actor.actor_id).save(reimbursement)

    async def mark_reimbursement_paid(
        self, reimbursement_id: int, actor: Actor
    ) -> ReimbursementRequest:
        """Approved claims only. Paid claims no longer feed payroll runs."""
        ensure_admin(actor)
        reimbursement = await self.reimbursement_by_id(reimbursement_id)
        _validate_transition(
            "reimbursement",
            REIMBURSEMENT_TRANSITIONS,
            reimbursement.status,
            ReimbursementStatus.PAID.value,
        )
        reimbursement.mark_as_paid()
        return await AuditedMutator(self.session, actor.actor_id).save(reimbursement)
