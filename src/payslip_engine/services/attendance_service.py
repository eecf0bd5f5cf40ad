"""Employee check-in/check-out."""

from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.exceptions import ValidationError
from payslip_engine.models import AttendanceRecord, AttendanceStatus
from payslip_engine.models.base import utcnow
from payslip_engine.services.access_guard import Actor, ensure_access
from payslip_engine.services.audited_mutator import AuditedMutator
from payslip_engine.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


class AttendanceService:
    """Records one attendance row per employee per working day.

    - check_in: weekdays only, once per day
    - check_out: requires today's check-in, once per day; derives hours_worked
    """

    def __init__(self, session: AsyncSession, store: RecordStore | None = None):
        self.session = session
        self.store = store or RecordStore(session)

    async def todays_record(self, employee_id: int, today: date) -> AttendanceRecord | None:
        result = await self.session.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.work_date == today,
                AttendanceRecord.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def check_in(
        self, employee_id: int, actor: Actor, now: datetime | None = None
    ) -> AttendanceRecord:
        ensure_access(actor, employee_id)
        now = now or utcnow()
        today = now.date()

        await self.store.employee_by_id(employee_id)
        if is_weekend(today):
            raise ValidationError("attendance cannot be created on weekends")
        if await self.todays_record(employee_id, today) is not None:
            raise ValidationError("already checked in today")

        record = AttendanceRecord(
            employee_id=employee_id,
            work_date=today,
            check_in=now,
            hours_worked=0,
            status=AttendanceStatus.PRESENT.value,
        )
        await AuditedMutator(self.session, actor.actor_id).create(record)
        logger.info("Employee %s checked in for %s", employee_id, today)
        return record

    async def check_out(
        self, employee_id: int, actor: Actor, now: datetime | None = None
    ) -> AttendanceRecord:
        ensure_access(actor, employee_id)
        now = now or utcnow()

        record = await self.todays_record(employee_id, now.date())
        if record is None:
            raise ValidationError("no check-in record found for today")
        if record.check_out is not None:
            raise ValidationError("already checked out today")

        record.check_out = now
        record.calculate_hours()
        await AuditedMutator(self.session, actor.actor_id).save(record)
        logger.info(
            "Employee %s checked out for %s (%d hours)",
            employee_id,
            record.work_date,
            record.hours_worked,
        )
        return record
