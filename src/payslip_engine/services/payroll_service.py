"""Payroll runs: single-employee aggregation and the batch runner."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.calculators.aggregation import aggregate_payslip, date_key
from payslip_engine.exceptions import (
    AlreadyProcessed,
    DeadlineExceeded,
    FetchFailed,
    PayslipEngineError,
)
from payslip_engine.models import Payslip, PayslipStatus
from payslip_engine.models.base import utcnow
from payslip_engine.services.access_guard import Actor
from payslip_engine.services.audited_mutator import AuditedMutator
from payslip_engine.services.locking_service import PayrollLockRegistry, payroll_locks
from payslip_engine.services.record_store import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class EmployeeFailure:
    """One failed employee in a batch run (employee_id None: batch-level)."""

    employee_id: int | None
    error: Exception

    @property
    def message(self) -> str:
        if self.employee_id is None:
            message = str(self.error)
            return message[:1].upper() + message[1:]
        return f"Employee {self.employee_id}: {self.error}"


@dataclass
class BatchResult:
    """Outcome of a batch run.

    payslips and failures are independent; callers must inspect both.
    """

    payslips: list[Payslip] = field(default_factory=list)
    failures: list[EmployeeFailure] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        """Failures flattened to "Employee <id>: <error>" strings."""
        return [f.message for f in self.failures]

    @property
    def processed_count(self) -> int:
        return len(self.payslips)

    @property
    def error_count(self) -> int:
        return len(self.failures)


def _deadline_passed(deadline: datetime | None) -> bool:
    return deadline is not None and datetime.now(timezone.utc) >= deadline


class PayrollService:
    """Service for computing and persisting payslips.

    Operations:
    - process_employee_payroll: one employee, one period, one payslip
    - process_all_employees: every active employee, failures isolated
    """

    def __init__(
        self,
        session: AsyncSession,
        store: RecordStore | None = None,
        locks: PayrollLockRegistry | None = None,
    ):
        self.session = session
        self.store = store or RecordStore(session)
        self.locks = locks or payroll_locks

    async def process_employee_payroll(
        self,
        employee_id: int,
        period_start: date,
        period_end: date,
        basic_salary: Decimal,
        overtime_rate: Decimal,
        actor: Actor,
        *,
        deadline: datetime | None = None,
    ) -> Payslip:
        """Compute and persist the payslip for one employee and period.

        Steps run in a fixed order, with the idempotency check before any
        write. Raises AlreadyProcessed, FetchFailed or PersistFailed; nothing
        is written unless every read succeeded.
        """
        if _deadline_passed(deadline):
            raise DeadlineExceeded()

        async with self.locks.hold(employee_id, period_start, period_end):
            exists = await self._fetch(
                "existing payslip",
                self.store.payslip_exists(employee_id, period_start, period_end),
            )
            if exists:
                raise AlreadyProcessed(employee_id, period_start, period_end)

            attendances = await self._fetch(
                "attendance records",
                self.store.attendance_in_range(employee_id, period_start, period_end),
            )
            overtimes = await self._fetch(
                "overtime records",
                self.store.approved_overtime_in_range(
                    employee_id, date_key(period_start), date_key(period_end)
                ),
            )
            reimbursements = await self._fetch(
                "reimbursement records",
                self.store.approved_reimbursements_in_range(
                    employee_id, period_start, period_end
                ),
            )

            totals = aggregate_payslip(
                attendances=attendances,
                overtimes=overtimes,
                reimbursements=reimbursements,
                period_start=period_start,
                period_end=period_end,
                basic_salary=basic_salary,
                overtime_rate=overtime_rate,
            )

            payslip = Payslip(
                employee_id=employee_id,
                period_start=period_start,
                period_end=period_end,
                basic_salary=totals.basic_salary,
                overtime_hours=totals.overtime_hours,
                overtime_amount=totals.overtime_amount,
                reimbursement_amount=totals.reimbursement_amount,
                total_amount=totals.total_amount,
                attendance_days=totals.attendance_days,
                processed_at=utcnow(),
                status=PayslipStatus.PROCESSED.value,
            )
            mutator = AuditedMutator(self.session, actor.actor_id)
            payslip = await self.store.create_payslip(payslip, mutator)

        logger.info(
            "Processed payslip %s for employee %s (%s..%s)",
            payslip.payslip_id,
            employee_id,
            period_start,
            period_end,
        )
        return payslip

    async def process_all_employees(
        self,
        period_start: date,
        period_end: date,
        basic_salary: Decimal,
        overtime_rate: Decimal,
        actor: Actor,
        *,
        deadline: datetime | None = None,
    ) -> BatchResult:
        """Run payroll for every active employee, in id order.

        Each employee runs inside its own SAVEPOINT; a failure rolls back only
        that employee and is recorded, never raised. Only a failure to list
        employees ends the run early. Once ``deadline`` passes the remaining
        employees are recorded as DeadlineExceeded without being touched.
        """
        result = BatchResult()

        try:
            employees = await self.store.active_employees()
        except SQLAlchemyError as e:
            error = FetchFailed("employees", e)
            logger.error("Payroll batch aborted: %s", error)
            result.failures.append(EmployeeFailure(None, error))
            return result

        for employee in employees:
            employee_id = employee.employee_id

            if _deadline_passed(deadline):
                result.failures.append(EmployeeFailure(employee_id, DeadlineExceeded()))
                continue

            try:
                async with self.session.begin_nested():
                    payslip = await self.process_employee_payroll(
                        employee_id,
                        period_start,
                        period_end,
                        basic_salary,
                        overtime_rate,
                        actor,
                    )
            except PayslipEngineError as e:
                logger.warning("Payroll failed for employee %s: %s", employee_id, e)
                result.failures.append(EmployeeFailure(employee_id, e))
                continue
            except Exception as e:
                logger.exception("Unexpected payroll error for employee %s", employee_id)
                result.failures.append(EmployeeFailure(employee_id, e))
                continue

            result.payslips.append(payslip)

        logger.info(
            "Payroll batch %s..%s: %d processed, %d failed",
            period_start,
            period_end,
            result.processed_count,
            result.error_count,
        )
        return result

    async def _fetch(self, source: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except SQLAlchemyError as e:
            raise FetchFailed(source, e) from e
