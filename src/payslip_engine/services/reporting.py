"""Read-only payslip views: line-itemized detail and period summaries.

Builders never recompute payslip totals; they echo what was stored.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.calculators.aggregation import ZERO, date_key, round_to_cents
from payslip_engine.exceptions import FetchFailed, NotFound
from payslip_engine.models import (
    AttendanceRecord,
    Employee,
    OvertimeRequest,
    Payslip,
    ReimbursementRequest,
)
from payslip_engine.services.access_guard import Actor, ensure_access
from payslip_engine.services.record_store import RecordStore

logger = logging.getLogger(__name__)

UNKNOWN_EMPLOYEE = "Unknown Employee"
RATE_PRECISION = Decimal("0.0001")


# ----- Detailed payslip -----


@dataclass(frozen=True)
class AttendanceDetail:
    date: date
    check_in: datetime
    check_out: datetime | None
    hours_worked: int
    status: str


@dataclass(frozen=True)
class OvertimeDetail:
    date: str
    hours: int
    rate: Decimal
    amount: Decimal
    reason: str


@dataclass(frozen=True)
class ReimbursementDetail:
    date: date
    amount: Decimal
    category: str
    reason: str
    status: str


@dataclass(frozen=True)
class PayslipSummaryBlock:
    basic_salary: Decimal
    total_attendance_days: int
    total_overtime_hours: int
    overtime_amount: Decimal
    reimbursement_amount: Decimal
    total_take_home_pay: Decimal


@dataclass(frozen=True)
class DetailedPayslip:
    payslip_id: int
    employee_id: int
    employee_name: str
    period_start: date
    period_end: date
    processed_at: datetime
    status: str
    summary: PayslipSummaryBlock
    attendance_breakdown: list[AttendanceDetail]
    overtime_breakdown: list[OvertimeDetail]
    reimbursement_breakdown: list[ReimbursementDetail]


def reconstructed_overtime_rate(payslip: Payslip) -> Decimal:
    """Per-hour rate implied by the stored payslip (0 when no overtime hours).

    Display-only: drifts from the real rate if overtime records were edited
    after the payslip was created.
    """
    if not payslip.overtime_hours:
        return ZERO
    return (Decimal(payslip.overtime_amount) / payslip.overtime_hours).quantize(RATE_PRECISION)


def build_detailed_payslip(
    payslip: Payslip,
    employee: Employee,
    attendances: Iterable[AttendanceRecord],
    overtimes: Iterable[OvertimeRequest],
    reimbursements: Iterable[ReimbursementRequest],
) -> DetailedPayslip:
    """Summary block echoing stored totals plus three breakdown lists."""
    rate = reconstructed_overtime_rate(payslip)

    return DetailedPayslip(
        payslip_id=payslip.payslip_id,
        employee_id=payslip.employee_id,
        employee_name=employee.name,
        period_start=payslip.period_start,
        period_end=payslip.period_end,
        processed_at=payslip.processed_at,
        status=payslip.status,
        summary=PayslipSummaryBlock(
            basic_salary=payslip.basic_salary,
            total_attendance_days=payslip.attendance_days,
            total_overtime_hours=payslip.overtime_hours,
            overtime_amount=payslip.overtime_amount,
            reimbursement_amount=payslip.reimbursement_amount,
            total_take_home_pay=payslip.total_amount,
        ),
        attendance_breakdown=[
            AttendanceDetail(
                date=a.work_date,
                check_in=a.check_in,
                check_out=a.check_out,
                hours_worked=a.hours_worked,
                status=a.status,
            )
            for a in attendances
        ],
        overtime_breakdown=[
            OvertimeDetail(
                date=o.overtime_date,
                hours=o.hours,
                rate=rate,
                amount=round_to_cents(o.hours * rate),
                reason=o.reason,
            )
            for o in overtimes
        ],
        reimbursement_breakdown=[
            ReimbursementDetail(
                date=r.reimbursement_date,
                amount=r.amount,
                category=r.category,
                reason=r.reason,
                status=r.status,
            )
            for r in reimbursements
        ],
    )


# ----- Payroll summary -----


@dataclass
class EmployeePayrollSummary:
    employee_id: int
    employee_name: str
    payslip_count: int = 0
    total_take_home_pay: Decimal = ZERO
    total_basic_salary: Decimal = ZERO
    total_overtime_amount: Decimal = ZERO
    total_reimbursement: Decimal = ZERO
    total_attendance_days: int = 0
    total_overtime_hours: int = 0

    def add(self, payslip: Payslip) -> None:
        self.payslip_count += 1
        self.total_take_home_pay += payslip.total_amount
        self.total_basic_salary += payslip.basic_salary
        self.total_overtime_amount += payslip.overtime_amount
        self.total_reimbursement += payslip.reimbursement_amount
        self.total_attendance_days += payslip.attendance_days
        self.total_overtime_hours += payslip.overtime_hours


@dataclass(frozen=True)
class PayrollSummaryTotals:
    total_employees: int
    total_payslips: int
    total_take_home_pay: Decimal
    total_basic_salary: Decimal
    total_overtime_amount: Decimal
    total_reimbursement_amount: Decimal
    total_attendance_days: int
    total_overtime_hours: int
    average_take_home_pay: Decimal
    average_basic_salary: Decimal
    average_overtime_amount: Decimal
    average_reimbursement: Decimal


@dataclass(frozen=True)
class PayrollSummary:
    summary_totals: PayrollSummaryTotals
    employee_summaries: list[EmployeePayrollSummary] = field(default_factory=list)


def _mean(total: Decimal, count: int) -> Decimal:
    if count == 0:
        return ZERO
    return round_to_cents(total / count)


def summarize_payslips(
    payslips: Sequence[Payslip],
    employee_names: Mapping[int, str],
) -> PayrollSummary:
    """Group payslips by employee, then total and average across employees.

    Averages are per employee, not per payslip. Names missing from
    ``employee_names`` are labelled "Unknown Employee".
    """
    by_employee: dict[int, EmployeePayrollSummary] = {}
    for payslip in payslips:
        summary = by_employee.get(payslip.employee_id)
        if summary is None:
            summary = EmployeePayrollSummary(
                employee_id=payslip.employee_id,
                employee_name=employee_names.get(payslip.employee_id, UNKNOWN_EMPLOYEE),
            )
            by_employee[payslip.employee_id] = summary
        summary.add(payslip)

    employee_summaries = [by_employee[k] for k in sorted(by_employee)]
    count = len(employee_summaries)

    total_take_home = sum((s.total_take_home_pay for s in employee_summaries), ZERO)
    total_basic = sum((s.total_basic_salary for s in employee_summaries), ZERO)
    total_overtime = sum((s.total_overtime_amount for s in employee_summaries), ZERO)
    total_reimbursement = sum((s.total_reimbursement for s in employee_summaries), ZERO)

    return PayrollSummary(
        summary_totals=PayrollSummaryTotals(
            total_employees=count,
            total_payslips=len(payslips),
            total_take_home_pay=total_take_home,
            total_basic_salary=total_basic,
            total_overtime_amount=total_overtime,
            total_reimbursement_amount=total_reimbursement,
            total_attendance_days=sum(s.total_attendance_days for s in employee_summaries),
            total_overtime_hours=sum(s.total_overtime_hours for s in employee_summaries),
            average_take_home_pay=_mean(total_take_home, count),
            average_basic_salary=_mean(total_basic, count),
            average_overtime_amount=_mean(total_overtime, count),
            average_reimbursement=_mean(total_reimbursement, count),
        ),
        employee_summaries=employee_summaries,
    )


class PayslipReportService:
    """Loads persisted payslips and their source records for reporting."""

    def __init__(self, session: AsyncSession, store: RecordStore | None = None):
        self.session = session
        self.store = store or RecordStore(session)

    async def list_employee_payslips(
        self, employee_id: int, actor: Actor
    ) -> tuple[Employee, list[Payslip]]:
        """An employee and their payslips, newest first. Guard runs first."""
        ensure_access(actor, employee_id)
        employee = await self.store.employee_by_id(employee_id)
        try:
            payslips = await self.store.payslips_by_employee(employee_id)
        except SQLAlchemyError as e:
            raise FetchFailed("payslips", e) from e
        return employee, payslips

    async def detailed_payslip(self, payslip_id: int, actor: Actor) -> DetailedPayslip:
        """Line-itemized payslip; the guard runs before any breakdown read."""
        payslip = await self.store.payslip_by_id(payslip_id)
        ensure_access(actor, payslip.employee_id)

        employee = await self.store.employee_by_id(payslip.employee_id)
        employee_id = payslip.employee_id
        start, end = payslip.period_start, payslip.period_end
        try:
            attendances = await self.store.attendance_in_range(employee_id, start, end)
        except SQLAlchemyError as e:
            raise FetchFailed("attendance records", e) from e
        try:
            overtimes = await self.store.approved_overtime_in_range(
                employee_id, date_key(start), date_key(end)
            )
        except SQLAlchemyError as e:
            raise FetchFailed("overtime records", e) from e
        try:
            reimbursements = await self.store.reimbursements_for_display_in_range(
                employee_id, start, end
            )
        except SQLAlchemyError as e:
            raise FetchFailed("reimbursement records", e) from e

        return build_detailed_payslip(payslip, employee, attendances, overtimes, reimbursements)

    async def payroll_summary(self, period_start: date, period_end: date) -> PayrollSummary:
        """Summary over every payslip whose period lies within the bounds."""
        try:
            payslips = await self.store.payslips_by_period(period_start, period_end)
        except SQLAlchemyError as e:
            raise FetchFailed("payslips", e) from e
        return await self.build_payroll_summary(payslips)

    async def build_payroll_summary(self, payslips: Sequence[Payslip]) -> PayrollSummary:
        """summarize_payslips with employee names looked up best-effort."""
        names: dict[int, str] = {}
        for employee_id in {p.employee_id for p in payslips}:
            try:
                employee = await self.store.employee_by_id(employee_id)
            except (NotFound, SQLAlchemyError) as e:
                logger.warning("Could not resolve employee %s for summary: %s", employee_id, e)
                continue
            names[employee_id] = employee.name
        return summarize_payslips(payslips, names)
