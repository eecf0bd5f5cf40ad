"""Payslip aggregation arithmetic.

Pure functions over already-fetched records. The record store filters by
status and date already; the predicates are re-applied here so totals never
include ineligible records whatever the store returns.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from payslip_engine.models import (
    OvertimeRequest,
    OvertimeStatus,
    ReimbursementRequest,
    ReimbursementStatus,
)

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Convert ints/floats/strings to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents), half up."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def date_key(value: date) -> str:
    """YYYY-MM-DD form used by overtime_date."""
    return value.strftime("%Y-%m-%d")


@dataclass(frozen=True)
class PayslipTotals:
    """Computed figures for one employee and one period."""

    basic_salary: Decimal
    attendance_days: int
    overtime_hours: int
    overtime_amount: Decimal
    reimbursement_amount: Decimal
    total_amount: Decimal


def eligible_overtime(
    overtimes: Iterable[OvertimeRequest], period_start: date, period_end: date
) -> list[OvertimeRequest]:
    start, end = date_key(period_start), date_key(period_end)
    return [
        o
        for o in overtimes
        if o.status == OvertimeStatus.APPROVED.value and start <= o.overtime_date <= end
    ]


def eligible_reimbursements(
    reimbursements: Iterable[ReimbursementRequest], period_start: date, period_end: date
) -> list[ReimbursementRequest]:
    return [
        r
        for r in reimbursements
        if r.status == ReimbursementStatus.APPROVED.value
        and period_start <= r.reimbursement_date <= period_end
    ]


def sum_overtime_hours(
    overtimes: Iterable[OvertimeRequest], period_start: date, period_end: date
) -> int:
    """Total hours of approved overtime in [period_start, period_end]."""
    return sum(o.hours for o in eligible_overtime(overtimes, period_start, period_end))


def sum_reimbursements(
    reimbursements: Iterable[ReimbursementRequest], period_start: date, period_end: date
) -> Decimal:
    """Total amount of approved reimbursements in [period_start, period_end]."""
    return sum(
        (to_decimal(r.amount) for r in eligible_reimbursements(reimbursements, period_start, period_end)),
        ZERO,
    )


def aggregate_payslip(
    *,
    attendances: Sequence[Any],
    overtimes: Iterable[OvertimeRequest],
    reimbursements: Iterable[ReimbursementRequest],
    period_start: date,
    period_end: date,
    basic_salary: Decimal,
    overtime_rate: Decimal,
) -> PayslipTotals:
    """Turn raw period records into payslip totals.

    attendance_days counts records; partial vs full days is attendance's
    concern. Overtime pay is hours * rate rounded to cents, and the total is
    the exact sum of the three stored components.
    """
    basic_salary = to_decimal(basic_salary)
    overtime_hours = sum_overtime_hours(overtimes, period_start, period_end)
    overtime_amount = round_to_cents(Decimal(overtime_hours) * to_decimal(overtime_rate))
    reimbursement_amount = sum_reimbursements(reimbursements, period_start, period_end)

    return PayslipTotals(
        basic_salary=basic_salary,
        attendance_days=len(attendances),
        overtime_hours=overtime_hours,
        overtime_amount=overtime_amount,
        reimbursement_amount=reimbursement_amount,
        total_amount=basic_salary + overtime_amount + reimbursement_amount,
    )
