"""Payslip model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from payslip_engine.models.base import AuditMixin, Base, TimestampMixin


class PayslipStatus(str, Enum):
    """Payslip status values."""

    PROCESSED = "processed"
    PAID = "paid"


class Payslip(Base, TimestampMixin, AuditMixin):
    """Immutable computed-pay snapshot for one employee and one pay period.

    total_amount == basic_salary + overtime_amount + reimbursement_amount.
    """

    __tablename__ = "payslip"

    payslip_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    basic_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    overtime_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overtime_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    reimbursement_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    attendance_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PayslipStatus.PROCESSED.value
    )

    __table_args__ = (
        UniqueConstraint(
            "employee_id",
            "period_start",
            "period_end",
            name="payslip_one_per_employee_period",
        ),
        CheckConstraint("period_end >= period_start", name="payslip_period_check"),
        CheckConstraint(
            "status IN ('processed', 'paid')",
            name="payslip_status_check",
        ),
    )
