"""Overtime and reimbursement request models."""

from __future__ import annotations

from datetime import date, datetime, timezone
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
)
from sqlalchemy.orm import Mapped, mapped_column

from payslip_engine.models.base import AuditMixin, Base, TimestampMixin


class OvertimeStatus(str, Enum):
    """Overtime request status values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReimbursementStatus(str, Enum):
    """Reimbursement request status values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class ReimbursementCategory(str, Enum):
    """Reimbursement categories."""

    TRAVEL = "travel"
    MEALS = "meals"
    EQUIPMENT = "equipment"
    TRAINING = "training"
    MEDICAL = "medical"
    OTHER = "other"


class OvertimeRequest(Base, TimestampMixin, AuditMixin):
    """Overtime claim for a single day.

    overtime_date is stored as a YYYY-MM-DD string; range queries compare it
    lexicographically.
    """

    __tablename__ = "overtime_request"

    overtime_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    overtime_date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    hours: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OvertimeStatus.PENDING.value
    )
    approved_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("employee.employee_id"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("hours >= 1 AND hours <= 12", name="overtime_hours_check"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="overtime_status_check",
        ),
    )

    def approve(self, approver_id: int) -> None:
        self.status = OvertimeStatus.APPROVED.value
        self.approved_by = approver_id
        self.approved_at = datetime.now(timezone.utc)

    def reject(self, approver_id: int) -> None:
        self.status = OvertimeStatus.REJECTED.value
        self.approved_by = approver_id
        self.approved_at = datetime.now(timezone.utc)


class ReimbursementRequest(Base, TimestampMixin, AuditMixin):
    """Reimbursement claim."""

    __tablename__ = "reimbursement_request"

    reimbursement_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reimbursement_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    category: Mapped[str] = mapped_column(
        String(50), nullable=False, default=ReimbursementCategory.OTHER.value
    )
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ReimbursementStatus.PENDING.value
    )
    approved_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("employee.employee_id"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="reimbursement_amount_positive"),
        CheckConstraint(
            "category IN ('travel', 'meals', 'equipment', 'training', 'medical', 'other')",
            name="reimbursement_category_check",
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'paid')",
            name="reimbursement_status_check",
        ),
    )

    def approve(self, approver_id: int) -> None:
        self.status = ReimbursementStatus.APPROVED.value
        self.approved_by = approver_id
        self.approved_at = datetime.now(timezone.utc)

    def reject(self, approver_id: int) -> None:
        self.status = ReimbursementStatus.REJECTED.value
        self.approved_by = approver_id
        self.approved_at = datetime.now(timezone.utc)

    def mark_as_paid(self) -> None:
        self.status = ReimbursementStatus.PAID.value
