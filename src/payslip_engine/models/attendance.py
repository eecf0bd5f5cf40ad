"""Attendance (check-in/check-out) model."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from payslip_engine.models.base import AuditMixin, Base, TimestampMixin, as_utc


class AttendanceStatus(str, Enum):
    """Attendance status values."""

    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"
    HOLIDAY = "holiday"


class AttendanceRecord(Base, TimestampMixin, AuditMixin):
    """One attendance record per employee per work date.

    hours_worked is derived from check_in/check_out, never taken from input.
    """

    __tablename__ = "attendance"

    attendance_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    check_in: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    check_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    hours_worked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AttendanceStatus.PRESENT.value
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", name="attendance_one_per_day"),
        CheckConstraint(
            "status IN ('present', 'absent', 'leave', 'holiday')",
            name="attendance_status_check",
        ),
        CheckConstraint(
            "hours_worked >= 0 AND hours_worked <= 24",
            name="attendance_hours_check",
        ),
    )

    def calculate_hours(self) -> int:
        """Derive whole hours worked; 0 until a later check-out exists."""
        self.hours_worked = 0
        if self.check_out is not None:
            check_in, check_out = as_utc(self.check_in), as_utc(self.check_out)
            if check_out > check_in:
                self.hours_worked = int((check_out - check_in).total_seconds() // 3600)
        return self.hours_worked
