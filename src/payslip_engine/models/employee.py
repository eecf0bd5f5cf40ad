"""Employee model."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from payslip_engine.models.base import AuditMixin, Base, TimestampMixin


class Role(str, Enum):
    """Employee roles used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"

    @classmethod
    def parse(cls, value: str | Role | None) -> Role | None:
        """Coerce a raw role string, returning None for anything unknown."""
        if isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Employee(Base, TimestampMixin, AuditMixin):
    """Employee record."""

    __tablename__ = "employee"

    employee_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default=Role.EMPLOYEE.value)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Opaque to the engine; hashing and login live elsewhere.
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'employee')", name="employee_role_check"),
    )
