"""ORM models."""

from payslip_engine.models.attendance import AttendanceRecord, AttendanceStatus
from payslip_engine.models.base import Auditable, AuditMixin, Base, TimestampMixin
from payslip_engine.models.employee import Employee, Role
from payslip_engine.models.payroll import Payslip, PayslipStatus
from payslip_engine.models.requests import (
    OvertimeRequest,
    OvertimeStatus,
    ReimbursementCategory,
    ReimbursementRequest,
    ReimbursementStatus,
)

__all__ = [
    "Auditable",
    "AuditMixin",
    "AttendanceRecord",
    "AttendanceStatus",
    "Base",
    "Employee",
    "OvertimeRequest",
    "OvertimeStatus",
    "Payslip",
    "PayslipStatus",
    "ReimbursementCategory",
    "ReimbursementRequest",
    "ReimbursementStatus",
    "Role",
    "TimestampMixin",
]
