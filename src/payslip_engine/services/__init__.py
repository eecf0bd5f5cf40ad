"""Payslip engine services."""

from payslip_engine.services.access_guard import Actor, can_access, ensure_access, ensure_admin
from payslip_engine.services.attendance_service import AttendanceService
from payslip_engine.services.audited_mutator import AuditedMutator
from payslip_engine.services.employee_service import EmployeeService
from payslip_engine.services.locking_service import PayrollLockRegistry, payroll_locks
from payslip_engine.services.payroll_service import BatchResult, EmployeeFailure, PayrollService
from payslip_engine.services.record_store import RecordStore
from payslip_engine.services.reporting import (
    DetailedPayslip,
    PayrollSummary,
    PayslipReportService,
    build_detailed_payslip,
    summarize_payslips,
)
from payslip_engine.services.request_service import InvalidRequestTransition, RequestService

__all__ = [
    "Actor",
    "AttendanceService",
    "AuditedMutator",
    "BatchResult",
    "DetailedPayslip",
    "EmployeeFailure",
    "EmployeeService",
    "InvalidRequestTransition",
    "PayrollLockRegistry",
    "PayrollService",
    "PayrollSummary",
    "PayslipReportService",
    "RecordStore",
    "RequestService",
    "build_detailed_payslip",
    "can_access",
    "ensure_access",
    "ensure_admin",
    "payroll_locks",
    "summarize_payslips",
]
