"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str
    code: str | None = None


# ============================================================================
# Payroll runs
# ============================================================================


class PayrollPeriod(BaseModel):
    """Inclusive pay period."""

    period_start: date
    period_end: date

    @model_validator(mode="after")
    def check_period(self) -> "PayrollPeriod":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self


class PayrollRunRequest(PayrollPeriod):
    """Schema for running payroll over a period."""

    basic_salary: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    overtime_rate: Decimal = Field(ge=0, max_digits=10, decimal_places=4)


class PayslipResponse(BaseModel):
    """Schema for a persisted payslip."""

    model_config = ConfigDict(from_attributes=True)

    payslip_id: int
    employee_id: int
    period_start: date
    period_end: date
    basic_salary: Decimal
    overtime_hours: int
    overtime_amount: Decimal
    reimbursement_amount: Decimal
    total_amount: Decimal
    attendance_days: int
    processed_at: datetime
    status: str


class BatchRunResponse(BaseModel):
    """Outcome of a batch run: payslips and per-employee errors side by side."""

    payslips: list[PayslipResponse]
    errors: list[str]
    processed_count: int
    error_count: int


class EmployeePayslipsResponse(BaseModel):
    """An employee's payslips, newest first."""

    employee_id: int
    employee_name: str
    payslips: list[PayslipResponse]


# ============================================================================
# Reporting
# ============================================================================


class AttendanceDetailResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    check_in: datetime
    check_out: datetime | None = None
    hours_worked: int
    status: str


class OvertimeDetailResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str
    hours: int
    rate: Decimal
    amount: Decimal
    reason: str


class ReimbursementDetailResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    amount: Decimal
    category: str
    reason: str
    status: str


class PayslipSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    basic_salary: Decimal
    total_attendance_days: int
    total_overtime_hours: int
    overtime_amount: Decimal
    reimbursement_amount: Decimal
    total_take_home_pay: Decimal


class DetailedPayslipResponse(BaseModel):
    """Line-itemized payslip."""

    model_config = ConfigDict(from_attributes=True)

    payslip_id: int
    employee_id: int
    employee_name: str
    period_start: date
    period_end: date
    processed_at: datetime
    status: str
    summary: PayslipSummaryResponse
    attendance_breakdown: list[AttendanceDetailResponse]
    overtime_breakdown: list[OvertimeDetailResponse]
    reimbursement_breakdown: list[ReimbursementDetailResponse]


class EmployeeSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    employee_name: str
    payslip_count: int
    total_take_home_pay: Decimal
    total_basic_salary: Decimal
    total_overtime_amount: Decimal
    total_reimbursement: Decimal
    total_attendance_days: int
    total_overtime_hours: int


class SummaryTotalsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class PayrollSummaryResponse(BaseModel):
    """Period summary across employees."""

    model_config = ConfigDict(from_attributes=True)

    summary_totals: SummaryTotalsResponse
    employee_summaries: list[EmployeeSummaryResponse]


# ============================================================================
# Attendance and claims
# ============================================================================


class AttendanceRequest(BaseModel):
    """Check-in/check-out; employee_id defaults to the caller."""

    employee_id: int | None = None


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    attendance_id: int
    employee_id: int
    work_date: date
    check_in: datetime
    check_out: datetime | None = None
    hours_worked: int
    status: str


class OvertimeCreate(BaseModel):
    """Schema for filing today's overtime."""

    employee_id: int | None = None
    hours: int = Field(ge=1)
    reason: str = Field(min_length=1, max_length=255)


class OvertimeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    overtime_id: int
    employee_id: int
    overtime_date: str
    hours: int
    reason: str
    status: str
    approved_by: int | None = None
    approved_at: datetime | None = None


class ReimbursementCreate(BaseModel):
    """Schema for filing today's reimbursement."""

    employee_id: int | None = None
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    reason: str = Field(min_length=1, max_length=255)
    category: str = "other"


class ReimbursementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reimbursement_id: int
    employee_id: int
    reimbursement_date: date
    amount: Decimal
    category: str
    reason: str
    status: str
    approved_by: int | None = None
    approved_at: datetime | None = None


# ============================================================================
# Employees
# ============================================================================


class EmployeeCreate(BaseModel):
    """Schema for creating an employee. Credentials are managed elsewhere."""

    name: str = Field(min_length=1, max_length=255)
    role: str = "employee"
    active: bool = True


class EmployeeUpdate(BaseModel):
    """Partial employee update; omitted fields are left alone."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    role: str | None = None
    active: bool | None = None


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    name: str
    role: str
    active: bool
    created_by: int | None = None
    updated_by: int | None = None
