"""Payroll run and payslip reporting endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from payslip_engine.api.dependencies import CurrentActor, DbSession
from payslip_engine.api.schemas import (
    BatchRunResponse,
    DetailedPayslipResponse,
    EmployeePayslipsResponse,
    ErrorResponse,
    PayrollPeriod,
    PayrollRunRequest,
    PayrollSummaryResponse,
    PayslipResponse,
)
from payslip_engine.services.access_guard import ensure_admin
from payslip_engine.services.payroll_service import PayrollService
from payslip_engine.services.reporting import PayslipReportService

router = APIRouter(tags=["payroll"])


# ============================================================================
# Payroll runs
# ============================================================================


@router.post(
    "/payroll/run",
    response_model=BatchRunResponse,
    responses={403: {"model": ErrorResponse}},
)
async def run_payroll(
    db: DbSession,
    actor: CurrentActor,
    payload: PayrollRunRequest,
) -> BatchRunResponse:
    """Run payroll for every active employee.

    Per-employee failures are reported in ``errors``; successful payslips are
    committed regardless.
    """
    ensure_admin(actor)
    service = PayrollService(db)
    result = await service.process_all_employees(
        payload.period_start,
        payload.period_end,
        payload.basic_salary,
        payload.overtime_rate,
        actor,
    )
    await db.commit()
    return BatchRunResponse(
        payslips=[PayslipResponse.model_validate(p) for p in result.payslips],
        errors=result.errors,
        processed_count=result.processed_count,
        error_count=result.error_count,
    )


@router.post(
    "/payroll/employees/{employee_id}/run",
    response_model=PayslipResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def run_employee_payroll(
    db: DbSession,
    actor: CurrentActor,
    employee_id: Annotated[int, Path(ge=1)],
    payload: PayrollRunRequest,
) -> PayslipResponse:
    """Run payroll for a single employee."""
    ensure_admin(actor)
    service = PayrollService(db)
    payslip = await service.process_employee_payroll(
        employee_id,
        payload.period_start,
        payload.period_end,
        payload.basic_salary,
        payload.overtime_rate,
        actor,
    )
    await db.commit()
    return PayslipResponse.model_validate(payslip)


@router.post(
    "/payroll/summary",
    response_model=PayrollSummaryResponse,
    responses={403: {"model": ErrorResponse}},
)
async def payroll_summary(
    db: DbSession,
    actor: CurrentActor,
    payload: PayrollPeriod,
) -> PayrollSummaryResponse:
    """Totals and per-employee averages for payslips within the period."""
    ensure_admin(actor)
    summary = await PayslipReportService(db).payroll_summary(
        payload.period_start, payload.period_end
    )
    return PayrollSummaryResponse.model_validate(summary)


# ============================================================================
# Payslips
# ============================================================================


@router.get(
    "/employees/{employee_id}/payslips",
    response_model=EmployeePayslipsResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def list_employee_payslips(
    db: DbSession,
    actor: CurrentActor,
    employee_id: Annotated[int, Path(ge=1)],
) -> EmployeePayslipsResponse:
    """List an employee's payslips, newest first."""
    employee, payslips = await PayslipReportService(db).list_employee_payslips(
        employee_id, actor
    )
    return EmployeePayslipsResponse(
        employee_id=employee.employee_id,
        employee_name=employee.name,
        payslips=[PayslipResponse.model_validate(p) for p in payslips],
    )


@router.get(
    "/payslips/{payslip_id}",
    response_model=DetailedPayslipResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_payslip(
    db: DbSession,
    actor: CurrentActor,
    payslip_id: Annotated[int, Path(ge=1)],
) -> DetailedPayslipResponse:
    """Line-itemized payslip."""
    detail = await PayslipReportService(db).detailed_payslip(payslip_id, actor)
    return DetailedPayslipResponse.model_validate(detail)
