"""Attendance, overtime and reimbursement endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, status

from payslip_engine.api.dependencies import CurrentActor, DbSession, SettingsDep
from payslip_engine.api.schemas import (
    AttendanceRequest,
    AttendanceResponse,
    ErrorResponse,
    OvertimeCreate,
    OvertimeResponse,
    ReimbursementCreate,
    ReimbursementResponse,
)
from payslip_engine.services.attendance_service import AttendanceService
from payslip_engine.services.request_service import RequestService

router = APIRouter(tags=["requests"])

_errors = {400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


# ============================================================================
# Attendance
# ============================================================================


@router.post(
    "/attendance/check-in",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors,
)
async def check_in(
    db: DbSession,
    actor: CurrentActor,
    payload: AttendanceRequest,
) -> AttendanceResponse:
    employee_id = payload.employee_id or actor.actor_id
    record = await AttendanceService(db).check_in(employee_id, actor)
    await db.commit()
    return AttendanceResponse.model_validate(record)


@router.post(
    "/attendance/check-out",
    response_model=AttendanceResponse,
    responses=_errors,
)
async def check_out(
    db: DbSession,
    actor: CurrentActor,
    payload: AttendanceRequest,
) -> AttendanceResponse:
    employee_id = payload.employee_id or actor.actor_id
    record = await AttendanceService(db).check_out(employee_id, actor)
    await db.commit()
    return AttendanceResponse.model_validate(record)


# ============================================================================
# Overtime
# ============================================================================


@router.post(
    "/overtime",
    response_model=OvertimeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors,
)
async def create_overtime(
    db: DbSession,
    actor: CurrentActor,
    settings: SettingsDep,
    payload: OvertimeCreate,
) -> OvertimeResponse:
    """File today's overtime for the caller, or on their behalf as admin."""
    service = RequestService(db, max_overtime_hours=settings.max_overtime_hours)
    overtime = await service.create_overtime(
        payload.employee_id or actor.actor_id,
        payload.hours,
        payload.reason,
        actor,
    )
    await db.commit()
    return OvertimeResponse.model_validate(overtime)


@router.post("/overtime/{overtime_id}/approve", response_model=OvertimeResponse, responses=_errors)
async def approve_overtime(
    db: DbSession,
    actor: CurrentActor,
    overtime_id: Annotated[int, Path(ge=1)],
) -> OvertimeResponse:
    overtime = await RequestService(db).approve_overtime(overtime_id, actor)
    await db.commit()
    return OvertimeResponse.model_validate(overtime)


@router.post("/overtime/{overtime_id}/reject", response_model=OvertimeResponse, responses=_errors)
async def reject_overtime(
    db: DbSession,
    actor: CurrentActor,
    overtime_id: Annotated[int, Path(ge=1)],
) -> OvertimeResponse:
    overtime = await RequestService(db).reject_overtime(overtime_id, actor)
    await db.commit()
    return OvertimeResponse.model_validate(overtime)


# ============================================================================
# Reimbursements
# ============================================================================


@router.post(
    "/reimbursements",
    response_model=ReimbursementResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors,
)
async def create_reimbursement(
    db: DbSession,
    actor: CurrentActor,
    payload: ReimbursementCreate,
) -> ReimbursementResponse:
    """File today's reimbursement for the caller, or on their behalf as admin."""
    reimbursement = await RequestService(db).create_reimbursement(
        payload.employee_id or actor.actor_id,
        payload.amount,
        payload.reason,
        actor,
        category=payload.category,
    )
    await db.commit()
    return ReimbursementResponse.model_validate(reimbursement)


@router.post(
    "/reimbursements/{reimbursement_id}/approve",
    response_model=ReimbursementResponse,
    responses=_errors,
)
async def approve_reimbursement(
    db: DbSession,
    actor: CurrentActor,
    reimbursement_id: Annotated[int, Path(ge=1)],
) -> ReimbursementResponse:
    reimbursement = await RequestService(db).approve_reimbursement(reimbursement_id, actor)
    await db.commit()
    return ReimbursementResponse.model_validate(reimbursement)


@router.post(
    "/reimbursements/{reimbursement_id}/reject",
    response_model=ReimbursementResponse,
    responses=_errors,
)
async def reject_reimbursement(
    db: DbSession,
    actor: CurrentActor,
    reimbursement_id: Annotated[int, Path(ge=1)],
) -> ReimbursementResponse:
    reimbursement = await RequestService(db).reject_reimbursement(reimbursement_id, actor)
    await db.commit()
    return ReimbursementResponse.model_validate(reimbursement)


@router.post(
    "/reimbursements/{reimbursement_id}/pay",
    response_model=ReimbursementResponse,
    responses=_errors,
)
async def pay_reimbursement(
    db: DbSession,
    actor: CurrentActor,
    reimbursement_id: Annotated[int, Path(ge=1)],
) -> ReimbursementResponse:
    reimbursement = await RequestService(db).mark_reimbursement_paid(reimbursement_id, actor)
    await db.commit()
    return ReimbursementResponse.model_validate(reimbursement)
