"""Employee administration endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Response, status

from payslip_engine.api.dependencies import CurrentActor, DbSession
from payslip_engine.api.schemas import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ErrorResponse,
)
from payslip_engine.services.employee_service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])

_errors = {400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors,
)
async def create_employee(
    db: DbSession,
    actor: CurrentActor,
    payload: EmployeeCreate,
) -> EmployeeResponse:
    employee = await EmployeeService(db).create_employee(
        payload.name, actor, role=payload.role, active=payload.active
    )
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.patch("/{employee_id}", response_model=EmployeeResponse, responses=_errors)
async def update_employee(
    db: DbSession,
    actor: CurrentActor,
    employee_id: Annotated[int, Path(ge=1)],
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    values = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    employee = await EmployeeService(db).update_employee(employee_id, values, actor)
    await db.commit()
    return EmployeeResponse.model_validate(employee)


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_errors,
)
async def delete_employee(
    db: DbSession,
    actor: CurrentActor,
    employee_id: Annotated[int, Path(ge=1)],
) -> Response:
    await EmployeeService(db).delete_employee(employee_id, actor)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
