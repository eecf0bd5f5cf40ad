"""Administrative employee maintenance."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.exceptions import ValidationError
from payslip_engine.models import Employee, Role
from payslip_engine.services.access_guard import Actor, ensure_admin
from payslip_engine.services.audited_mutator import AuditedMutator
from payslip_engine.services.record_store import RecordStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "role", "active"})


def _parse_role(value: Any) -> str:
    role = Role.parse(value)
    if role is None:
        raise ValidationError(f"unknown role '{value}'")
    return role.value


class EmployeeService:
    """Admin-only create, update and soft delete of employees."""

    def __init__(self, session: AsyncSession, store: RecordStore | None = None):
        self.session = session
        self.store = store or RecordStore(session)

    async def create_employee(
        self,
        name: str,
        actor: Actor,
        role: str | Role = Role.EMPLOYEE,
        active: bool = True,
        password_hash: str = "",
    ) -> Employee:
        ensure_admin(actor)
        employee = Employee(
            name=name,
            role=_parse_role(role),
            active=active,
            password_hash=password_hash,
        )
        await AuditedMutator(self.session, actor.actor_id).create(employee)
        logger.info("Employee %s created by %s", employee.employee_id, actor.actor_id)
        return employee

    async def update_employee(
        self, employee_id: int, values: Mapping[str, Any], actor: Actor
    ) -> Employee:
        """Partial update of name/role/active; unknown keys are rejected."""
        ensure_admin(actor)
        unknown = set(values) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"cannot update fields: {', '.join(sorted(unknown))}")

        values = dict(values)
        if "role" in values:
            values["role"] = _parse_role(values["role"])

        employee = await self.store.employee_by_id(employee_id)
        if values:
            await AuditedMutator(self.session, actor.actor_id).update(
                Employee,
                values,
                Employee.employee_id == employee_id,
                Employee.deleted_at.is_(None),
            )
            await self.session.refresh(employee)
        return employee

    async def delete_employee(self, employee_id: int, actor: Actor) -> None:
        """Soft delete; deleted_by records the acting admin."""
        ensure_admin(actor)
        await self.store.employee_by_id(employee_id)
        await AuditedMutator(self.session, actor.actor_id).delete(
            Employee, Employee.employee_id == employee_id
        )
        logger.info("Employee %s deleted by %s", employee_id, actor.actor_id)
