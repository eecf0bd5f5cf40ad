"""Role-scoped ownership check for employee payroll data."""

from __future__ import annotations

from dataclasses import dataclass

from payslip_engine.exceptions import Forbidden
from payslip_engine.models.employee import Role


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing a request.

    actor_id None means system/unauthenticated.
    """

    actor_id: int | None
    role: Role | None

    @classmethod
    def system(cls) -> Actor:
        return cls(actor_id=None, role=None)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def can_access(
    actor_role: Role | str | None,
    actor_id: int | None,
    target_employee_id: int,
) -> bool:
    """Decide whether an actor may read/write a target employee's records.

    - admin: always
    - employee: only their own records
    - anything else, or no actor id: never
    """
    role = Role.parse(actor_role)
    if role is Role.ADMIN:
        return True
    if role is Role.EMPLOYEE:
        return bool(actor_id) and actor_id == target_employee_id
    return False


def ensure_access(actor: Actor, target_employee_id: int) -> None:
    """Raise Forbidden unless ``actor`` may touch ``target_employee_id``'s data."""
    if not can_access(actor.role, actor.actor_id, target_employee_id):
        raise Forbidden("Access denied. You can only access your own payslips.")


def ensure_admin(actor: Actor) -> None:
    """Raise Forbidden unless ``actor`` is an administrator."""
    if not actor.is_admin:
        raise Forbidden("Administrator role required")
