"""Tests for the role-scoped access guard."""

import pytest

from payslip_engine.exceptions import Forbidden
from payslip_engine.models import Role
from payslip_engine.services.access_guard import (
    Actor,
    can_access,
    ensure_access,
    ensure_admin,
)


class TestCanAccess:
    """Test the access decision table."""

    def test_admin_always_allowed(self):
        assert can_access("admin", 1, 99) is True
        assert can_access(Role.ADMIN, None, 99) is True

    def test_employee_own_records(self):
        assert can_access("employee", 5, 5) is True

    def test_employee_other_records(self):
        assert can_access("employee", 5, 6) is False

    def test_missing_role_or_id(self):
        assert can_access("", 0, 5) is False
        assert can_access(None, 5, 5) is False
        assert can_access("employee", 0, 0) is False
        assert can_access("employee", None, 5) is False

    def test_unknown_role(self):
        assert can_access("manager", 5, 5) is False


class TestEnsure:
    """Test the raising helpers."""

    def test_ensure_access_denied_message(self):
        with pytest.raises(Forbidden) as exc_info:
            ensure_access(Actor(actor_id=5, role=Role.EMPLOYEE), 6)

        assert "only access your own payslips" in str(exc_info.value)

    def test_ensure_access_allowed(self):
        ensure_access(Actor(actor_id=5, role=Role.EMPLOYEE), 5)

    def test_ensure_admin(self):
        ensure_admin(Actor(actor_id=1, role=Role.ADMIN))
        with pytest.raises(Forbidden):
            ensure_admin(Actor(actor_id=5, role=Role.EMPLOYEE))
        with pytest.raises(Forbidden):
            ensure_admin(Actor.system())
