"""API routes."""

from payslip_engine.api.routes.employees import router as employees_router
from payslip_engine.api.routes.health import router as health_router
from payslip_engine.api.routes.payroll import router as payroll_router
from payslip_engine.api.routes.requests import router as requests_router

__all__ = ["employees_router", "health_router", "payroll_router", "requests_router"]
