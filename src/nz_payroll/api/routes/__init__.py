"""API routes."""

from nz_payroll.api.routes.calculations import router as calculations_router
from nz_payroll.api.routes.health import router as health_router
from nz_payroll.api.routes.leave import router as leave_router
from nz_payroll.api.routes.pay_runs import router as pay_runs_router

__all__ = ["calculations_router", "health_router", "leave_router", "pay_runs_router"]
