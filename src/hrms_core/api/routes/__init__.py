"""API routes."""

from hrms_core.api.routes.access import router as access_router
from hrms_core.api.routes.attendance import router as attendance_router
from hrms_core.api.routes.compliance import router as compliance_router
from hrms_core.api.routes.employees import router as employees_router
from hrms_core.api.routes.health import router as health_router
from hrms_core.api.routes.leave import router as leave_router
from hrms_core.api.routes.notifications import router as notifications_router
from hrms_core.api.routes.organizations import router as organizations_router
from hrms_core.api.routes.payroll import router as payroll_router

__all__ = [
    "access_router",
    "attendance_router",
    "compliance_router",
    "employees_router",
    "health_router",
    "leave_router",
    "notifications_router",
    "organizations_router",
    "payroll_router",
]
