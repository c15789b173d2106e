"""ORM models."""

from hrms_core.models.access import Permission, Role, RolePermission, User, UserRole
from hrms_core.models.attendance import AttendanceRecord, Holiday
from hrms_core.models.base import Base, TimestampMixin
from hrms_core.models.compliance import ComplianceCheck, ComplianceJurisdiction, ComplianceRule
from hrms_core.models.employee import Employee, EmployeeBankAccount
from hrms_core.models.leave import LeaveBalance, LeaveRequest, LeaveType
from hrms_core.models.notification import SystemNotification
from hrms_core.models.organization import Department, Location, Organization
from hrms_core.models.payroll import PayrollItem, PayrollRun, Payslip

__all__ = [
    "Base",
    "TimestampMixin",
    "Organization",
    "Location",
    "Department",
    "User",
    "Role",
    "Permission",
    "RolePermission",
    "UserRole",
    "Employee",
    "EmployeeBankAccount",
    "ComplianceJurisdiction",
    "ComplianceRule",
    "ComplianceCheck",
    "LeaveType",
    "LeaveBalance",
    "LeaveRequest",
    "AttendanceRecord",
    "Holiday",
    "PayrollRun",
    "Payslip",
    "PayrollItem",
    "SystemNotification",
]
