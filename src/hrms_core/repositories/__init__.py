"""Repositories: declarative data access, one class per entity."""

from hrms_core.repositories.access import (
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    UserRepository,
    UserRoleRepository,
)
from hrms_core.repositories.attendance import AttendanceRecordRepository, HolidayRepository
from hrms_core.repositories.base import Page, PageRequest, Repository
from hrms_core.repositories.compliance import (
    ComplianceCheckRepository,
    ComplianceJurisdictionRepository,
    ComplianceRuleRepository,
)
from hrms_core.repositories.employee import EmployeeBankAccountRepository, EmployeeRepository
from hrms_core.repositories.leave import (
    LeaveBalanceRepository,
    LeaveRequestRepository,
    LeaveTypeRepository,
)
from hrms_core.repositories.notification import SystemNotificationRepository
from hrms_core.repositories.organization import (
    DepartmentRepository,
    LocationRepository,
    OrganizationRepository,
)
from hrms_core.repositories.payroll import (
    PayrollItemRepository,
    PayrollRunRepository,
    PayslipRepository,
)

__all__ = [
    "Page",
    "PageRequest",
    "Repository",
    "OrganizationRepository",
    "LocationRepository",
    "DepartmentRepository",
    "EmployeeRepository",
    "EmployeeBankAccountRepository",
    "UserRepository",
    "RoleRepository",
    "PermissionRepository",
    "RolePermissionRepository",
    "UserRoleRepository",
    "ComplianceJurisdictionRepository",
    "ComplianceRuleRepository",
    "ComplianceCheckRepository",
    "LeaveTypeRepository",
    "LeaveBalanceRepository",
    "LeaveRequestRepository",
    "AttendanceRecordRepository",
    "HolidayRepository",
    "PayrollRunRepository",
    "PayslipRepository",
    "PayrollItemRepository",
    "SystemNotificationRepository",
]
