"""Business services.

Each service wraps one caller-owned AsyncSession; the caller decides the
transaction boundary.
"""

from hrms_core.services.attendance_service import (
    AttendanceRecordData,
    AttendanceReport,
    AttendanceService,
    AttendanceUpdate,
)
from hrms_core.services.bank_account_service import BankAccountData, BankAccountService
from hrms_core.services.compliance_evaluator import (
    ComplianceEvaluator,
    DefaultComplianceEvaluator,
    EvaluationResult,
)
from hrms_core.services.compliance_service import (
    ComplianceReport,
    ComplianceRuleData,
    ComplianceService,
    ComplianceSummary,
    ComplianceViolation,
)
from hrms_core.services.department_service import (
    DepartmentData,
    DepartmentNode,
    DepartmentService,
)
from hrms_core.services.employee_service import (
    EmployeeData,
    EmployeeService,
    EmployeeStatistics,
)
from hrms_core.services.holiday_service import (
    HolidayCalendar,
    HolidayData,
    HolidayService,
    HolidayStatistics,
)
from hrms_core.services.leave_service import LeaveRequestData, LeaveService, LeaveTypeData
from hrms_core.services.location_service import LocationData, LocationService
from hrms_core.services.notification_service import NotificationService
from hrms_core.services.organization_service import (
    OrganizationData,
    OrganizationService,
    OrganizationStatistics,
)
from hrms_core.services.payroll_calculator import PayslipCalculation, PayslipCalculator
from hrms_core.services.payroll_service import PayrollRunData, PayrollService
from hrms_core.services.permission_service import PermissionService, PermissionStatistics
from hrms_core.services.role_service import RoleService, RoleStatistics
from hrms_core.services.state_machine import (
    ComplianceCheckStateMachine,
    LeaveRequestStateMachine,
    PayrollRunStateMachine,
)
from hrms_core.services.user_service import UserData, UserService

__all__ = [
    # Organization structure
    "OrganizationService",
    "OrganizationData",
    "OrganizationStatistics",
    "LocationService",
    "LocationData",
    "DepartmentService",
    "DepartmentData",
    "DepartmentNode",
    # People
    "EmployeeService",
    "EmployeeData",
    "EmployeeStatistics",
    "BankAccountService",
    "BankAccountData",
    # Access control
    "UserService",
    "UserData",
    "RoleService",
    "RoleStatistics",
    "PermissionService",
    "PermissionStatistics",
    # Compliance
    "ComplianceService",
    "ComplianceRuleData",
    "ComplianceReport",
    "ComplianceSummary",
    "ComplianceViolation",
    "ComplianceEvaluator",
    "DefaultComplianceEvaluator",
    "EvaluationResult",
    # Leave
    "LeaveService",
    "LeaveTypeData",
    "LeaveRequestData",
    # Attendance
    "AttendanceService",
    "AttendanceRecordData",
    "AttendanceUpdate",
    "AttendanceReport",
    "HolidayService",
    "HolidayData",
    "HolidayCalendar",
    "HolidayStatistics",
    # Payroll
    "PayrollService",
    "PayrollRunData",
    "PayslipCalculator",
    "PayslipCalculation",
    # Notifications
    "NotificationService",
    # State machines
    "PayrollRunStateMachine",
    "LeaveRequestStateMachine",
    "ComplianceCheckStateMachine",
]
