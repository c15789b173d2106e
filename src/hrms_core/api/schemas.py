"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from hrms_core.repositories import Page

T = TypeVar("T", bound=BaseModel)


# ============================================================================
# Common schemas
# ============================================================================


class ORMModel(BaseModel):
    """Base for responses read from ORM entities."""

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Error payload for domain errors."""

    detail: str
    code: str


class PageResponse(BaseModel, Generic[T]):
    """One page of a listing."""

    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page, schema: type[T]) -> PageResponse[T]:
        return PageResponse[schema](  # type: ignore[valid-type]
            items=[schema.model_validate(item) for item in page.items],
            total=page.total,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )


class CountResponse(BaseModel):
    count: int


# ============================================================================
# Organization structure
# ============================================================================


class OrganizationCreate(BaseModel):
    name: str
    legal_name: str | None = None
    tax_id: str | None = None
    industry: str | None = None
    company_size: str | None = None
    website: str | None = None
    headquarters_country: str | None = None
    subscription_tier: str | None = None


class OrganizationResponse(ORMModel):
    organization_id: UUID
    name: str
    legal_name: str | None = None
    tax_id: str | None = None
    industry: str | None = None
    company_size: str | None = None
    website: str | None = None
    headquarters_country: str | None = None
    subscription_tier: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class OrganizationStatisticsResponse(ORMModel):
    total_organizations: int
    active_organizations: int
    small_companies: int
    medium_companies: int
    large_companies: int
    enterprise_companies: int


class LocationCreate(BaseModel):
    organization_id: UUID
    name: str
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state_province: str | None = None
    postal_code: str | None = None
    country: str | None = None
    timezone: str | None = None
    is_headquarters: bool = False


class LocationResponse(ORMModel):
    location_id: UUID
    organization_id: UUID
    name: str
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state_province: str | None = None
    postal_code: str | None = None
    country: str | None = None
    timezone: str | None = None
    is_headquarters: bool
    is_active: bool


class DepartmentCreate(BaseModel):
    organization_id: UUID
    name: str
    code: str | None = None
    description: str | None = None
    parent_department_id: UUID | None = None
    manager_id: UUID | None = None
    location_id: UUID | None = None
    cost_center: str | None = None


class DepartmentResponse(ORMModel):
    department_id: UUID
    organization_id: UUID
    parent_department_id: UUID | None = None
    manager_id: UUID | None = None
    location_id: UUID | None = None
    name: str
    code: str | None = None
    description: str | None = None
    cost_center: str | None = None
    is_active: bool


class DepartmentNodeResponse(ORMModel):
    """A department with its sub-departments, recursively."""

    department_id: UUID
    name: str
    code: str | None = None
    description: str | None = None
    cost_center: str | None = None
    manager_id: UUID | None = None
    manager_name: str | None = None
    children: list[DepartmentNodeResponse] = Field(default_factory=list)


# ============================================================================
# Employees
# ============================================================================


class EmployeeCreate(BaseModel):
    organization_id: UUID
    employee_number: str
    first_name: str
    last_name: str
    middle_name: str | None = None
    work_email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    department_id: UUID | None = None
    location_id: UUID | None = None
    manager_id: UUID | None = None
    user_id: UUID | None = None
    job_title: str | None = None
    employment_status: str = "ACTIVE"
    employment_type: str = "FULL_TIME"
    hire_date: date | None = None
    probation_end_date: date | None = None
    salary_amount: Decimal | None = None
    salary_currency: str = "USD"
    hourly_rate: Decimal | None = None


class EmployeeResponse(ORMModel):
    employee_id: UUID
    organization_id: UUID
    user_id: UUID | None = None
    department_id: UUID | None = None
    location_id: UUID | None = None
    manager_id: UUID | None = None
    employee_number: str
    first_name: str
    middle_name: str | None = None
    last_name: str
    full_name: str
    work_email: str | None = None
    phone: str | None = None
    job_title: str | None = None
    employment_status: str
    employment_type: str
    hire_date: date | None = None
    probation_end_date: date | None = None
    confirmation_date: date | None = None
    termination_date: date | None = None
    termination_reason: str | None = None
    salary_amount: Decimal | None = None
    salary_currency: str
    hourly_rate: Decimal | None = None


class EmployeeStatisticsResponse(ORMModel):
    total_employees: int
    active_employees: int
    terminated_employees: int
    on_probation: int
    full_time_employees: int
    part_time_employees: int
    contract_employees: int


class TerminationRequest(BaseModel):
    termination_date: date
    reason: str | None = None


class ConfirmationRequest(BaseModel):
    confirmation_date: date


class BankAccountCreate(BaseModel):
    bank_name: str
    account_number: str
    account_type: str = "SALARY"
    ifsc_code: str | None = None
    branch_name: str | None = None
    is_primary: bool = False


class BankAccountResponse(ORMModel):
    """Bank account with the account number masked."""

    bank_account_id: UUID
    employee_id: UUID
    bank_name: str
    masked_account_number: str
    ifsc_code: str | None = None
    branch_name: str | None = None
    account_type: str
    is_primary: bool
    is_active: bool


# ============================================================================
# Access control
# ============================================================================


class UserCreate(BaseModel):
    organization_id: UUID
    username: str
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None


class UserUpdate(BaseModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class UserResponse(ORMModel):
    user_id: UUID
    organization_id: UUID
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool
    is_locked: bool
    last_login_at: datetime | None = None


class Credentials(BaseModel):
    username: str
    password: str


class RoleCreate(BaseModel):
    name: str
    description: str | None = None


class RoleResponse(ORMModel):
    role_id: UUID
    organization_id: UUID
    name: str
    description: str | None = None
    is_system_role: bool


class RoleStatisticsResponse(ORMModel):
    total_roles: int
    system_roles: int
    custom_roles: int


class RoleAssignment(BaseModel):
    role_id: UUID


class PermissionAssignment(BaseModel):
    permission_id: UUID


class PermissionCreate(BaseModel):
    name: str
    resource: str | None = None
    action: str | None = None
    description: str | None = None
    category: str | None = None
    is_system_permission: bool = False


class PermissionResponse(ORMModel):
    permission_id: UUID
    name: str
    code: str | None = None
    category: str | None = None
    resource: str | None = None
    action: str | None = None
    description: str | None = None
    is_system_permission: bool


class PermissionStatisticsResponse(ORMModel):
    total_permissions: int
    system_permissions: int
    custom_permissions: int


# ============================================================================
# Compliance
# ============================================================================


class JurisdictionCreate(BaseModel):
    name: str
    code: str
    jurisdiction_type: str = "COUNTRY"
    country_code: str | None = None
    description: str | None = None


class JurisdictionResponse(ORMModel):
    jurisdiction_id: UUID
    name: str
    code: str
    jurisdiction_type: str
    country_code: str | None = None
    description: str | None = None
    is_active: bool


class ComplianceRuleCreate(BaseModel):
    name: str
    rule_code: str
    jurisdiction_id: UUID | None = None
    effective_date: date | None = None
    organization_id: UUID | None = None
    description: str | None = None
    category: str | None = None
    rule_type: str | None = None
    severity: str = "MEDIUM"
    expiration_date: date | None = None
    rule_text: str | None = None
    compliance_criteria: str | None = None
    violation_consequences: str | None = None
    remediation_steps: str | None = None
    check_frequency_days: int | None = None
    auto_check_enabled: bool = False
    check_query: str | None = None
    reference_url: str | None = None
    legal_reference: str | None = None
    notes: str | None = None
    is_mandatory: bool = True


class ComplianceRuleResponse(ORMModel):
    rule_id: UUID
    jurisdiction_id: UUID
    organization_id: UUID | None = None
    rule_code: str
    name: str
    description: str | None = None
    category: str | None = None
    rule_type: str | None = None
    severity: str
    effective_date: date
    expiration_date: date | None = None
    check_frequency_days: int | None = None
    auto_check_enabled: bool
    check_query: str | None = None
    is_active: bool
    is_mandatory: bool


class CheckRequest(BaseModel):
    organization_id: UUID
    employee_id: UUID | None = None


class ComplianceCheckResponse(ORMModel):
    check_id: UUID
    organization_id: UUID
    rule_id: UUID
    employee_id: UUID | None = None
    check_date: date
    check_type: str
    checked_by: str | None = None
    check_results: str | None = None
    status: str
    compliance_score: Decimal | None = None
    findings: str | None = None
    violations: str | None = None
    recommendations: str | None = None
    remediation_due_date: date | None = None
    next_check_date: date | None = None
    is_resolved: bool
    resolved_at: datetime | None = None
    resolved_by_id: UUID | None = None
    resolution_notes: str | None = None
    alert_sent: bool
    remediation_completed_at: datetime | None = None
    remediated_by: str | None = None


class ResolveRequest(BaseModel):
    resolved_by_id: UUID
    notes: str | None = None


class ComplianceViolationResponse(ORMModel):
    check_id: UUID
    rule_code: str
    rule_name: str
    severity: str
    category: str
    check_date: date
    violations: str | None = None
    recommendations: str | None = None
    remediation_due_date: date | None = None
    is_overdue: bool


class ViolationCategoryCount(BaseModel):
    category: str
    count: int


class ComplianceReportResponse(BaseModel):
    organization_id: UUID
    period_start: date
    period_end: date
    generated_at: datetime
    total_checks: int
    compliant_checks: int
    non_compliant_checks: int
    unresolved_checks: int
    overdue_checks: int
    compliance_rate: float
    average_score: float
    critical_violations: int
    high_severity_violations: int
    top_violation_categories: list[ViolationCategoryCount]


class ComplianceSummaryResponse(ORMModel):
    organization_id: UUID
    total_rules: int
    active_rules: int
    total_checks: int
    non_compliant_checks: int
    unresolved_checks: int
    overdue_checks: int
    compliance_rate: float


class JobAccepted(BaseModel):
    job: str
    status: str = "scheduled"


# ============================================================================
# Leave
# ============================================================================


class LeaveTypeCreate(BaseModel):
    organization_id: UUID
    name: str
    code: str
    category: str | None = None
    is_paid: bool = True
    max_days_per_year: Decimal = Decimal("0")
    is_carry_forward: bool = False
    max_carry_forward_days: Decimal | None = None
    requires_approval: bool = True
    allow_negative_balance: bool = False
    min_days_notice: int = 0


class LeaveTypeResponse(ORMModel):
    leave_type_id: UUID
    organization_id: UUID
    name: str
    code: str
    category: str | None = None
    is_paid: bool
    max_days_per_year: Decimal
    is_carry_forward: bool
    max_carry_forward_days: Decimal | None = None
    requires_approval: bool
    allow_negative_balance: bool
    min_days_notice: int
    is_active: bool


class LeaveBalanceResponse(ORMModel):
    leave_balance_id: UUID
    employee_id: UUID
    leave_type_id: UUID
    year: int
    allocated_days: Decimal
    used_days: Decimal
    pending_days: Decimal
    carry_forward_days: Decimal
    adjustment_days: Decimal
    remaining_days: Decimal


class BalanceAdjustment(BaseModel):
    leave_type_id: UUID
    year: int
    days: Decimal


class CarryForwardRequest(BaseModel):
    from_year: int
    to_year: int
    organization_id: UUID | None = None


class LeaveRequestCreate(BaseModel):
    employee_id: UUID
    leave_type_id: UUID
    start_date: date
    end_date: date
    is_half_day: bool = False
    reason: str | None = None


class LeaveRequestResponse(ORMModel):
    leave_request_id: UUID
    employee_id: UUID
    leave_type_id: UUID
    start_date: date
    end_date: date
    total_days: Decimal
    is_half_day: bool
    reason: str | None = None
    status: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    cancelled_at: datetime | None = None


class RejectionRequest(BaseModel):
    reason: str | None = None


# ============================================================================
# Attendance
# ============================================================================


class CheckInRequest(BaseModel):
    employee_id: UUID
    location: str | None = None
    notes: str | None = None


class CheckOutRequest(CheckInRequest):
    pass


class AttendanceRecordCreate(BaseModel):
    employee_id: UUID
    attendance_date: date
    status: str = "PRESENT"
    check_in_time: time | None = None
    check_out_time: time | None = None
    check_in_location: str | None = None
    check_out_location: str | None = None
    notes: str | None = None


class AttendanceRecordUpdate(BaseModel):
    check_in_time: time | None = None
    check_out_time: time | None = None
    status: str | None = None
    check_in_location: str | None = None
    notes: str | None = None


class AttendanceApproval(BaseModel):
    approver_id: UUID


class AttendanceRecordResponse(ORMModel):
    attendance_record_id: UUID
    employee_id: UUID
    attendance_date: date
    check_in_time: time | None = None
    check_out_time: time | None = None
    total_hours: Decimal | None = None
    overtime_hours: Decimal | None = None
    break_hours: Decimal | None = None
    status: str
    check_in_location: str | None = None
    check_out_location: str | None = None
    notes: str | None = None
    approved_by_id: UUID | None = None
    approved_at: datetime | None = None


class AttendanceReportResponse(ORMModel):
    employee_id: UUID
    employee_name: str
    start_date: date
    end_date: date
    present_days: int
    absent_days: int
    late_days: int
    half_days: int
    total_hours_worked: Decimal
    total_overtime_hours: Decimal


class HolidayCreate(BaseModel):
    organization_id: UUID
    name: str
    holiday_date: date
    holiday_type: str = "COMPANY"
    is_optional: bool = False
    is_recurring: bool = False
    description: str | None = None


class HolidayResponse(ORMModel):
    holiday_id: UUID
    organization_id: UUID
    name: str
    holiday_date: date
    holiday_type: str
    is_optional: bool
    is_recurring: bool
    description: str | None = None


class HolidayCalendarResponse(ORMModel):
    organization_id: UUID
    organization_name: str
    year: int
    holidays: list[HolidayResponse]
    total_holidays: int
    mandatory_holidays: int
    optional_holidays: int
    count_by_type: dict[str, int]
    count_by_month: dict[str, int]


class HolidayStatisticsResponse(ORMModel):
    organization_id: UUID
    organization_name: str
    year: int
    total_holidays: int
    mandatory_holidays: int
    optional_holidays: int


class WorkingDaysResponse(BaseModel):
    start_date: date
    end_date: date
    working_days: int


# ============================================================================
# Payroll
# ============================================================================


class PayrollRunCreate(BaseModel):
    organization_id: UUID
    name: str
    pay_period_start: date
    pay_period_end: date
    pay_date: date
    description: str | None = None


class PayrollRunResponse(ORMModel):
    payroll_run_id: UUID
    organization_id: UUID
    name: str
    description: str | None = None
    pay_period_start: date
    pay_period_end: date
    pay_date: date
    status: str
    total_gross: Decimal
    total_deductions: Decimal
    total_taxes: Decimal
    total_net: Decimal
    employee_count: int
    processed_at: datetime | None = None
    processed_by: str | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    paid_at: datetime | None = None
    paid_by: str | None = None
    notes: str | None = None


class ProcessRequest(BaseModel):
    """Optional overtime hours keyed by employee ID."""

    overtime_hours: dict[UUID, Decimal] = Field(default_factory=dict)


class CancelRequest(BaseModel):
    reason: str | None = None


class PayslipResponse(ORMModel):
    payslip_id: UUID
    payroll_run_id: UUID
    employee_id: UUID
    regular_hours: Decimal
    overtime_hours: Decimal
    basic_pay: Decimal
    overtime_pay: Decimal
    gross_pay: Decimal
    total_deductions: Decimal
    total_taxes: Decimal
    net_pay: Decimal
    is_final: bool


class PayrollItemResponse(ORMModel):
    payroll_item_id: UUID
    item_type: str
    item_code: str
    item_name: str
    amount: Decimal
    sort_order: int


class PayslipDetailResponse(PayslipResponse):
    items: list[PayrollItemResponse] = Field(default_factory=list)


# ============================================================================
# Notifications
# ============================================================================


class NotificationResponse(ORMModel):
    notification_id: UUID
    organization_id: UUID
    user_id: UUID | None = None
    title: str
    message: str
    notification_type: str
    priority: str
    is_read: bool
    read_at: datetime | None = None
    expires_at: datetime | None = None
    reference_type: str | None = None
    reference_id: UUID | None = None
    created_at: datetime
