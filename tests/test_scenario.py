"""End-to-end flow for one organization.

Each step commits through its own session, the way the API and the
background jobs use the database.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from hrms_core.database import get_session
from hrms_core.exceptions import NotFoundError, StateConflictError
from hrms_core.models.enums import CheckStatus, LeaveRequestStatus, PayrollRunStatus
from hrms_core.services import (
    ComplianceRuleData,
    ComplianceService,
    DepartmentData,
    DepartmentService,
    EmployeeData,
    EmployeeService,
    EvaluationResult,
    LeaveRequestData,
    LeaveService,
    LeaveTypeData,
    LocationData,
    LocationService,
    NotificationService,
    OrganizationData,
    OrganizationService,
    PayrollRunData,
    PayrollService,
    RoleService,
    UserData,
    UserService,
)
from hrms_core.services.background import schedule_compliance_sweep, schedule_pending_alerts


class PostingAuditEvaluator:
    def evaluate(self, rule, organization, employee=None):
        return EvaluationResult(
            compliant=False,
            score=Decimal("55"),
            check_results="Posting audit completed",
            violations="Overtime notice not posted",
        )


async def test_acme_onboarding_to_payday(session_factory):
    # Organization structure and people
    async with get_session(session_factory) as session:
        organization = await OrganizationService(session).create_organization(
            OrganizationData(name="Acme Corp", industry="Manufacturing", company_size="small")
        )
        org_id = organization.organization_id
        hq = await LocationService(session).create_location(
            LocationData(org_id, "Plant 1", city="Dayton", country="US", is_headquarters=True)
        )
        department = await DepartmentService(session).create_department(
            DepartmentData(org_id, "Operations", code="OPS", location_id=hq.location_id)
        )
        employees = EmployeeService(session)
        manager = await employees.create_employee(
            EmployeeData(
                org_id,
                "A100",
                "Maria",
                "Lopez",
                department_id=department.department_id,
                salary_amount=Decimal("5000.00"),
                hire_date=date(2023, 5, 1),
            )
        )
        operator = await employees.create_employee(
            EmployeeData(
                org_id,
                "A200",
                "Sam",
                "Reed",
                department_id=department.department_id,
                manager_id=manager.employee_id,
                employment_type="PART_TIME",
                hourly_rate=Decimal("25.00"),
                hire_date=date(2024, 2, 1),
            )
        )
        await DepartmentService(session).update_department(
            department.department_id,
            DepartmentData(
                org_id,
                "Operations",
                code="OPS",
                location_id=hq.location_id,
                manager_id=manager.employee_id,
            ),
        )

        users = UserService(session)
        admin = await users.create_user(
            UserData(org_id, "hradmin", "hr@acme.test", "Hana", "Reyes"), "s3cure-passw0rd"
        )
        role = await RoleService(session).create_role("hradmin", "HR Manager")
        await users.assign_role(admin.user_id, role.role_id, assigned_by="hradmin")

    # Hierarchy and reporting lines survive the commit
    async with get_session(session_factory) as session:
        tree = await DepartmentService(session).get_department_hierarchy(org_id)
        assert [(node.name, node.manager_name) for node in tree] == [("Operations", "Maria Lopez")]
        reports = await EmployeeService(session).get_direct_reports(manager.employee_id)
        assert [e.employee_number for e in reports] == ["A200"]
        assert await UserService(session).verify_password("hradmin", "s3cure-passw0rd")

    # Leave
    async with get_session(session_factory) as session:
        leave = LeaveService(session)
        annual = await leave.create_leave_type(
            LeaveTypeData(org_id, "Annual Leave", "AL", max_days_per_year=Decimal("15"))
        )
        start = date.today() + timedelta(days=14)
        request = await leave.create_leave_request(
            LeaveRequestData(
                operator.employee_id, annual.leave_type_id, start, start + timedelta(days=2)
            )
        )
        approved = await leave.approve_leave_request(request.leave_request_id, "hradmin")
        assert approved.status == LeaveRequestStatus.APPROVED.value
        balance = await leave.get_leave_balance(
            operator.employee_id, annual.leave_type_id, start.year
        )
        assert balance.used_days == Decimal("3")
        assert balance.remaining_days == Decimal("12")

    # Compliance: scheduled sweep, then a manual audit that finds a violation
    async with get_session(session_factory) as session:
        compliance = ComplianceService(session)
        federal = await compliance.create_jurisdiction("United States", "US")
        await compliance.create_compliance_rule(
            ComplianceRuleData(
                "Overtime recordkeeping",
                "FLSA-OT",
                federal.jurisdiction_id,
                date(2024, 1, 1),
                category="LABOR_LAW",
                severity="HIGH",
                check_frequency_days=30,
                auto_check_enabled=True,
            )
        )
        posting = await compliance.create_compliance_rule(
            ComplianceRuleData(
                "Workplace postings",
                "POST-01",
                federal.jurisdiction_id,
                date(2024, 1, 1),
                organization_id=org_id,
                category="LABOR_LAW",
                severity="CRITICAL",
            )
        )

    assert await schedule_compliance_sweep(session_factory) == 1
    # Not due again until the next check date
    assert await schedule_compliance_sweep(session_factory, org_id) == 0

    async with get_session(session_factory) as session:
        check = await ComplianceService(
            session, evaluator=PostingAuditEvaluator()
        ).perform_compliance_check(posting.rule_id, org_id, "hradmin")
        assert check.status == CheckStatus.NON_COMPLIANT.value
        assert check.alert_sent is True

    assert await schedule_pending_alerts(session_factory) == 0

    async with get_session(session_factory) as session:
        violations = await ComplianceService(session).detect_violations(org_id)
        assert [v.rule_code for v in violations] == ["POST-01"]
        inbox = await NotificationService(session).get_notifications_for_user(
            org_id, admin.user_id
        )
        assert [n.title for n in inbox] == ["Compliance Violation Detected: Workplace postings"]
        assert inbox[0].priority == "URGENT"

    # Payroll
    async with get_session(session_factory) as session:
        payroll = PayrollService(session)
        run = await payroll.create_payroll_run(
            PayrollRunData(
                org_id, "January 2025", date(2025, 1, 1), date(2025, 1, 31), date(2025, 2, 1)
            )
        )
        run = await payroll.process_payroll_run(run.payroll_run_id, "hradmin")
        assert run.status == PayrollRunStatus.CALCULATED.value
        assert run.employee_count == 2
        assert run.total_net == Decimal("5326.00")

    async with get_session(session_factory) as session:
        payroll = PayrollService(session)
        await payroll.approve_payroll_run(run.payroll_run_id, "cfo")
        paid = await payroll.mark_payroll_run_paid(run.payroll_run_id, "treasury")
        assert paid.status == PayrollRunStatus.PAID.value
        payslips = await payroll.get_employee_payslips(operator.employee_id)
        assert [p.net_pay for p in payslips] == [Decimal("2543.50")]
        assert payslips[0].is_final is True


async def test_acme_teardown_order(session_factory):
    """Test that an organization can only be removed after its dependents."""
    async with get_session(session_factory) as session:
        organization = await OrganizationService(session).create_organization(
            OrganizationData(name="Acme")
        )
        org_id = organization.organization_id
        department = await DepartmentService(session).create_department(
            DepartmentData(org_id, "Engineering", code="ENG")
        )
        employee = await EmployeeService(session).create_employee(
            EmployeeData(
                org_id, "EMP001", "Ada", "Byron", department_id=department.department_id
            )
        )
        other = await OrganizationService(session).create_organization(
            OrganizationData(name="Globex")
        )
        await EmployeeService(session).create_employee(
            EmployeeData(other.organization_id, "EMP001", "Hank", "Scorpio")
        )

    async with get_session(session_factory) as session:
        employees = EmployeeService(session)
        assert await employees.count_employees_by_organization(org_id) == 1
        assert await DepartmentService(session).count_departments_by_organization(org_id) == 1
        with pytest.raises(StateConflictError, match="existing departments"):
            await OrganizationService(session).delete_organization(org_id)

    async with get_session(session_factory) as session:
        await EmployeeService(session).delete_employee(employee.employee_id)
        await DepartmentService(session).delete_department(department.department_id)
        await OrganizationService(session).delete_organization(org_id)

    async with get_session(session_factory) as session:
        with pytest.raises(NotFoundError):
            await EmployeeService(session).get_employee(employee.employee_id)
        with pytest.raises(NotFoundError):
            await DepartmentService(session).get_department(department.department_id)
        with pytest.raises(NotFoundError):
            await OrganizationService(session).get_organization(org_id)
        remaining = await EmployeeService(session).count_employees_by_organization(
            other.organization_id
        )
        assert remaining == 1
