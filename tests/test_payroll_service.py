"""Tests for payroll runs and payslips."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.models import Payslip
from hrms_core.models.enums import PayrollRunStatus
from hrms_core.repositories import PageRequest
from hrms_core.services import EmployeeService, PayrollRunData, PayrollService, PayslipCalculator


class HourlyFailingCalculator(PayslipCalculator):
    def calculate(self, employee, period_start, period_end, overtime_hours=Decimal("0")):
        if self.is_hourly(employee):
            raise RuntimeError("timesheet missing")
        return super().calculate(employee, period_start, period_end, overtime_hours)


def january_run(organization_id, name="January 2025"):
    return PayrollRunData(
        organization_id=organization_id,
        name=name,
        pay_period_start=date(2025, 1, 1),
        pay_period_end=date(2025, 1, 31),
        pay_date=date(2025, 2, 1),
    )


class TestPayrollRunCreation:
    async def test_create_run_starts_in_draft(self, session, test_organization):
        run = await PayrollService(session).create_payroll_run(
            january_run(test_organization.organization_id)
        )
        assert run.status == PayrollRunStatus.DRAFT.value
        assert run.total_gross == Decimal("0")
        assert run.employee_count == 0

    async def test_inverted_period_rejected(self, session, test_organization):
        data = january_run(test_organization.organization_id)
        data.pay_period_start, data.pay_period_end = data.pay_period_end, data.pay_period_start
        with pytest.raises(ValidationError, match="Pay period start"):
            await PayrollService(session).create_payroll_run(data)

    async def test_unknown_organization(self, session):
        with pytest.raises(NotFoundError):
            await PayrollService(session).create_payroll_run(january_run(uuid4()))

    async def test_duplicate_period_rejected_until_cancelled(self, session, test_organization):
        """Test that a cancelled run frees its pay period."""
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_organization.organization_id))

        with pytest.raises(ConflictError, match="already exists for this pay period"):
            await service.create_payroll_run(
                january_run(test_organization.organization_id, "January again")
            )

        await service.cancel_payroll_run(run.payroll_run_id, "Wrong period")
        retry = await service.create_payroll_run(
            january_run(test_organization.organization_id, "January again")
        )
        assert retry.status == PayrollRunStatus.DRAFT.value

    async def test_listing(self, session, test_organization):
        service = PayrollService(session)
        await service.create_payroll_run(january_run(test_organization.organization_id))

        page = await service.get_payroll_runs(test_organization.organization_id, PageRequest())
        assert page.total == 1
        drafts = await service.get_payroll_runs_by_status(
            test_organization.organization_id, PayrollRunStatus.DRAFT.value
        )
        assert [r.name for r in drafts] == ["January 2025"]

    async def test_status_filter_is_normalized(self, session, test_organization):
        service = PayrollService(session)
        await service.create_payroll_run(january_run(test_organization.organization_id))

        org_id = test_organization.organization_id
        assert len(await service.get_payroll_runs_by_status(org_id, "draft")) == 1
        with pytest.raises(ValidationError, match="Invalid payroll run status 'done'"):
            await service.get_payroll_runs_by_status(org_id, "done")


class TestPayrollProcessing:
    """Test payslip calculation across the organization."""

    async def test_process_run_totals(self, session, test_employee, test_hourly_employee):
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_employee.organization_id))

        run = await service.process_payroll_run(run.payroll_run_id, processed_by="admin")

        assert run.status == PayrollRunStatus.CALCULATED.value
        assert run.processed_by == "admin"
        assert run.processed_at is not None
        assert run.employee_count == 2
        assert run.total_gross == Decimal("9600.00")
        assert run.total_deductions == Decimal("890.00")
        assert run.total_taxes == Decimal("3384.00")
        assert run.total_net == Decimal("5326.00")

    async def test_payslips_and_items(self, session, test_employee, test_hourly_employee):
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_employee.organization_id))
        await service.process_payroll_run(run.payroll_run_id, processed_by="admin")

        payslips = {p.employee_id: p for p in await service.get_payslips(run.payroll_run_id)}
        salaried = payslips[test_employee.employee_id]
        hourly = payslips[test_hourly_employee.employee_id]
        assert salaried.net_pay == Decimal("2782.50")
        assert hourly.regular_hours == Decimal("184")
        assert hourly.net_pay == Decimal("2543.50")

        items = await service.get_payslip_items(salaried.payslip_id)
        assert [i.sort_order for i in items] == list(range(1, 12))
        assert items[0].item_code == "BASIC"
        assert items[-1].item_code == "UNEMP"

        history = await service.get_employee_payslips(test_employee.employee_id)
        assert [p.payslip_id for p in history] == [salaried.payslip_id]

    async def test_overtime_is_applied(self, session, test_employee, test_hourly_employee):
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_employee.organization_id))
        run = await service.process_payroll_run(
            run.payroll_run_id,
            processed_by="admin",
            overtime_hours={test_employee.employee_id: Decimal("10")},
        )

        assert run.total_gross == Decimal("10026.15")
        payslips = {p.employee_id: p for p in await service.get_payslips(run.payroll_run_id)}
        assert payslips[test_employee.employee_id].overtime_pay == Decimal("426.15")
        assert payslips[test_hourly_employee.employee_id].overtime_pay == Decimal("0")

    async def test_terminated_employees_excluded(
        self, session, test_employee, test_hourly_employee
    ):
        await EmployeeService(session).terminate_employee(
            test_hourly_employee.employee_id, date(2024, 12, 31)
        )
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_employee.organization_id))
        run = await service.process_payroll_run(run.payroll_run_id, processed_by="admin")

        assert run.employee_count == 1
        assert run.total_net == Decimal("2782.50")

    async def test_processing_twice_rejected(self, session, test_employee):
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_employee.organization_id))
        await service.process_payroll_run(run.payroll_run_id, processed_by="admin")

        with pytest.raises(StateConflictError, match="cannot be modified"):
            await service.process_payroll_run(run.payroll_run_id, processed_by="admin")

    async def test_failure_moves_run_to_error(self, session, test_employee, test_hourly_employee):
        """Test that a calculation failure is recorded and the run can be reprocessed."""
        failing = PayrollService(session, calculator=HourlyFailingCalculator())
        run = await failing.create_payroll_run(january_run(test_employee.organization_id))

        run = await failing.process_payroll_run(run.payroll_run_id, processed_by="admin")
        assert run.status == PayrollRunStatus.ERROR.value
        assert run.notes == "Error processing payroll: timesheet missing"
        assert run.processed_at is None
        assert await failing.get_payslips(run.payroll_run_id) == []

        service = PayrollService(session)
        run = await service.process_payroll_run(run.payroll_run_id, processed_by="admin")
        assert run.status == PayrollRunStatus.CALCULATED.value
        assert run.notes is None

        payslips = await service.get_payslips(run.payroll_run_id)
        assert len(payslips) == 2
        salaried = next(p for p in payslips if p.employee_id == test_employee.employee_id)
        assert len(await service.get_payslip_items(salaried.payslip_id)) == 11

    async def test_stale_payslips_removed_on_reprocessing(
        self, session, test_employee, test_hourly_employee
    ):
        """Test that a payslip of an employee no longer active does not survive processing."""
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_employee.organization_id))
        stale = Payslip(
            payroll_run_id=run.payroll_run_id,
            employee_id=test_hourly_employee.employee_id,
            gross_pay=Decimal("1000.00"),
            net_pay=Decimal("800.00"),
        )
        session.add(stale)
        await session.flush()
        await EmployeeService(session).terminate_employee(
            test_hourly_employee.employee_id, date(2024, 12, 31)
        )

        await service.process_payroll_run(run.payroll_run_id, processed_by="admin")
        run = await service.approve_payroll_run(run.payroll_run_id, approved_by="cfo")

        payslips = await service.get_payslips(run.payroll_run_id)
        assert [p.employee_id for p in payslips] == [test_employee.employee_id]
        assert payslips[0].is_final is True
        assert run.total_net == sum(p.net_pay for p in payslips)


class TestPayrollLifecycle:
    async def test_approve_and_pay(self, session, test_employee):
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_employee.organization_id))
        await service.process_payroll_run(run.payroll_run_id, processed_by="admin")

        run = await service.approve_payroll_run(run.payroll_run_id, approved_by="cfo")
        assert run.status == PayrollRunStatus.APPROVED.value
        assert run.approved_by == "cfo"
        assert all(p.is_final for p in await service.get_payslips(run.payroll_run_id))

        run = await service.mark_payroll_run_paid(run.payroll_run_id, paid_by="treasury")
        assert run.status == PayrollRunStatus.PAID.value
        assert run.paid_at is not None

        with pytest.raises(StateConflictError, match="Cannot cancel a paid payroll run"):
            await service.cancel_payroll_run(run.payroll_run_id)

    async def test_approve_requires_calculated(self, session, test_organization):
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_organization.organization_id))
        with pytest.raises(StateConflictError, match="Only calculated"):
            await service.approve_payroll_run(run.payroll_run_id, approved_by="cfo")

    async def test_pay_requires_approved(self, session, test_employee):
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_employee.organization_id))
        await service.process_payroll_run(run.payroll_run_id, processed_by="admin")
        with pytest.raises(StateConflictError, match="Only approved"):
            await service.mark_payroll_run_paid(run.payroll_run_id, paid_by="treasury")

    async def test_cancel_records_reason(self, session, test_organization):
        service = PayrollService(session)
        run = await service.create_payroll_run(january_run(test_organization.organization_id))
        run = await service.cancel_payroll_run(run.payroll_run_id, "Duplicate")
        assert run.status == PayrollRunStatus.CANCELLED.value
        assert run.notes == "Duplicate"

    async def test_unknown_payslip(self, session):
        with pytest.raises(NotFoundError, match="Payslip not found"):
            await PayrollService(session).get_payslip(uuid4())
