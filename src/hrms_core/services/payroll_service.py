"""Payroll service - payroll runs, payslips and their lifecycle.

Run lifecycle (validated by PayrollRunStateMachine):
    DRAFT -> PROCESSING -> CALCULATED -> APPROVED -> PAID
A failed calculation leaves the run in ERROR, from which it can be
reprocessed. Any run that is not PAID can be cancelled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.models import Employee, PayrollItem, PayrollRun, Payslip
from hrms_core.models.base import utcnow
from hrms_core.models.enums import PayrollRunStatus
from hrms_core.repositories import (
    EmployeeRepository,
    OrganizationRepository,
    Page,
    PageRequest,
    PayrollItemRepository,
    PayrollRunRepository,
    PayslipRepository,
)
from hrms_core.services.common import enum_value, require
from hrms_core.services.payroll_calculator import ZERO, PayslipCalculator
from hrms_core.services.state_machine import PayrollRunStateMachine

logger = logging.getLogger(__name__)


@dataclass
class PayrollRunData:
    organization_id: UUID
    name: str
    pay_period_start: date
    pay_period_end: date
    pay_date: date
    description: str | None = None


class PayrollService:
    def __init__(self, session: AsyncSession, calculator: PayslipCalculator | None = None):
        self.session = session
        self.calculator = calculator or PayslipCalculator()
        self.runs = PayrollRunRepository(session)
        self.payslips = PayslipRepository(session)
        self.items = PayrollItemRepository(session)
        self.employees = EmployeeRepository(session)
        self.organizations = OrganizationRepository(session)

    async def create_payroll_run(self, data: PayrollRunData) -> PayrollRun:
        require(data.name, "Payroll run name is required")
        if data.pay_period_start > data.pay_period_end:
            raise ValidationError("Pay period start cannot be after pay period end")
        if await self.organizations.get(data.organization_id) is None:
            raise NotFoundError("Organization", data.organization_id)
        if await self.runs.exists_for_period(
            data.organization_id, data.pay_period_start, data.pay_period_end
        ):
            raise ConflictError("Payroll run already exists for this pay period")

        run = PayrollRun(
            organization_id=data.organization_id,
            name=data.name,
            description=data.description,
            pay_period_start=data.pay_period_start,
            pay_period_end=data.pay_period_end,
            pay_date=data.pay_date,
            status=PayrollRunStatus.DRAFT.value,
            total_gross=ZERO,
            total_deductions=ZERO,
            total_taxes=ZERO,
            total_net=ZERO,
            employee_count=0,
        )
        await self.runs.add(run)
        logger.info("Created payroll run %s for organization %s", run.name, run.organization_id)
        return run

    async def process_payroll_run(
        self,
        payroll_run_id: UUID,
        processed_by: str,
        overtime_hours: dict[UUID, Decimal] | None = None,
    ) -> PayrollRun:
        """Calculate a payslip for every active employee and total the run.

        Payslips are written inside a savepoint. A calculation failure rolls
        them back and moves the run to ERROR with the reason in ``notes``;
        the run is returned rather than the error raised.
        """
        run = await self.get_payroll_run(payroll_run_id)
        if not PayrollRunStateMachine.can_be_modified(run.status):
            raise StateConflictError(
                f"Payroll run cannot be modified in current status: {run.status}"
            )

        PayrollRunStateMachine.validate_transition(run.status, PayrollRunStatus.PROCESSING)
        run.status = PayrollRunStatus.PROCESSING.value
        run.notes = None
        await self.session.flush()

        overtime_hours = overtime_hours or {}
        try:
            async with self.session.begin_nested():
                employees = await self.employees.find_active(run.organization_id)
                await self._discard_stale_payslips(run, {emp.employee_id for emp in employees})
                payslips = []
                for employee in employees:
                    hours = overtime_hours.get(employee.employee_id, ZERO)
                    payslips.append(await self._calculate_payslip(run, employee, hours))
        except Exception as e:
            logger.exception("Error processing payroll run %s", payroll_run_id)
            await self.session.refresh(run)
            PayrollRunStateMachine.validate_transition(run.status, PayrollRunStatus.ERROR)
            run.status = PayrollRunStatus.ERROR.value
            run.notes = f"Error processing payroll: {e}"
            await self.session.flush()
            return run

        self._apply_totals(run, payslips)
        PayrollRunStateMachine.validate_transition(run.status, PayrollRunStatus.CALCULATED)
        run.status = PayrollRunStatus.CALCULATED.value
        run.processed_at = utcnow()
        run.processed_by = processed_by
        await self.session.flush()
        logger.info(
            "Processed payroll run %s: %d payslip(s), gross %s, net %s",
            payroll_run_id,
            run.employee_count,
            run.total_gross,
            run.total_net,
        )
        return run

    async def approve_payroll_run(self, payroll_run_id: UUID, approved_by: str) -> PayrollRun:
        run = await self.get_payroll_run(payroll_run_id)
        if run.status != PayrollRunStatus.CALCULATED.value:
            raise StateConflictError("Only calculated payroll runs can be approved")
        PayrollRunStateMachine.validate_transition(run.status, PayrollRunStatus.APPROVED)

        for payslip in await self.payslips.find_by_run(payroll_run_id):
            payslip.is_final = True
        run.status = PayrollRunStatus.APPROVED.value
        run.approved_at = utcnow()
        run.approved_by = approved_by
        await self.session.flush()
        logger.info("Payroll run %s approved by %s", payroll_run_id, approved_by)
        return run

    async def mark_payroll_run_paid(self, payroll_run_id: UUID, paid_by: str) -> PayrollRun:
        run = await self.get_payroll_run(payroll_run_id)
        if run.status != PayrollRunStatus.APPROVED.value:
            raise StateConflictError("Only approved payroll runs can be marked as paid")
        PayrollRunStateMachine.validate_transition(run.status, PayrollRunStatus.PAID)

        run.status = PayrollRunStatus.PAID.value
        run.paid_at = utcnow()
        run.paid_by = paid_by
        await self.session.flush()
        logger.info("Payroll run %s marked paid by %s", payroll_run_id, paid_by)
        return run

    async def cancel_payroll_run(
        self, payroll_run_id: UUID, reason: str | None = None
    ) -> PayrollRun:
        run = await self.get_payroll_run(payroll_run_id)
        if run.status == PayrollRunStatus.PAID.value:
            raise StateConflictError("Cannot cancel a paid payroll run")
        PayrollRunStateMachine.validate_transition(run.status, PayrollRunStatus.CANCELLED)

        run.status = PayrollRunStatus.CANCELLED.value
        if reason:
            run.notes = reason
        await self.session.flush()
        logger.info("Payroll run %s cancelled", payroll_run_id)
        return run

    async def get_payroll_run(self, payroll_run_id: UUID) -> PayrollRun:
        run = await self.runs.get(payroll_run_id)
        if run is None:
            raise NotFoundError("Payroll run", payroll_run_id)
        return run

    async def get_payroll_runs(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[PayrollRun]:
        return await self.runs.page_by_organization(organization_id, page_request)

    async def get_payroll_runs_by_status(
        self, organization_id: UUID, status: str
    ) -> list[PayrollRun]:
        return await self.runs.find_by_status(
            organization_id, enum_value(PayrollRunStatus, status, "payroll run status")
        )

    async def get_payslips(self, payroll_run_id: UUID) -> list[Payslip]:
        await self.get_payroll_run(payroll_run_id)
        return await self.payslips.find_by_run(payroll_run_id)

    async def get_payslip(self, payslip_id: UUID) -> Payslip:
        payslip = await self.payslips.get(payslip_id)
        if payslip is None:
            raise NotFoundError("Payslip", payslip_id)
        return payslip

    async def get_payslip_items(self, payslip_id: UUID) -> list[PayrollItem]:
        await self.get_payslip(payslip_id)
        return await self.items.find_by_payslip(payslip_id)

    async def get_employee_payslips(self, employee_id: UUID) -> list[Payslip]:
        if await self.employees.get(employee_id) is None:
            raise NotFoundError("Employee", employee_id)
        return await self.payslips.find_by_employee(employee_id)

    async def _calculate_payslip(
        self, run: PayrollRun, employee: Employee, overtime_hours: Decimal
    ) -> Payslip:
        calculation = self.calculator.calculate(
            employee, run.pay_period_start, run.pay_period_end, overtime_hours
        )

        # A payslip already on the run is reused and its lines replaced
        payslip = await self.payslips.find_by_run_and_employee(
            run.payroll_run_id, employee.employee_id
        )
        if payslip is None:
            payslip = Payslip(payroll_run_id=run.payroll_run_id, employee_id=employee.employee_id)
            await self.payslips.add(payslip)
        else:
            await self.items.delete_by_payslip(payslip.payslip_id)

        payslip.regular_hours = calculation.regular_hours
        payslip.overtime_hours = calculation.overtime_hours
        payslip.basic_pay = calculation.basic_pay
        payslip.overtime_pay = calculation.overtime_pay
        payslip.gross_pay = calculation.gross_pay
        payslip.total_deductions = calculation.total_deductions
        payslip.total_taxes = calculation.total_taxes
        payslip.net_pay = calculation.net_pay
        payslip.is_final = False

        for order, line in enumerate(calculation.lines, start=1):
            self.session.add(
                PayrollItem(
                    payslip_id=payslip.payslip_id,
                    item_type=line.item_type.value,
                    item_code=line.item_code,
                    item_name=line.item_name,
                    amount=line.amount,
                    sort_order=order,
                )
            )
        await self.session.flush()
        return payslip

    async def _discard_stale_payslips(self, run: PayrollRun, active_ids: set[UUID]) -> None:
        for payslip in await self.payslips.find_by_run(run.payroll_run_id):
            if payslip.employee_id not in active_ids:
                await self.items.delete_by_payslip(payslip.payslip_id)
                await self.payslips.delete(payslip)
                logger.info(
                    "Removed payslip of inactive employee %s from payroll run %s",
                    payslip.employee_id,
                    run.payroll_run_id,
                )

    @staticmethod
    def _apply_totals(run: PayrollRun, payslips: list[Payslip]) -> None:
        run.total_gross = sum((p.gross_pay for p in payslips), ZERO)
        run.total_deductions = sum((p.total_deductions for p in payslips), ZERO)
        run.total_taxes = sum((p.total_taxes for p in payslips), ZERO)
        run.total_net = sum((p.net_pay for p in payslips), ZERO)
        run.employee_count = len(payslips)
