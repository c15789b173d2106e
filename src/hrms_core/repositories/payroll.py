"""Payroll run, payslip and item repositories."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import delete

from hrms_core.models import PayrollItem, PayrollRun, Payslip
from hrms_core.repositories.base import Page, PageRequest, Repository


class PayrollRunRepository(Repository[PayrollRun]):
    model = PayrollRun

    async def exists_for_period(
        self, organization_id: UUID, period_start: date, period_end: date
    ) -> bool:
        """True when a non-cancelled run already covers exactly this period."""
        return await self.exists(
            PayrollRun.organization_id == organization_id,
            PayrollRun.pay_period_start == period_start,
            PayrollRun.pay_period_end == period_end,
            PayrollRun.status != "CANCELLED",
        )

    async def page_by_organization(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[PayrollRun]:
        return await self.paginate(
            PayrollRun.organization_id == organization_id, page_request=page_request
        )

    async def find_by_status(self, organization_id: UUID, status: str) -> list[PayrollRun]:
        return await self.find(
            PayrollRun.organization_id == organization_id,
            PayrollRun.status == status,
            order_by=[PayrollRun.pay_period_start.desc()],
        )

    async def count_by_organization(self, organization_id: UUID) -> int:
        return await self.count(PayrollRun.organization_id == organization_id)


class PayslipRepository(Repository[Payslip]):
    model = Payslip

    async def find_by_run(self, payroll_run_id: UUID) -> list[Payslip]:
        return await self.find(Payslip.payroll_run_id == payroll_run_id)

    async def find_by_employee(self, employee_id: UUID) -> list[Payslip]:
        return await self.find(
            Payslip.employee_id == employee_id,
            order_by=[Payslip.created_at.desc()],
        )

    async def find_by_run_and_employee(
        self, payroll_run_id: UUID, employee_id: UUID
    ) -> Payslip | None:
        return await self.find_one(
            Payslip.payroll_run_id == payroll_run_id,
            Payslip.employee_id == employee_id,
        )

    async def exists_by_employee(self, employee_id: UUID) -> bool:
        return await self.exists(Payslip.employee_id == employee_id)


class PayrollItemRepository(Repository[PayrollItem]):
    model = PayrollItem

    async def find_by_payslip(self, payslip_id: UUID) -> list[PayrollItem]:
        return await self.find(
            PayrollItem.payslip_id == payslip_id,
            order_by=[PayrollItem.sort_order],
        )

    async def delete_by_payslip(self, payslip_id: UUID) -> int:
        """Bulk delete: every item of the payslip."""
        result = await self.session.execute(
            delete(PayrollItem)
            .where(PayrollItem.payslip_id == payslip_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
