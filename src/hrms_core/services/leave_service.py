"""Leave service - leave types, yearly balances and leave requests.

Balance booking:
- a PENDING request books its days as pending
- an APPROVED request books its days as used
- rejecting, withdrawing or cancelling releases what was booked
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.models import Employee, LeaveBalance, LeaveRequest, LeaveType
from hrms_core.models.base import utcnow
from hrms_core.models.enums import LeaveRequestStatus
from hrms_core.repositories import (
    EmployeeRepository,
    LeaveBalanceRepository,
    LeaveRequestRepository,
    LeaveTypeRepository,
    OrganizationRepository,
)
from hrms_core.services.common import enum_value, require
from hrms_core.services.state_machine import LeaveRequestStateMachine

logger = logging.getLogger(__name__)

HALF_DAY = Decimal("0.5")


@dataclass
class LeaveTypeData:
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


@dataclass
class LeaveRequestData:
    employee_id: UUID
    leave_type_id: UUID
    start_date: date
    end_date: date
    is_half_day: bool = False
    reason: str | None = None


class LeaveService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.leave_types = LeaveTypeRepository(session)
        self.balances = LeaveBalanceRepository(session)
        self.requests = LeaveRequestRepository(session)
        self.employees = EmployeeRepository(session)
        self.organizations = OrganizationRepository(session)

    # Leave types

    async def create_leave_type(self, data: LeaveTypeData) -> LeaveType:
        require(data.name, "Leave type name is required")
        require(data.code, "Leave type code is required")
        if data.max_days_per_year < 0:
            raise ValidationError("Maximum days per year cannot be negative")
        if data.min_days_notice < 0:
            raise ValidationError("Minimum days notice cannot be negative")
        if await self.organizations.get(data.organization_id) is None:
            raise NotFoundError("Organization", data.organization_id)
        if await self.leave_types.exists_by_organization_and_code(data.organization_id, data.code):
            raise ConflictError("Leave type with this code already exists in the organization")

        leave_type = LeaveType(
            organization_id=data.organization_id,
            name=data.name,
            code=data.code,
            category=data.category,
            is_paid=data.is_paid,
            max_days_per_year=data.max_days_per_year,
            is_carry_forward=data.is_carry_forward,
            max_carry_forward_days=data.max_carry_forward_days,
            requires_approval=data.requires_approval,
            allow_negative_balance=data.allow_negative_balance,
            min_days_notice=data.min_days_notice,
            is_active=True,
        )
        return await self.leave_types.add(leave_type)

    async def get_leave_type(self, leave_type_id: UUID) -> LeaveType:
        leave_type = await self.leave_types.get(leave_type_id)
        if leave_type is None:
            raise NotFoundError("Leave type", leave_type_id)
        return leave_type

    async def get_leave_types(self, organization_id: UUID) -> list[LeaveType]:
        return await self.leave_types.find_active_by_organization(organization_id)

    # Balances

    async def initialize_leave_balances(
        self, employee_id: UUID, year: int | None = None
    ) -> list[LeaveBalance]:
        """Create missing balances for every active leave type of the employee's organization."""
        employee = await self._get_employee(employee_id)
        year = year or date.today().year

        created = []
        for leave_type in await self.leave_types.find_active_by_organization(
            employee.organization_id
        ):
            if await self.balances.find_for(employee_id, leave_type.leave_type_id, year):
                continue
            balance = LeaveBalance(
                employee_id=employee_id,
                leave_type_id=leave_type.leave_type_id,
                year=year,
                allocated_days=Decimal(leave_type.max_days_per_year or 0),
                used_days=Decimal(0),
                pending_days=Decimal(0),
                carry_forward_days=Decimal(0),
                adjustment_days=Decimal(0),
            )
            created.append(await self.balances.add(balance))
        return created

    async def get_leave_balance(
        self, employee_id: UUID, leave_type_id: UUID, year: int
    ) -> LeaveBalance:
        balance = await self.balances.find_for(employee_id, leave_type_id, year)
        if balance is None:
            raise NotFoundError("Leave balance", message="Leave balance not found")
        return balance

    async def get_leave_balances(self, employee_id: UUID, year: int) -> list[LeaveBalance]:
        await self._get_employee(employee_id)
        return await self.balances.find_by_employee_and_year(employee_id, year)

    async def adjust_balance(
        self, employee_id: UUID, leave_type_id: UUID, year: int, days: Decimal
    ) -> LeaveBalance:
        balance = await self.get_leave_balance(employee_id, leave_type_id, year)
        balance.adjustment_days = Decimal(balance.adjustment_days or 0) + days
        await self.session.flush()
        logger.info(
            "Adjusted leave balance of employee %s by %s day(s) for %d", employee_id, days, year
        )
        return balance

    async def process_carry_forward(
        self, from_year: int, to_year: int, organization_id: UUID | None = None
    ) -> int:
        """Carry unused days into the next year, capped per leave type. Returns balances touched."""
        if to_year <= from_year:
            raise ValidationError("Target year must be after source year")

        touched = 0
        for leave_type in await self.leave_types.find_carry_forward_types():
            if organization_id is not None and leave_type.organization_id != organization_id:
                continue
            for balance in await self.balances.find_by_type_and_year(
                leave_type.leave_type_id, from_year
            ):
                remaining = balance.remaining_days
                if remaining <= 0:
                    continue
                days = remaining
                if leave_type.max_carry_forward_days is not None:
                    days = min(days, Decimal(leave_type.max_carry_forward_days))

                target = await self.balances.find_for(
                    balance.employee_id, leave_type.leave_type_id, to_year
                )
                if target is None:
                    target = LeaveBalance(
                        employee_id=balance.employee_id,
                        leave_type_id=leave_type.leave_type_id,
                        year=to_year,
                        allocated_days=Decimal(leave_type.max_days_per_year or 0),
                        used_days=Decimal(0),
                        pending_days=Decimal(0),
                        adjustment_days=Decimal(0),
                        carry_forward_days=days,
                    )
                    await self.balances.add(target)
                else:
                    target.carry_forward_days = days
                touched += 1

        await self.session.flush()
        logger.info(
            "Carried forward %d leave balance(s) from %d to %d", touched, from_year, to_year
        )
        return touched

    # Requests

    async def create_leave_request(self, data: LeaveRequestData) -> LeaveRequest:
        employee = await self._get_employee(data.employee_id)
        leave_type = await self.get_leave_type(data.leave_type_id)
        if leave_type.organization_id != employee.organization_id:
            raise ValidationError("Leave type is not applicable to this employee")
        if not leave_type.is_active:
            raise ValidationError("Leave type is not active")

        today = date.today()
        if data.start_date > data.end_date:
            raise ValidationError("Start date cannot be after end date")
        if data.start_date < today:
            raise ValidationError("Cannot apply for leave in the past")

        total_days = self.calculate_leave_days(data.start_date, data.end_date, data.is_half_day)

        if await self.requests.find_overlapping(data.employee_id, data.start_date, data.end_date):
            raise StateConflictError(
                "Employee has overlapping leave requests for the specified dates"
            )

        year = data.start_date.year
        balance = await self.balances.find_for(data.employee_id, data.leave_type_id, year)
        if balance is None:
            await self.initialize_leave_balances(data.employee_id, year)
            balance = await self.get_leave_balance(data.employee_id, data.leave_type_id, year)
        if not leave_type.allow_negative_balance and balance.remaining_days < total_days:
            raise ValidationError("Insufficient leave balance for the requested days")

        notice = leave_type.min_days_notice or 0
        if (data.start_date - today).days < notice:
            raise ValidationError(f"Leave requires at least {notice} days notice")

        if leave_type.requires_approval:
            status = LeaveRequestStatus.PENDING.value
            balance.pending_days = Decimal(balance.pending_days or 0) + total_days
        else:
            status = LeaveRequestStatus.APPROVED.value
            balance.used_days = Decimal(balance.used_days or 0) + total_days

        request = LeaveRequest(
            employee_id=data.employee_id,
            leave_type_id=data.leave_type_id,
            start_date=data.start_date,
            end_date=data.end_date,
            total_days=total_days,
            is_half_day=data.is_half_day,
            reason=data.reason,
            status=status,
        )
        if status == LeaveRequestStatus.APPROVED.value:
            request.approved_at = utcnow()
        await self.requests.add(request)
        logger.info(
            "Leave request %s created for employee %s (%s day(s), %s)",
            request.leave_request_id,
            data.employee_id,
            total_days,
            status,
        )
        return request

    async def get_leave_request(self, leave_request_id: UUID) -> LeaveRequest:
        request = await self.requests.get(leave_request_id)
        if request is None:
            raise NotFoundError("Leave request", leave_request_id)
        return request

    async def get_employee_leave_requests(
        self, employee_id: UUID, status: str | None = None
    ) -> list[LeaveRequest]:
        await self._get_employee(employee_id)
        if status is None:
            return await self.requests.find_by_employee(employee_id)
        value = enum_value(LeaveRequestStatus, status, "leave status")
        return await self.requests.find_by_employee_and_status(employee_id, value)

    async def get_leave_requests_by_status(self, status: str) -> list[LeaveRequest]:
        value = enum_value(LeaveRequestStatus, status, "leave status")
        return await self.requests.find_by_status(value)

    async def approve_leave_request(self, leave_request_id: UUID, approved_by: str) -> LeaveRequest:
        request = await self.get_leave_request(leave_request_id)
        self._transition(request, LeaveRequestStatus.APPROVED)

        balance = await self._balance_for(request)
        if balance is not None:
            balance.pending_days = Decimal(balance.pending_days or 0) - request.total_days
            balance.used_days = Decimal(balance.used_days or 0) + request.total_days

        request.status = LeaveRequestStatus.APPROVED.value
        request.approved_by = approved_by
        request.approved_at = utcnow()
        await self.session.flush()
        return request

    async def reject_leave_request(
        self, leave_request_id: UUID, rejected_by: str, reason: str | None = None
    ) -> LeaveRequest:
        request = await self.get_leave_request(leave_request_id)
        self._transition(request, LeaveRequestStatus.REJECTED)
        await self._release(request)

        request.status = LeaveRequestStatus.REJECTED.value
        request.approved_by = rejected_by
        request.rejection_reason = reason
        await self.session.flush()
        return request

    async def cancel_leave_request(self, leave_request_id: UUID) -> LeaveRequest:
        request = await self.get_leave_request(leave_request_id)
        self._transition(request, LeaveRequestStatus.CANCELLED)
        await self._release(request)

        request.status = LeaveRequestStatus.CANCELLED.value
        request.cancelled_at = utcnow()
        await self.session.flush()
        return request

    async def withdraw_leave_request(self, leave_request_id: UUID) -> LeaveRequest:
        request = await self.get_leave_request(leave_request_id)
        self._transition(request, LeaveRequestStatus.WITHDRAWN)
        await self._release(request)

        request.status = LeaveRequestStatus.WITHDRAWN.value
        await self.session.flush()
        return request

    @staticmethod
    def calculate_leave_days(start: date, end: date, is_half_day: bool = False) -> Decimal:
        """Inclusive calendar days, or half a day."""
        if is_half_day:
            return HALF_DAY
        return Decimal((end - start).days + 1)

    def _transition(self, request: LeaveRequest, to_status: LeaveRequestStatus) -> None:
        if not LeaveRequestStateMachine.can_transition(request.status, to_status):
            raise StateConflictError("Leave request cannot be modified in current status")

    async def _release(self, request: LeaveRequest) -> None:
        """Give back the days booked by the request's current status."""
        balance = await self._balance_for(request)
        if balance is None:
            return
        if request.status == LeaveRequestStatus.PENDING.value:
            balance.pending_days = Decimal(balance.pending_days or 0) - request.total_days
        elif request.status == LeaveRequestStatus.APPROVED.value:
            balance.used_days = Decimal(balance.used_days or 0) - request.total_days

    async def _balance_for(self, request: LeaveRequest) -> LeaveBalance | None:
        return await self.balances.find_for(
            request.employee_id, request.leave_type_id, request.start_date.year
        )

    async def _get_employee(self, employee_id: UUID) -> Employee:
        employee = await self.employees.get(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee
