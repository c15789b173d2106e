"""Leave type, balance and request repositories."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from hrms_core.models import LeaveBalance, LeaveRequest, LeaveType
from hrms_core.repositories.base import Repository


class LeaveTypeRepository(Repository[LeaveType]):
    model = LeaveType
    default_order = "name"

    async def find_active_by_organization(self, organization_id: UUID) -> list[LeaveType]:
        return await self.find(
            LeaveType.organization_id == organization_id,
            LeaveType.is_active.is_(True),
        )

    async def exists_by_organization_and_code(self, organization_id: UUID, code: str) -> bool:
        return await self.exists(
            LeaveType.organization_id == organization_id,
            LeaveType.code == code,
        )

    async def find_carry_forward_types(self) -> list[LeaveType]:
        return await self.find(
            LeaveType.is_active.is_(True),
            LeaveType.is_carry_forward.is_(True),
        )

    async def count_by_organization(self, organization_id: UUID) -> int:
        return await self.count(LeaveType.organization_id == organization_id)


class LeaveBalanceRepository(Repository[LeaveBalance]):
    model = LeaveBalance

    async def find_for(
        self, employee_id: UUID, leave_type_id: UUID, year: int
    ) -> LeaveBalance | None:
        return await self.find_one(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.leave_type_id == leave_type_id,
            LeaveBalance.year == year,
        )

    async def find_by_employee_and_year(self, employee_id: UUID, year: int) -> list[LeaveBalance]:
        return await self.find(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.year == year,
        )

    async def find_by_type_and_year(self, leave_type_id: UUID, year: int) -> list[LeaveBalance]:
        return await self.find(
            LeaveBalance.leave_type_id == leave_type_id,
            LeaveBalance.year == year,
        )


class LeaveRequestRepository(Repository[LeaveRequest]):
    model = LeaveRequest
    default_order = "start_date"

    async def find_by_employee(self, employee_id: UUID) -> list[LeaveRequest]:
        return await self.find(
            LeaveRequest.employee_id == employee_id,
            order_by=[LeaveRequest.start_date.desc()],
        )

    async def find_by_employee_and_status(
        self, employee_id: UUID, status: str
    ) -> list[LeaveRequest]:
        return await self.find(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status == status,
        )

    async def find_overlapping(
        self, employee_id: UUID, start: date, end: date
    ) -> list[LeaveRequest]:
        """Pending or approved requests whose range intersects [start, end]."""
        return await self.find(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status.in_(("PENDING", "APPROVED")),
            LeaveRequest.start_date <= end,
            LeaveRequest.end_date >= start,
        )

    async def find_by_status(self, status: str) -> list[LeaveRequest]:
        return await self.find(LeaveRequest.status == status)
