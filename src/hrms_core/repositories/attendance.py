"""Attendance record and holiday repositories."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import ColumnElement, select

from hrms_core.models import AttendanceRecord, Employee, Holiday
from hrms_core.repositories.base import Page, PageRequest, Repository


class AttendanceRecordRepository(Repository[AttendanceRecord]):
    model = AttendanceRecord
    default_order = "attendance_date"

    async def find_by_employee_and_date(
        self, employee_id: UUID, attendance_date: date
    ) -> AttendanceRecord | None:
        return await self.find_one(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.attendance_date == attendance_date,
        )

    async def find_by_employee(
        self, employee_id: UUID, start: date | None = None, end: date | None = None
    ) -> list[AttendanceRecord]:
        criteria: list[ColumnElement[bool]] = [AttendanceRecord.employee_id == employee_id]
        if start is not None:
            criteria.append(AttendanceRecord.attendance_date >= start)
        if end is not None:
            criteria.append(AttendanceRecord.attendance_date <= end)
        return await self.find(*criteria)

    async def page_by_organization(
        self,
        organization_id: UUID,
        page_request: PageRequest,
        status: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> Page[AttendanceRecord]:
        employees = select(Employee.employee_id).where(Employee.organization_id == organization_id)
        criteria: list[ColumnElement[bool]] = [AttendanceRecord.employee_id.in_(employees)]
        if status is not None:
            criteria.append(AttendanceRecord.status == status)
        if start is not None:
            criteria.append(AttendanceRecord.attendance_date >= start)
        if end is not None:
            criteria.append(AttendanceRecord.attendance_date <= end)
        return await self.paginate(*criteria, page_request=page_request)


class HolidayRepository(Repository[Holiday]):
    model = Holiday
    default_order = "holiday_date"

    async def find_by_organization_and_date(
        self, organization_id: UUID, holiday_date: date
    ) -> Holiday | None:
        return await self.find_one(
            Holiday.organization_id == organization_id,
            Holiday.holiday_date == holiday_date,
        )

    async def exists_by_organization_and_date(
        self, organization_id: UUID, holiday_date: date
    ) -> bool:
        return await self.exists(
            Holiday.organization_id == organization_id,
            Holiday.holiday_date == holiday_date,
        )

    async def find_in_range(self, organization_id: UUID, start: date, end: date) -> list[Holiday]:
        return await self.find(
            Holiday.organization_id == organization_id,
            Holiday.holiday_date >= start,
            Holiday.holiday_date <= end,
        )

    async def find_by_year(self, organization_id: UUID, year: int) -> list[Holiday]:
        return await self.find_in_range(organization_id, date(year, 1, 1), date(year, 12, 31))

    async def find_by_optional_flag(self, organization_id: UUID, optional: bool) -> list[Holiday]:
        return await self.find(
            Holiday.organization_id == organization_id,
            Holiday.is_optional.is_(optional),
        )

    async def find_upcoming(self, organization_id: UUID, today: date) -> list[Holiday]:
        return await self.find(
            Holiday.organization_id == organization_id,
            Holiday.holiday_date >= today,
        )

    async def page_by_organization(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[Holiday]:
        return await self.paginate(
            Holiday.organization_id == organization_id, page_request=page_request
        )

    async def search(
        self,
        organization_id: UUID,
        page_request: PageRequest,
        name: str | None = None,
        holiday_type: str | None = None,
        optional: bool | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> Page[Holiday]:
        criteria: list[ColumnElement[bool]] = [Holiday.organization_id == organization_id]
        if name:
            criteria.append(Holiday.name.ilike(f"%{name}%"))
        if holiday_type is not None:
            criteria.append(Holiday.holiday_type == holiday_type)
        if optional is not None:
            criteria.append(Holiday.is_optional.is_(optional))
        if start is not None:
            criteria.append(Holiday.holiday_date >= start)
        if end is not None:
            criteria.append(Holiday.holiday_date <= end)
        return await self.paginate(*criteria, page_request=page_request)

    async def count_by_year(
        self, organization_id: UUID, year: int, optional: bool | None = None
    ) -> int:
        criteria: list[ColumnElement[bool]] = [
            Holiday.organization_id == organization_id,
            Holiday.holiday_date >= date(year, 1, 1),
            Holiday.holiday_date <= date(year, 12, 31),
        ]
        if optional is not None:
            criteria.append(Holiday.is_optional.is_(optional))
        return await self.count(*criteria)

    async def exists_by_organization(self, organization_id: UUID) -> bool:
        return await self.exists(Holiday.organization_id == organization_id)
