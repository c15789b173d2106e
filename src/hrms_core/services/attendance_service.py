"""Attendance service - daily check-in/check-out and attendance reports.

Hours worked are the minutes between check-in and check-out, less the
configured break, in hours rounded half-up to two places. Anything over
the standard day counts as overtime.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.models import AttendanceRecord, Employee
from hrms_core.models.base import utcnow
from hrms_core.models.enums import AttendanceStatus
from hrms_core.repositories import (
    AttendanceRecordRepository,
    EmployeeRepository,
    Page,
    PageRequest,
)
from hrms_core.services.common import enum_value

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
STANDARD_HOURS = Decimal("8")


@dataclass
class AttendanceRecordData:
    employee_id: UUID
    attendance_date: date
    status: str = AttendanceStatus.PRESENT.value
    check_in_time: time | None = None
    check_out_time: time | None = None
    check_in_location: str | None = None
    check_out_location: str | None = None
    notes: str | None = None


@dataclass
class AttendanceUpdate:
    check_in_time: time | None = None
    check_out_time: time | None = None
    status: str | None = None
    check_in_location: str | None = None
    notes: str | None = None


@dataclass
class AttendanceReport:
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


class AttendanceService:
    """Service for attendance records.

    A check-in after ``work_start`` plus ``grace_minutes`` is marked LATE.
    Without a ``work_start`` every check-in is PRESENT.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        work_start: time | None = None,
        grace_minutes: int = 5,
        break_minutes: int = 0,
    ):
        self.session = session
        self.records = AttendanceRecordRepository(session)
        self.employees = EmployeeRepository(session)
        self.work_start = work_start
        self.grace_minutes = int(grace_minutes)
        self.break_minutes = int(break_minutes)

    async def check_in(
        self,
        employee_id: UUID,
        now: datetime | None = None,
        location: str | None = None,
        notes: str | None = None,
    ) -> AttendanceRecord:
        await self._get_employee(employee_id)
        now = now or datetime.now()
        today = now.date()
        check_in_time = now.time().replace(microsecond=0)

        record = await self.records.find_by_employee_and_date(employee_id, today)
        if record is not None and record.check_in_time is not None:
            raise StateConflictError("Employee has already checked in today")
        if record is None:
            record = AttendanceRecord(employee_id=employee_id, attendance_date=today)
            self.session.add(record)

        record.check_in_time = check_in_time
        record.check_in_location = location
        record.notes = notes
        record.status = self._arrival_status(now)
        await self.session.flush()
        logger.info("Employee %s checked in at %s (%s)", employee_id, check_in_time, record.status)
        return record

    async def check_out(
        self,
        employee_id: UUID,
        now: datetime | None = None,
        location: str | None = None,
        notes: str | None = None,
    ) -> AttendanceRecord:
        await self._get_employee(employee_id)
        now = now or datetime.now()
        check_out_time = now.time().replace(microsecond=0)

        record = await self.records.find_by_employee_and_date(employee_id, now.date())
        if record is None or record.check_in_time is None:
            raise StateConflictError("No check-in record found for today")
        if record.check_out_time is not None:
            raise StateConflictError("Employee has already checked out today")
        if check_out_time < record.check_in_time:
            raise ValidationError("Check-out time cannot be before check-in time")

        record.check_out_time = check_out_time
        if location is not None:
            record.check_out_location = location
        if notes is not None:
            record.notes = notes
        self._calculate_hours(record)
        await self.session.flush()
        logger.info("Employee %s checked out after %s hour(s)", employee_id, record.total_hours)
        return record

    async def record_attendance(self, data: AttendanceRecordData) -> AttendanceRecord:
        """Manual entry for a day, e.g. an absence or a corrected record."""
        await self._get_employee(data.employee_id)
        if await self.records.find_by_employee_and_date(data.employee_id, data.attendance_date):
            raise ConflictError("Attendance already recorded for this date")

        record = AttendanceRecord(
            employee_id=data.employee_id,
            attendance_date=data.attendance_date,
            status=enum_value(AttendanceStatus, data.status, "attendance status"),
            check_in_time=data.check_in_time,
            check_out_time=data.check_out_time,
            check_in_location=data.check_in_location,
            check_out_location=data.check_out_location,
            notes=data.notes,
        )
        self._calculate_hours(record)
        return await self.records.add(record)

    async def update_attendance_record(
        self, attendance_record_id: UUID, update: AttendanceUpdate
    ) -> AttendanceRecord:
        record = await self.get_attendance_record(attendance_record_id)
        if update.check_in_time is not None:
            record.check_in_time = update.check_in_time
        if update.check_out_time is not None:
            record.check_out_time = update.check_out_time
        if update.status is not None:
            record.status = enum_value(AttendanceStatus, update.status, "attendance status")
        if update.check_in_location is not None:
            record.check_in_location = update.check_in_location
        if update.notes is not None:
            record.notes = update.notes
        self._calculate_hours(record)
        await self.session.flush()
        return record

    async def approve_attendance(
        self, attendance_record_id: UUID, approver_id: UUID
    ) -> AttendanceRecord:
        record = await self.get_attendance_record(attendance_record_id)
        if record.approved_at is not None:
            raise StateConflictError("Attendance record is already approved")
        await self._get_employee(approver_id)
        record.approved_by_id = approver_id
        record.approved_at = utcnow()
        await self.session.flush()
        return record

    async def get_attendance_record(self, attendance_record_id: UUID) -> AttendanceRecord:
        record = await self.records.get(attendance_record_id)
        if record is None:
            raise NotFoundError("Attendance record", attendance_record_id)
        return record

    async def get_employee_attendance(
        self, employee_id: UUID, start: date | None = None, end: date | None = None
    ) -> list[AttendanceRecord]:
        await self._get_employee(employee_id)
        return await self.records.find_by_employee(employee_id, start, end)

    async def get_attendance_records(
        self,
        organization_id: UUID,
        page_request: PageRequest,
        status: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> Page[AttendanceRecord]:
        if status is not None:
            status = enum_value(AttendanceStatus, status, "attendance status")
        return await self.records.page_by_organization(
            organization_id, page_request, status, start, end
        )

    async def generate_attendance_report(
        self, employee_id: UUID, start: date, end: date
    ) -> AttendanceReport:
        if start > end:
            raise ValidationError("Start date cannot be after end date")
        employee = await self._get_employee(employee_id)
        records = await self.records.find_by_employee(employee_id, start, end)
        return AttendanceReport(
            employee_id=employee_id,
            employee_name=employee.full_name,
            start_date=start,
            end_date=end,
            present_days=sum(1 for r in records if r.is_present),
            absent_days=self._count(records, AttendanceStatus.ABSENT),
            late_days=self._count(records, AttendanceStatus.LATE),
            half_days=self._count(records, AttendanceStatus.HALF_DAY),
            total_hours_worked=sum((r.total_hours or Decimal(0) for r in records), Decimal(0)),
            total_overtime_hours=sum(
                (r.overtime_hours or Decimal(0) for r in records), Decimal(0)
            ),
        )

    def _arrival_status(self, now: datetime) -> str:
        if self.work_start is None:
            return AttendanceStatus.PRESENT.value
        cutoff = datetime.combine(now.date(), self.work_start) + timedelta(
            minutes=self.grace_minutes
        )
        if now.replace(tzinfo=None) > cutoff:
            return AttendanceStatus.LATE.value
        return AttendanceStatus.PRESENT.value

    def _calculate_hours(self, record: AttendanceRecord) -> None:
        if record.check_in_time is None or record.check_out_time is None:
            return
        if record.check_out_time < record.check_in_time:
            raise ValidationError("Check-out time cannot be before check-in time")

        day = record.attendance_date
        worked = datetime.combine(day, record.check_out_time) - datetime.combine(
            day, record.check_in_time
        )
        minutes = int(worked.total_seconds() // 60)
        break_hours = self._hours(self.break_minutes)
        total = max(self._hours(minutes) - break_hours, Decimal("0.00"))

        record.break_hours = break_hours
        record.total_hours = total
        record.overtime_hours = max(total - STANDARD_HOURS, Decimal("0.00"))

    @staticmethod
    def _hours(minutes: int) -> Decimal:
        return (Decimal(minutes) / Decimal(60)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    @staticmethod
    def _count(records: list[AttendanceRecord], status: AttendanceStatus) -> int:
        return sum(1 for r in records if r.status == status.value)

    async def _get_employee(self, employee_id: UUID) -> Employee:
        employee = await self.employees.get(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee
