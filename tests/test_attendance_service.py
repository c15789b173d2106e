"""Tests for attendance records and holiday calendars."""

from datetime import date, datetime, time
from decimal import Decimal
from uuid import uuid4

import pytest

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.repositories import PageRequest
from hrms_core.services import (
    AttendanceRecordData,
    AttendanceService,
    AttendanceUpdate,
    HolidayData,
    HolidayService,
    OrganizationData,
    OrganizationService,
)

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)
NEW_YEAR = date(2030, 1, 1)


def at(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    return datetime.combine(day, time(hour, minute))


def office_hours(session) -> AttendanceService:
    return AttendanceService(session, work_start=time(9, 0), grace_minutes=5, break_minutes=30)


async def add_holiday(session, organization, day, name="Company Day", **kwargs):
    return await HolidayService(session).create_holiday(
        HolidayData(organization.organization_id, name, day, **kwargs), today=NEW_YEAR
    )


class TestCheckInOut:
    async def test_check_in_within_grace_is_present(self, session, test_employee):
        record = await office_hours(session).check_in(
            test_employee.employee_id, now=at(9, 4), location="Head Office"
        )

        assert record.attendance_date == MONDAY
        assert record.check_in_time == time(9, 4)
        assert record.status == "PRESENT"
        assert record.check_in_location == "Head Office"

    async def test_check_in_after_grace_is_late(self, session, test_employee):
        record = await office_hours(session).check_in(test_employee.employee_id, now=at(9, 10))
        assert record.status == "LATE"

    async def test_without_work_start_every_check_in_is_present(self, session, test_employee):
        record = await AttendanceService(session).check_in(
            test_employee.employee_id, now=at(11, 30)
        )
        assert record.status == "PRESENT"

    async def test_second_check_in_rejected(self, session, test_employee):
        service = office_hours(session)
        await service.check_in(test_employee.employee_id, now=at(9))

        with pytest.raises(StateConflictError, match="already checked in today"):
            await service.check_in(test_employee.employee_id, now=at(13))

    async def test_check_out_computes_hours_and_overtime(self, session, test_employee):
        service = office_hours(session)
        await service.check_in(test_employee.employee_id, now=at(9))

        record = await service.check_out(test_employee.employee_id, now=at(18, 30))

        assert record.check_out_time == time(18, 30)
        assert record.break_hours == Decimal("0.50")
        assert record.total_hours == Decimal("9.00")
        assert record.overtime_hours == Decimal("1.00")
        assert record.has_overtime

    async def test_hours_rounded_half_up(self, session, test_employee):
        service = AttendanceService(session)
        await service.check_in(test_employee.employee_id, now=at(9))

        # 7h 05m is 7.0833... hours
        record = await service.check_out(test_employee.employee_id, now=at(16, 5))

        assert record.total_hours == Decimal("7.08")
        assert record.overtime_hours == Decimal("0.00")
        assert not record.has_overtime

    async def test_check_out_without_check_in(self, session, test_employee):
        with pytest.raises(StateConflictError, match="No check-in record"):
            await office_hours(session).check_out(test_employee.employee_id, now=at(17))

    async def test_second_check_out_rejected(self, session, test_employee):
        service = office_hours(session)
        await service.check_in(test_employee.employee_id, now=at(9))
        await service.check_out(test_employee.employee_id, now=at(17))

        with pytest.raises(StateConflictError, match="already checked out today"):
            await service.check_out(test_employee.employee_id, now=at(18))

    async def test_check_out_before_check_in_rejected(self, session, test_employee):
        service = office_hours(session)
        await service.check_in(test_employee.employee_id, now=at(12))

        with pytest.raises(ValidationError, match="cannot be before check-in"):
            await service.check_out(test_employee.employee_id, now=at(11))

    async def test_unknown_employee(self, session, test_organization):
        with pytest.raises(NotFoundError):
            await AttendanceService(session).check_in(uuid4(), now=at(9))


class TestAttendanceRecords:
    async def test_manual_record_normalizes_status(self, session, test_employee):
        record = await AttendanceService(session).record_attendance(
            AttendanceRecordData(test_employee.employee_id, MONDAY, status="absent")
        )

        assert record.status == "ABSENT"
        assert not record.is_present
        assert record.total_hours is None

    async def test_manual_record_rejects_unknown_status(self, session, test_employee):
        with pytest.raises(ValidationError, match="Invalid attendance status 'sick'"):
            await AttendanceService(session).record_attendance(
                AttendanceRecordData(test_employee.employee_id, MONDAY, status="sick")
            )

    async def test_one_record_per_day(self, session, test_employee):
        service = AttendanceService(session)
        await service.record_attendance(AttendanceRecordData(test_employee.employee_id, MONDAY))

        with pytest.raises(ConflictError, match="already recorded"):
            await service.record_attendance(
                AttendanceRecordData(test_employee.employee_id, MONDAY, status="ABSENT")
            )

    async def test_update_recalculates_hours(self, session, test_employee):
        service = AttendanceService(session)
        record = await service.record_attendance(
            AttendanceRecordData(
                test_employee.employee_id,
                MONDAY,
                check_in_time=time(9),
                check_out_time=time(17),
            )
        )
        assert record.total_hours == Decimal("8.00")

        updated = await service.update_attendance_record(
            record.attendance_record_id,
            AttendanceUpdate(check_out_time=time(19), status="late", notes="Release night"),
        )

        assert updated.total_hours == Decimal("10.00")
        assert updated.overtime_hours == Decimal("2.00")
        assert updated.status == "LATE"
        assert updated.notes == "Release night"

    async def test_approve(self, session, test_employee, test_hourly_employee):
        service = AttendanceService(session)
        record = await service.record_attendance(
            AttendanceRecordData(test_hourly_employee.employee_id, MONDAY)
        )

        approved = await service.approve_attendance(
            record.attendance_record_id, test_employee.employee_id
        )
        assert approved.approved_by_id == test_employee.employee_id
        assert approved.approved_at is not None

        with pytest.raises(StateConflictError, match="already approved"):
            await service.approve_attendance(
                record.attendance_record_id, test_employee.employee_id
            )

    async def test_employee_history_in_range(self, session, test_employee):
        service = AttendanceService(session)
        for offset in range(3):
            day = date(2030, 1, 7 + offset)
            await service.record_attendance(AttendanceRecordData(test_employee.employee_id, day))

        records = await service.get_employee_attendance(
            test_employee.employee_id, date(2030, 1, 8), date(2030, 1, 31)
        )
        assert [r.attendance_date for r in records] == [date(2030, 1, 8), date(2030, 1, 9)]

    async def test_organization_listing_filters(
        self, session, test_organization, test_employee, test_hourly_employee
    ):
        service = AttendanceService(session)
        await service.record_attendance(AttendanceRecordData(test_employee.employee_id, MONDAY))
        await service.record_attendance(
            AttendanceRecordData(test_hourly_employee.employee_id, MONDAY, status="ABSENT")
        )
        other = await OrganizationService(session).create_organization(
            OrganizationData(name="Globex")
        )
        org_id = test_organization.organization_id

        everyone = await service.get_attendance_records(org_id, PageRequest())
        absent = await service.get_attendance_records(org_id, PageRequest(), status="absent")
        foreign = await service.get_attendance_records(other.organization_id, PageRequest())

        assert everyone.total == 2
        assert [r.employee_id for r in absent.items] == [test_hourly_employee.employee_id]
        assert foreign.total == 0

    async def test_report(self, session, test_employee):
        service = AttendanceService(session)
        employee_id = test_employee.employee_id
        days = [
            ("PRESENT", time(9), time(18)),
            ("LATE", time(10), time(18)),
            ("HALF_DAY", time(9), time(13)),
            ("ABSENT", None, None),
        ]
        for offset, (status, check_in, check_out) in enumerate(days):
            await service.record_attendance(
                AttendanceRecordData(
                    employee_id,
                    date(2030, 1, 7 + offset),
                    status=status,
                    check_in_time=check_in,
                    check_out_time=check_out,
                )
            )

        report = await service.generate_attendance_report(
            employee_id, date(2030, 1, 1), date(2030, 1, 31)
        )

        assert report.employee_name == "Jane Doe"
        assert report.present_days == 3
        assert report.late_days == 1
        assert report.half_days == 1
        assert report.absent_days == 1
        assert report.total_hours_worked == Decimal("21.00")
        assert report.total_overtime_hours == Decimal("1.00")

    async def test_report_rejects_inverted_range(self, session, test_employee):
        with pytest.raises(ValidationError, match="Start date cannot be after end date"):
            await AttendanceService(session).generate_attendance_report(
                test_employee.employee_id, date(2030, 2, 1), date(2030, 1, 1)
            )


class TestHolidays:
    async def test_create(self, session, test_organization):
        holiday = await add_holiday(
            session, test_organization, date(2030, 1, 9), holiday_type="national"
        )

        assert holiday.holiday_type == "NATIONAL"
        assert holiday.is_mandatory
        assert await HolidayService(session).is_holiday(
            test_organization.organization_id, date(2030, 1, 9)
        )

    async def test_one_holiday_per_date(self, session, test_organization):
        await add_holiday(session, test_organization, date(2030, 1, 9))

        with pytest.raises(ConflictError, match="already exists for this date"):
            await add_holiday(session, test_organization, date(2030, 1, 9), name="Other")

    async def test_past_date_rejected(self, session, test_organization):
        with pytest.raises(ValidationError, match="cannot be in the past"):
            await add_holiday(session, test_organization, date(2029, 12, 25))

    async def test_unknown_type_rejected(self, session, test_organization):
        with pytest.raises(ValidationError, match="Invalid holiday type"):
            await add_holiday(session, test_organization, date(2030, 1, 9), holiday_type="BANK")

    async def test_update_moves_date(self, session, test_organization):
        service = HolidayService(session)
        first = await add_holiday(session, test_organization, date(2030, 1, 9))
        second = await add_holiday(session, test_organization, date(2030, 1, 10), name="Second")
        org_id = test_organization.organization_id

        with pytest.raises(ConflictError):
            await service.update_holiday(
                second.holiday_id, HolidayData(org_id, "Second", date(2030, 1, 9))
            )

        moved = await service.update_holiday(
            first.holiday_id, HolidayData(org_id, "Moved", date(2030, 1, 11), is_optional=True)
        )
        assert moved.holiday_date == date(2030, 1, 11)
        assert moved.name == "Moved"
        assert moved.is_optional

    async def test_working_days_skip_weekends_and_holidays(self, session, test_organization):
        service = HolidayService(session)
        org_id = test_organization.organization_id
        sunday = date(2030, 1, 13)

        assert await service.calculate_working_days(org_id, MONDAY, sunday) == 5

        await add_holiday(session, test_organization, date(2030, 1, 9))
        assert await service.calculate_working_days(org_id, MONDAY, sunday) == 4

        with pytest.raises(ValidationError, match="Start date cannot be after end date"):
            await service.calculate_working_days(org_id, sunday, MONDAY)

    async def test_calendar_and_statistics(self, session, test_organization):
        await add_holiday(session, test_organization, date(2030, 1, 9), holiday_type="NATIONAL")
        await add_holiday(
            session, test_organization, date(2030, 3, 4), name="Founders", is_optional=True
        )
        await add_holiday(session, test_organization, date(2031, 1, 1), name="Next year")
        service = HolidayService(session)
        org_id = test_organization.organization_id

        calendar = await service.generate_holiday_calendar(org_id, 2030)
        statistics = await service.get_holiday_statistics(org_id, 2030)

        assert calendar.organization_name == "Acme Corp"
        assert calendar.total_holidays == 2
        assert calendar.mandatory_holidays == 1
        assert calendar.optional_holidays == 1
        assert calendar.count_by_type == {"NATIONAL": 1, "COMPANY": 1}
        assert calendar.count_by_month == {"JANUARY": 1, "MARCH": 1}
        assert (statistics.total_holidays, statistics.mandatory_holidays) == (2, 1)
        assert statistics.optional_holidays == 1

    async def test_listings(self, session, test_organization):
        await add_holiday(session, test_organization, date(2030, 1, 9), name="Winter Break")
        await add_holiday(
            session, test_organization, date(2030, 6, 3), name="Summer Break", is_optional=True
        )
        service = HolidayService(session)
        org_id = test_organization.organization_id

        mandatory = await service.get_mandatory_holidays(org_id)
        optional = await service.get_optional_holidays(org_id)
        upcoming = await service.get_upcoming_holidays(org_id, today=date(2030, 2, 1))
        in_range = await service.get_holidays_by_date_range(
            org_id, date(2030, 1, 1), date(2030, 1, 31)
        )
        found = await service.search_holidays(org_id, PageRequest(), name="summer")

        assert [h.name for h in mandatory] == ["Winter Break"]
        assert [h.name for h in optional] == ["Summer Break"]
        assert [h.name for h in upcoming] == ["Summer Break"]
        assert [h.name for h in in_range] == ["Winter Break"]
        assert [h.name for h in found.items] == ["Summer Break"]
        assert (await service.get_holidays(org_id, PageRequest())).total == 2

    async def test_past_holidays_cannot_be_deleted(self, session, test_organization):
        service = HolidayService(session)
        holiday = await add_holiday(session, test_organization, date(2030, 1, 9))

        with pytest.raises(ValidationError, match="Cannot delete past holidays"):
            await service.delete_holiday(holiday.holiday_id, today=date(2030, 2, 1))

        await service.delete_holiday(holiday.holiday_id, today=NEW_YEAR)
        with pytest.raises(NotFoundError):
            await service.get_holiday(holiday.holiday_id)
