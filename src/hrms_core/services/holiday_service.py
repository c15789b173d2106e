"""Holiday service - organization holiday calendars and working-day counts."""

from __future__ import annotations

import calendar
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, ValidationError
from hrms_core.models import Holiday, Organization
from hrms_core.models.enums import HolidayType
from hrms_core.repositories import HolidayRepository, OrganizationRepository, Page, PageRequest
from hrms_core.services.common import enum_value, require

logger = logging.getLogger(__name__)


@dataclass
class HolidayData:
    organization_id: UUID
    name: str
    holiday_date: date
    holiday_type: str = HolidayType.COMPANY.value
    is_optional: bool = False
    is_recurring: bool = False
    description: str | None = None


@dataclass
class HolidayCalendar:
    organization_id: UUID
    organization_name: str
    year: int
    holidays: list[Holiday] = field(default_factory=list)
    mandatory_holidays: int = 0
    optional_holidays: int = 0
    count_by_type: dict[str, int] = field(default_factory=dict)
    count_by_month: dict[str, int] = field(default_factory=dict)

    @property
    def total_holidays(self) -> int:
        return len(self.holidays)


@dataclass
class HolidayStatistics:
    organization_id: UUID
    organization_name: str
    year: int
    total_holidays: int
    mandatory_holidays: int
    optional_holidays: int


class HolidayService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.holidays = HolidayRepository(session)
        self.organizations = OrganizationRepository(session)

    async def create_holiday(self, data: HolidayData, today: date | None = None) -> Holiday:
        self._validate(data)
        today = today or date.today()
        await self._get_organization(data.organization_id)
        if await self.holidays.exists_by_organization_and_date(
            data.organization_id, data.holiday_date
        ):
            raise ConflictError("Holiday already exists for this date in the organization")
        if data.holiday_date < today:
            raise ValidationError("Holiday date cannot be in the past")

        holiday = Holiday(
            organization_id=data.organization_id,
            name=data.name,
            holiday_date=data.holiday_date,
            holiday_type=enum_value(HolidayType, data.holiday_type, "holiday type"),
            is_optional=data.is_optional,
            is_recurring=data.is_recurring,
            description=data.description,
        )
        await self.holidays.add(holiday)
        logger.info("Created holiday %s on %s", holiday.name, holiday.holiday_date)
        return holiday

    async def update_holiday(self, holiday_id: UUID, data: HolidayData) -> Holiday:
        holiday = await self.get_holiday(holiday_id)
        self._validate(data)
        await self._get_organization(data.organization_id)
        existing = await self.holidays.find_by_organization_and_date(
            data.organization_id, data.holiday_date
        )
        if existing is not None and existing.holiday_id != holiday_id:
            raise ConflictError("Holiday already exists for this date in the organization")

        holiday.organization_id = data.organization_id
        holiday.name = data.name
        holiday.holiday_date = data.holiday_date
        holiday.holiday_type = enum_value(HolidayType, data.holiday_type, "holiday type")
        holiday.is_optional = data.is_optional
        holiday.is_recurring = data.is_recurring
        holiday.description = data.description
        await self.session.flush()
        return holiday

    async def get_holiday(self, holiday_id: UUID) -> Holiday:
        holiday = await self.holidays.get(holiday_id)
        if holiday is None:
            raise NotFoundError("Holiday", holiday_id)
        return holiday

    async def get_holidays(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[Holiday]:
        return await self.holidays.page_by_organization(organization_id, page_request)

    async def search_holidays(
        self,
        organization_id: UUID,
        page_request: PageRequest,
        name: str | None = None,
        holiday_type: str | None = None,
        optional: bool | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> Page[Holiday]:
        if holiday_type is not None:
            holiday_type = enum_value(HolidayType, holiday_type, "holiday type")
        return await self.holidays.search(
            organization_id, page_request, name, holiday_type, optional, start, end
        )

    async def get_holidays_by_year(self, organization_id: UUID, year: int) -> list[Holiday]:
        return await self.holidays.find_by_year(organization_id, year)

    async def get_holidays_by_date_range(
        self, organization_id: UUID, start: date, end: date
    ) -> list[Holiday]:
        return await self.holidays.find_in_range(organization_id, start, end)

    async def get_mandatory_holidays(self, organization_id: UUID) -> list[Holiday]:
        return await self.holidays.find_by_optional_flag(organization_id, False)

    async def get_optional_holidays(self, organization_id: UUID) -> list[Holiday]:
        return await self.holidays.find_by_optional_flag(organization_id, True)

    async def get_upcoming_holidays(
        self, organization_id: UUID, today: date | None = None
    ) -> list[Holiday]:
        return await self.holidays.find_upcoming(organization_id, today or date.today())

    async def generate_holiday_calendar(self, organization_id: UUID, year: int) -> HolidayCalendar:
        """Holidays of a year with counts by type and by month name."""
        organization = await self._get_organization(organization_id)
        holidays = await self.holidays.find_by_year(organization_id, year)
        mandatory = sum(1 for h in holidays if h.is_mandatory)
        return HolidayCalendar(
            organization_id=organization_id,
            organization_name=organization.name,
            year=year,
            holidays=holidays,
            mandatory_holidays=mandatory,
            optional_holidays=len(holidays) - mandatory,
            count_by_type=dict(Counter(h.holiday_type for h in holidays)),
            count_by_month=dict(
                Counter(calendar.month_name[h.holiday_date.month].upper() for h in holidays)
            ),
        )

    async def calculate_working_days(self, organization_id: UUID, start: date, end: date) -> int:
        """Weekdays between start and end inclusive that are not holidays."""
        if start > end:
            raise ValidationError("Start date cannot be after end date")
        holiday_dates = {
            h.holiday_date for h in await self.holidays.find_in_range(organization_id, start, end)
        }
        days = 0
        current = start
        while current <= end:
            if current.weekday() < 5 and current not in holiday_dates:
                days += 1
            current += timedelta(days=1)
        return days

    async def is_holiday(self, organization_id: UUID, day: date) -> bool:
        return await self.holidays.exists_by_organization_and_date(organization_id, day)

    async def delete_holiday(self, holiday_id: UUID, today: date | None = None) -> None:
        holiday = await self.get_holiday(holiday_id)
        if holiday.holiday_date < (today or date.today()):
            raise ValidationError("Cannot delete past holidays")
        await self.holidays.delete(holiday)
        logger.info("Deleted holiday %s", holiday_id)

    async def get_holiday_statistics(self, organization_id: UUID, year: int) -> HolidayStatistics:
        organization = await self._get_organization(organization_id)
        total = await self.holidays.count_by_year(organization_id, year)
        mandatory = await self.holidays.count_by_year(organization_id, year, optional=False)
        return HolidayStatistics(
            organization_id=organization_id,
            organization_name=organization.name,
            year=year,
            total_holidays=total,
            mandatory_holidays=mandatory,
            optional_holidays=total - mandatory,
        )

    @staticmethod
    def _validate(data: HolidayData) -> None:
        require(data.name, "Holiday name is required")
        require(data.holiday_date, "Holiday date is required")

    async def _get_organization(self, organization_id: UUID) -> Organization:
        organization = await self.organizations.get(organization_id)
        if organization is None:
            raise NotFoundError("Organization", organization_id)
        return organization
