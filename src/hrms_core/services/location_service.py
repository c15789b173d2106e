"""Location service."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError
from hrms_core.models import Location
from hrms_core.repositories import (
    EmployeeRepository,
    LocationRepository,
    OrganizationRepository,
    Page,
    PageRequest,
)
from hrms_core.services.common import apply_fields, require


@dataclass
class LocationData:
    """Writable location fields."""

    organization_id: UUID
    name: str
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state_province: str | None = None
    postal_code: str | None = None
    country: str | None = None
    timezone: str | None = None
    is_headquarters: bool = False


class LocationService:
    """Service for organization locations.

    At most one location per organization is flagged as headquarters; the
    headquarters can be neither deleted nor deactivated.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.locations = LocationRepository(session)
        self.organizations = OrganizationRepository(session)
        self.employees = EmployeeRepository(session)

    async def create_location(self, data: LocationData) -> Location:
        require(data.name, "Location name is required")
        await self._require_organization(data.organization_id)

        if await self.locations.find_by_organization_and_name(data.organization_id, data.name):
            raise ConflictError("Location with this name already exists in the organization")

        if data.is_headquarters:
            await self._clear_headquarters(data.organization_id)

        location = Location(is_active=True)
        apply_fields(location, data)
        return await self.locations.add(location)

    async def update_location(self, location_id: UUID, data: LocationData) -> Location:
        location = await self.get_location(location_id)
        require(data.name, "Location name is required")

        if data.name != location.name:
            existing = await self.locations.find_by_organization_and_name(
                location.organization_id, data.name
            )
            if existing is not None and existing.location_id != location_id:
                raise ConflictError("Location with this name already exists in the organization")

        if data.is_headquarters and not location.is_headquarters:
            await self._clear_headquarters(location.organization_id)

        apply_fields(location, data, exclude=("organization_id",))
        await self.session.flush()
        return location

    async def get_location(self, location_id: UUID) -> Location:
        location = await self.locations.get(location_id)
        if location is None:
            raise NotFoundError("Location", location_id)
        return location

    async def get_locations_by_organization(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[Location]:
        await self._require_organization(organization_id)
        return await self.locations.page_by_organization(organization_id, page_request)

    async def search_locations_by_name(
        self, organization_id: UUID, name: str, page_request: PageRequest
    ) -> Page[Location]:
        await self._require_organization(organization_id)
        return await self.locations.search_by_name(organization_id, name, page_request)

    async def get_locations_by_city(self, organization_id: UUID, city: str) -> list[Location]:
        return await self.locations.find_by_city(organization_id, city)

    async def get_locations_by_country(self, organization_id: UUID, country: str) -> list[Location]:
        return await self.locations.find_by_country(organization_id, country)

    async def get_locations_by_state_province(
        self, organization_id: UUID, state_province: str
    ) -> list[Location]:
        return await self.locations.find_by_state_province(organization_id, state_province)

    async def get_headquarters(self, organization_id: UUID) -> Location:
        await self._require_organization(organization_id)
        location = await self.locations.find_headquarters(organization_id)
        if location is None:
            raise NotFoundError("Location", message="Headquarters location not found")
        return location

    async def get_active_locations(self, organization_id: UUID) -> list[Location]:
        return await self.locations.find_active_by_organization(organization_id)

    async def delete_location(self, location_id: UUID) -> None:
        location = await self.get_location(location_id)
        if location.is_headquarters:
            raise StateConflictError("Cannot delete headquarters location")
        if await self.employees.exists_by_location(location_id):
            raise StateConflictError("Cannot delete location with assigned employees")
        await self.locations.delete(location)

    async def activate_location(self, location_id: UUID) -> Location:
        location = await self.get_location(location_id)
        location.is_active = True
        await self.session.flush()
        return location

    async def deactivate_location(self, location_id: UUID) -> Location:
        location = await self.get_location(location_id)
        if location.is_headquarters:
            raise StateConflictError("Cannot deactivate headquarters location")
        location.is_active = False
        await self.session.flush()
        return location

    async def count_locations_by_organization(self, organization_id: UUID) -> int:
        await self._require_organization(organization_id)
        return await self.locations.count_by_organization(organization_id)

    async def _require_organization(self, organization_id: UUID) -> None:
        if await self.organizations.get(organization_id) is None:
            raise NotFoundError("Organization", organization_id)

    async def _clear_headquarters(self, organization_id: UUID) -> None:
        current = await self.locations.find_headquarters(organization_id)
        if current is not None:
            current.is_headquarters = False
            await self.session.flush()
