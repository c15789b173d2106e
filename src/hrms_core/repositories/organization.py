"""Organization, location and department repositories."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select

from hrms_core.models import Department, Location, Organization
from hrms_core.repositories.base import Page, PageRequest, Repository


class OrganizationRepository(Repository[Organization]):
    model = Organization
    default_order = "name"

    async def find_by_name(self, name: str) -> Organization | None:
        return await self.find_one(Organization.name == name)

    async def find_by_legal_name(self, legal_name: str) -> Organization | None:
        return await self.find_one(Organization.legal_name == legal_name)

    async def find_by_tax_id(self, tax_id: str) -> Organization | None:
        return await self.find_one(Organization.tax_id == tax_id)

    async def exists_by_name(self, name: str) -> bool:
        return await self.exists(Organization.name == name)

    async def exists_by_legal_name(self, legal_name: str) -> bool:
        return await self.exists(Organization.legal_name == legal_name)

    async def exists_by_tax_id(self, tax_id: str) -> bool:
        return await self.exists(Organization.tax_id == tax_id)

    async def find_active(self) -> list[Organization]:
        return await self.find(Organization.is_active.is_(True))

    async def find_by_company_size(self, company_size: str) -> list[Organization]:
        return await self.find(Organization.company_size == company_size)

    async def find_by_industry(self, industry: str) -> list[Organization]:
        return await self.find(func.lower(Organization.industry) == industry.lower())

    async def count_active(self) -> int:
        return await self.count(Organization.is_active.is_(True))

    async def count_by_company_size(self, company_size: str) -> int:
        return await self.count(Organization.company_size == company_size)

    async def search(
        self,
        page_request: PageRequest,
        name: str | None = None,
        industry: str | None = None,
        company_size: str | None = None,
    ) -> Page[Organization]:
        """Filter by name fragment, industry fragment and exact company size."""
        query = select(Organization)
        if name:
            query = query.where(Organization.name.ilike(f"%{name}%"))
        if industry:
            query = query.where(Organization.industry.ilike(f"%{industry}%"))
        if company_size:
            query = query.where(Organization.company_size == company_size)
        return await self.paginate_query(query, page_request)


class LocationRepository(Repository[Location]):
    model = Location
    default_order = "name"

    async def find_by_organization(self, organization_id: UUID) -> list[Location]:
        return await self.find(Location.organization_id == organization_id)

    async def page_by_organization(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[Location]:
        return await self.paginate(
            Location.organization_id == organization_id, page_request=page_request
        )

    async def search_by_name(
        self, organization_id: UUID, name: str, page_request: PageRequest
    ) -> Page[Location]:
        return await self.paginate(
            Location.organization_id == organization_id,
            Location.name.ilike(f"%{name}%"),
            page_request=page_request,
        )

    async def find_by_organization_and_name(
        self, organization_id: UUID, name: str
    ) -> Location | None:
        return await self.find_one(
            Location.organization_id == organization_id, Location.name == name
        )

    async def find_by_city(self, organization_id: UUID, city: str) -> list[Location]:
        return await self.find(
            Location.organization_id == organization_id,
            func.lower(Location.city) == city.lower(),
        )

    async def find_by_country(self, organization_id: UUID, country: str) -> list[Location]:
        return await self.find(
            Location.organization_id == organization_id,
            func.lower(Location.country) == country.lower(),
        )

    async def find_by_state_province(
        self, organization_id: UUID, state_province: str
    ) -> list[Location]:
        return await self.find(
            Location.organization_id == organization_id,
            func.lower(Location.state_province) == state_province.lower(),
        )

    async def find_headquarters(self, organization_id: UUID) -> Location | None:
        return await self.find_one(
            Location.organization_id == organization_id,
            Location.is_headquarters.is_(True),
        )

    async def find_active_by_organization(self, organization_id: UUID) -> list[Location]:
        return await self.find(
            Location.organization_id == organization_id,
            Location.is_active.is_(True),
        )

    async def count_by_organization(self, organization_id: UUID) -> int:
        return await self.count(Location.organization_id == organization_id)

    async def exists_by_organization(self, organization_id: UUID) -> bool:
        return await self.exists(Location.organization_id == organization_id)


class DepartmentRepository(Repository[Department]):
    model = Department
    default_order = "name"

    async def find_by_organization(self, organization_id: UUID) -> list[Department]:
        return await self.find(Department.organization_id == organization_id)

    async def page_by_organization(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[Department]:
        return await self.paginate(
            Department.organization_id == organization_id, page_request=page_request
        )

    async def search_by_name(
        self, organization_id: UUID, name: str, page_request: PageRequest
    ) -> Page[Department]:
        return await self.paginate(
            Department.organization_id == organization_id,
            Department.name.ilike(f"%{name}%"),
            page_request=page_request,
        )

    async def find_by_organization_and_code(
        self, organization_id: UUID, code: str
    ) -> Department | None:
        return await self.find_one(
            Department.organization_id == organization_id, Department.code == code
        )

    async def find_by_organization_and_name(
        self, organization_id: UUID, name: str
    ) -> Department | None:
        return await self.find_one(
            Department.organization_id == organization_id, Department.name == name
        )

    async def find_roots(self, organization_id: UUID) -> list[Department]:
        return await self.find(
            Department.organization_id == organization_id,
            Department.parent_department_id.is_(None),
        )

    async def find_children(self, parent_department_id: UUID) -> list[Department]:
        return await self.find(Department.parent_department_id == parent_department_id)

    async def exists_children(self, parent_department_id: UUID) -> bool:
        return await self.exists(Department.parent_department_id == parent_department_id)

    async def count_by_organization(self, organization_id: UUID) -> int:
        return await self.count(Department.organization_id == organization_id)

    async def exists_by_organization(self, organization_id: UUID) -> bool:
        return await self.exists(Department.organization_id == organization_id)
