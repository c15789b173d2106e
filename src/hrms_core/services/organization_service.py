"""Organization service - tenant lifecycle and lookups."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError
from hrms_core.models import Organization
from hrms_core.models.enums import CompanySize
from hrms_core.repositories import (
    DepartmentRepository,
    EmployeeRepository,
    LocationRepository,
    OrganizationRepository,
    Page,
    PageRequest,
)
from hrms_core.services.common import apply_fields, enum_value, require

logger = logging.getLogger(__name__)


@dataclass
class OrganizationData:
    """Writable organization fields."""

    name: str
    legal_name: str | None = None
    tax_id: str | None = None
    industry: str | None = None
    company_size: str | None = None
    website: str | None = None
    headquarters_country: str | None = None
    subscription_tier: str | None = None


@dataclass
class OrganizationStatistics:
    total_organizations: int
    active_organizations: int
    small_companies: int
    medium_companies: int
    large_companies: int
    enterprise_companies: int


class OrganizationService:
    """Service for organizations, the tenant root.

    Deletion is refused while departments, locations or employees still
    reference the organization.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.organizations = OrganizationRepository(session)
        self.departments = DepartmentRepository(session)
        self.locations = LocationRepository(session)
        self.employees = EmployeeRepository(session)

    async def create_organization(self, data: OrganizationData) -> Organization:
        self._validate(data)

        if await self.organizations.exists_by_name(data.name):
            raise ConflictError("Organization with this name already exists")
        if data.legal_name and await self.organizations.exists_by_legal_name(data.legal_name):
            raise ConflictError("Organization with this legal name already exists")
        if data.tax_id and await self.organizations.exists_by_tax_id(data.tax_id):
            raise ConflictError("Organization with this tax ID already exists")

        organization = Organization(is_active=True)
        apply_fields(organization, data)
        await self.organizations.add(organization)
        logger.info("Created organization %s (%s)", organization.name, organization.organization_id)
        return organization

    async def update_organization(
        self, organization_id: UUID, data: OrganizationData
    ) -> Organization:
        organization = await self.get_organization(organization_id)
        self._validate(data)

        if data.name != organization.name:
            existing = await self.organizations.find_by_name(data.name)
            if existing is not None and existing.organization_id != organization_id:
                raise ConflictError("Organization with this name already exists")
        if data.legal_name and data.legal_name != organization.legal_name:
            existing = await self.organizations.find_by_legal_name(data.legal_name)
            if existing is not None and existing.organization_id != organization_id:
                raise ConflictError("Organization with this legal name already exists")
        if data.tax_id and data.tax_id != organization.tax_id:
            existing = await self.organizations.find_by_tax_id(data.tax_id)
            if existing is not None and existing.organization_id != organization_id:
                raise ConflictError("Organization with this tax ID already exists")

        apply_fields(organization, data)
        await self.session.flush()
        return organization

    async def get_organization(self, organization_id: UUID) -> Organization:
        organization = await self.organizations.get(organization_id)
        if organization is None:
            raise NotFoundError("Organization", organization_id)
        return organization

    async def get_organizations(self, page_request: PageRequest) -> Page[Organization]:
        return await self.organizations.paginate(page_request=page_request)

    async def search_organizations(
        self,
        page_request: PageRequest,
        name: str | None = None,
        industry: str | None = None,
        company_size: str | None = None,
    ) -> Page[Organization]:
        size = enum_value(CompanySize, company_size, "company size") if company_size else None
        return await self.organizations.search(
            page_request, name=name, industry=industry, company_size=size
        )

    async def get_active_organizations(self) -> list[Organization]:
        return await self.organizations.find_active()

    async def get_organizations_by_company_size(self, company_size: str) -> list[Organization]:
        size = enum_value(CompanySize, company_size, "company size")
        return await self.organizations.find_by_company_size(size)

    async def get_organizations_by_industry(self, industry: str) -> list[Organization]:
        return await self.organizations.find_by_industry(industry)

    async def delete_organization(self, organization_id: UUID) -> None:
        organization = await self.get_organization(organization_id)

        if await self.departments.exists_by_organization(organization_id):
            raise StateConflictError("Cannot delete organization with existing departments")
        if await self.locations.exists_by_organization(organization_id):
            raise StateConflictError("Cannot delete organization with existing locations")
        if await self.employees.exists_by_organization(organization_id):
            raise StateConflictError("Cannot delete organization with existing employees")

        await self.organizations.delete(organization)
        logger.info("Deleted organization %s", organization_id)

    async def activate_organization(self, organization_id: UUID) -> Organization:
        organization = await self.get_organization(organization_id)
        organization.is_active = True
        await self.session.flush()
        return organization

    async def deactivate_organization(self, organization_id: UUID) -> Organization:
        organization = await self.get_organization(organization_id)
        organization.is_active = False
        await self.session.flush()
        return organization

    async def get_organization_statistics(self) -> OrganizationStatistics:
        return OrganizationStatistics(
            total_organizations=await self.organizations.count(),
            active_organizations=await self.organizations.count_active(),
            small_companies=await self.organizations.count_by_company_size(CompanySize.SMALL.value),
            medium_companies=await self.organizations.count_by_company_size(
                CompanySize.MEDIUM.value
            ),
            large_companies=await self.organizations.count_by_company_size(CompanySize.LARGE.value),
            enterprise_companies=await self.organizations.count_by_company_size(
                CompanySize.ENTERPRISE.value
            ),
        )

    def _validate(self, data: OrganizationData) -> None:
        require(data.name, "Organization name is required")
        if data.company_size is not None:
            data.company_size = enum_value(CompanySize, data.company_size, "company size")
