"""Tests for organizations and locations."""

from uuid import uuid4

import pytest

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.repositories import PageRequest
from hrms_core.services import (
    EmployeeData,
    EmployeeService,
    LocationData,
    LocationService,
    OrganizationData,
    OrganizationService,
)


class TestOrganizationService:
    """Test organization lifecycle and uniqueness rules."""

    async def test_create_organization(self, session, test_organization):
        """Test that a new organization starts active with normalized size."""
        assert test_organization.organization_id is not None
        assert test_organization.is_active is True
        assert test_organization.company_size == "MEDIUM"

    async def test_company_size_is_normalized(self, session):
        """Test that company size is accepted case-insensitively."""
        org = await OrganizationService(session).create_organization(
            OrganizationData(name="Globex", company_size="large")
        )
        assert org.company_size == "LARGE"

    async def test_invalid_company_size_rejected(self, session):
        with pytest.raises(ValidationError, match="Invalid company size"):
            await OrganizationService(session).create_organization(
                OrganizationData(name="Globex", company_size="HUGE")
            )

    async def test_blank_name_rejected(self, session):
        with pytest.raises(ValidationError, match="Organization name is required"):
            await OrganizationService(session).create_organization(OrganizationData(name="  "))

    @pytest.mark.parametrize(
        "data, message",
        [
            (OrganizationData(name="Acme Corp"), "name already exists"),
            (
                OrganizationData(name="Other", legal_name="Acme Corporation Inc."),
                "legal name already exists",
            ),
            (OrganizationData(name="Other", tax_id="12-3456789"), "tax ID already exists"),
        ],
    )
    async def test_duplicate_identity_rejected(self, session, test_organization, data, message):
        """Test that name, legal name and tax ID are each globally unique."""
        with pytest.raises(ConflictError, match=message):
            await OrganizationService(session).create_organization(data)

    async def test_update_keeps_own_name(self, session, test_organization):
        """Test that updating an organization with its own identity is allowed."""
        service = OrganizationService(session)
        updated = await service.update_organization(
            test_organization.organization_id,
            OrganizationData(
                name="Acme Corp",
                legal_name="Acme Corporation Inc.",
                tax_id="12-3456789",
                industry="Manufacturing",
            ),
        )
        assert updated.industry == "Manufacturing"

    async def test_update_to_taken_name_rejected(self, session, test_organization):
        service = OrganizationService(session)
        other = await service.create_organization(OrganizationData(name="Globex"))
        with pytest.raises(ConflictError):
            await service.update_organization(
                other.organization_id, OrganizationData(name="Acme Corp")
            )

    async def test_get_missing_organization(self, session):
        with pytest.raises(NotFoundError):
            await OrganizationService(session).get_organization(uuid4())

    async def test_search_organizations(self, session, test_organization):
        """Test name fragment, industry and company size filters."""
        service = OrganizationService(session)
        await service.create_organization(
            OrganizationData(name="Globex", industry="Energy", company_size="SMALL")
        )

        page = await service.search_organizations(PageRequest(), name="acme")
        assert [o.name for o in page.items] == ["Acme Corp"]

        page = await service.search_organizations(PageRequest(), industry="energy")
        assert [o.name for o in page.items] == ["Globex"]

        page = await service.search_organizations(PageRequest(), company_size="small")
        assert page.total == 1

    async def test_paging(self, session):
        service = OrganizationService(session)
        for i in range(5):
            await service.create_organization(OrganizationData(name=f"Org {i}"))

        page = await service.get_organizations(PageRequest(page=2, page_size=2, sort_by="name"))
        assert [o.name for o in page.items] == ["Org 2", "Org 3"]
        assert page.total == 5
        assert page.total_pages == 3
        assert page.has_next is True

    async def test_activate_deactivate(self, session, test_organization):
        service = OrganizationService(session)
        org = await service.deactivate_organization(test_organization.organization_id)
        assert org.is_active is False
        assert await service.get_active_organizations() == []

        org = await service.activate_organization(test_organization.organization_id)
        assert org.is_active is True

    async def test_statistics(self, session, test_organization):
        service = OrganizationService(session)
        await service.create_organization(OrganizationData(name="Globex", company_size="SMALL"))
        other = await service.create_organization(OrganizationData(name="Initech"))
        await service.deactivate_organization(other.organization_id)

        stats = await service.get_organization_statistics()
        assert stats.total_organizations == 3
        assert stats.active_organizations == 2
        assert stats.small_companies == 1
        assert stats.medium_companies == 1
        assert stats.large_companies == 0

    async def test_delete_empty_organization(self, session):
        service = OrganizationService(session)
        org = await service.create_organization(OrganizationData(name="Short Lived"))
        await service.delete_organization(org.organization_id)

        with pytest.raises(NotFoundError):
            await service.get_organization(org.organization_id)

    async def test_delete_blocked_by_departments(self, session, test_department):
        with pytest.raises(StateConflictError, match="existing departments"):
            await OrganizationService(session).delete_organization(
                test_department.organization_id
            )

    async def test_delete_blocked_by_locations(self, session, test_location):
        with pytest.raises(StateConflictError, match="existing locations"):
            await OrganizationService(session).delete_organization(
                test_location.organization_id
            )

    async def test_delete_blocked_by_employees(self, session, test_hourly_employee):
        with pytest.raises(StateConflictError, match="existing employees"):
            await OrganizationService(session).delete_organization(
                test_hourly_employee.organization_id
            )


class TestLocationService:
    """Test locations and the single-headquarters rule."""

    async def test_create_location(self, session, test_location):
        assert test_location.is_headquarters is True
        assert test_location.is_active is True

    async def test_duplicate_name_rejected(self, session, test_location):
        with pytest.raises(ConflictError, match="already exists in the organization"):
            await LocationService(session).create_location(
                LocationData(organization_id=test_location.organization_id, name="Head Office")
            )

    async def test_same_name_in_other_organization(self, session, test_location):
        """Test that location names are unique only within an organization."""
        other = await OrganizationService(session).create_organization(
            OrganizationData(name="Globex")
        )
        location = await LocationService(session).create_location(
            LocationData(organization_id=other.organization_id, name="Head Office")
        )
        assert location.location_id != test_location.location_id

    async def test_unknown_organization(self, session):
        with pytest.raises(NotFoundError):
            await LocationService(session).create_location(
                LocationData(organization_id=uuid4(), name="Nowhere")
            )

    async def test_new_headquarters_replaces_old(self, session, test_location):
        """Test that flagging a new headquarters clears the previous one."""
        service = LocationService(session)
        branch = await service.create_location(
            LocationData(
                organization_id=test_location.organization_id,
                name="New Campus",
                is_headquarters=True,
            )
        )
        await session.refresh(test_location)

        assert test_location.is_headquarters is False
        hq = await service.get_headquarters(test_location.organization_id)
        assert hq.location_id == branch.location_id

    async def test_missing_headquarters(self, session, test_organization):
        with pytest.raises(NotFoundError, match="Headquarters location not found"):
            await LocationService(session).get_headquarters(test_organization.organization_id)

    async def test_headquarters_cannot_be_deleted(self, session, test_location):
        with pytest.raises(StateConflictError, match="Cannot delete headquarters location"):
            await LocationService(session).delete_location(test_location.location_id)

    async def test_headquarters_cannot_be_deactivated(self, session, test_location):
        with pytest.raises(StateConflictError, match="Cannot deactivate headquarters location"):
            await LocationService(session).deactivate_location(test_location.location_id)

    async def test_location_with_employees_cannot_be_deleted(
        self, session, test_location, test_hourly_employee
    ):
        service = LocationService(session)
        branch = await service.create_location(
            LocationData(organization_id=test_location.organization_id, name="Branch")
        )
        await EmployeeService(session).update_employee(
            test_hourly_employee.employee_id,
            EmployeeData(
                organization_id=test_hourly_employee.organization_id,
                employee_number="E002",
                first_name="John",
                last_name="Smith",
                employment_type="PART_TIME",
                location_id=branch.location_id,
                hourly_rate=test_hourly_employee.hourly_rate,
            ),
        )

        with pytest.raises(StateConflictError, match="assigned employees"):
            await service.delete_location(branch.location_id)

    async def test_filters(self, session, test_location):
        service = LocationService(session)
        await service.create_location(
            LocationData(
                organization_id=test_location.organization_id,
                name="Toronto Office",
                city="Toronto",
                state_province="ON",
                country="CA",
            )
        )
        org_id = test_location.organization_id

        assert [loc.name for loc in await service.get_locations_by_country(org_id, "CA")] == [
            "Toronto Office"
        ]
        assert len(await service.get_locations_by_city(org_id, "Springfield")) == 1
        assert len(await service.get_locations_by_state_province(org_id, "ON")) == 1
        assert await service.count_locations_by_organization(org_id) == 2

        page = await service.search_locations_by_name(org_id, "office", PageRequest())
        assert page.total == 2

    async def test_deactivate_branch(self, session, test_location):
        service = LocationService(session)
        branch = await service.create_location(
            LocationData(organization_id=test_location.organization_id, name="Branch")
        )
        await service.deactivate_location(branch.location_id)

        active = await service.get_active_locations(test_location.organization_id)
        assert [loc.location_id for loc in active] == [test_location.location_id]
