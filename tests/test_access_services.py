"""Tests for users, roles and permissions."""

import pytest
import pytest_asyncio

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.models import Role, User
from hrms_core.repositories import PageRequest
from hrms_core.services import (
    OrganizationData,
    OrganizationService,
    PermissionService,
    RoleService,
    UserData,
    UserService,
)

# Password of the test_user fixture
TEST_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def system_role(session, test_user) -> Role:
    """Built-in role seeded outside the service layer."""
    role = Role(
        organization_id=test_user.organization_id,
        name="Administrator",
        description="Built-in administrator",
        is_system_role=True,
    )
    session.add(role)
    await session.flush()
    return role


@pytest_asyncio.fixture
async def globex_admin(session, test_user) -> User:
    """Acting user of a second organization."""
    other = await OrganizationService(session).create_organization(
        OrganizationData(name="Globex")
    )
    return await UserService(session).create_user(
        UserData(other.organization_id, "globex-admin", "admin@globex.test"), TEST_PASSWORD
    )


class TestUserService:
    """Test user accounts and credentials."""

    async def test_password_is_hashed(self, session, test_user):
        assert test_user.password_hash != TEST_PASSWORD
        assert test_user.password_hash.startswith("$pbkdf2-sha256$")

    async def test_verify_password(self, session, test_user):
        service = UserService(session)
        assert await service.verify_password("admin", TEST_PASSWORD) is True
        assert await service.verify_password("admin", "wrong-password") is False
        assert await service.verify_password("nobody", TEST_PASSWORD) is False

    async def test_inactive_user_cannot_authenticate(self, session, test_user):
        service = UserService(session)
        await service.deactivate_user(test_user.user_id)
        assert await service.verify_password("admin", TEST_PASSWORD) is False

    async def test_short_password_rejected(self, session, test_organization):
        with pytest.raises(ValidationError, match="at least 8 characters"):
            await UserService(session).create_user(
                UserData(test_organization.organization_id, "short", "short@acme.test"),
                "1234567",
            )

    async def test_duplicate_username_rejected(self, session, test_user):
        with pytest.raises(ConflictError, match="Username already exists"):
            await UserService(session).create_user(
                UserData(test_user.organization_id, "admin", "other@acme.test"), TEST_PASSWORD
            )

    async def test_username_unique_across_organizations(self, session, test_user, globex_admin):
        with pytest.raises(ConflictError, match="Username already exists"):
            await UserService(session).create_user(
                UserData(globex_admin.organization_id, "admin", "admin2@globex.test"),
                TEST_PASSWORD,
            )

    async def test_acting_user_scopes_roles_to_own_organization(
        self, session, test_user, globex_admin
    ):
        role = await RoleService(session).create_role("globex-admin", "Globex Role")
        assert role.organization_id == globex_admin.organization_id
        assert role.organization_id != test_user.organization_id

    async def test_duplicate_email_rejected(self, session, test_user):
        with pytest.raises(ConflictError, match="Email already exists"):
            await UserService(session).create_user(
                UserData(test_user.organization_id, "other", "admin@acme.test"), TEST_PASSWORD
            )

    async def test_update_user(self, session, test_user):
        user = await UserService(session).update_user(
            test_user.user_id, email="ada@acme.test", first_name="Ada"
        )
        assert user.email == "ada@acme.test"
        assert user.last_name == "Admin"

    async def test_activate_and_deactivate_guards(self, session, test_user):
        service = UserService(session)
        with pytest.raises(StateConflictError, match="already active"):
            await service.activate_user(test_user.user_id)

        await service.deactivate_user(test_user.user_id)
        with pytest.raises(StateConflictError, match="already inactive"):
            await service.deactivate_user(test_user.user_id)

    async def test_get_user_by_username(self, session, test_user):
        service = UserService(session)
        assert (await service.get_user_by_username("admin")).user_id == test_user.user_id
        with pytest.raises(NotFoundError, match="nobody"):
            await service.get_user_by_username("nobody")

    async def test_assign_and_remove_role(self, session, test_user):
        """Test that removal deactivates the assignment and reassignment reactivates it."""
        role = await RoleService(session).create_role("admin", "Payroll Clerk")
        service = UserService(session)

        link = await service.assign_role(test_user.user_id, role.role_id, assigned_by="admin")
        assert link.assigned_by == "admin"
        assert [r.name for r in await service.get_user_roles(test_user.user_id)] == [
            "Payroll Clerk"
        ]

        with pytest.raises(ConflictError, match="already has this role"):
            await service.assign_role(test_user.user_id, role.role_id)

        await service.remove_role(test_user.user_id, role.role_id)
        assert await service.get_user_roles(test_user.user_id) == []

        with pytest.raises(StateConflictError, match="does not have this role"):
            await service.remove_role(test_user.user_id, role.role_id)

        again = await service.assign_role(test_user.user_id, role.role_id)
        assert again.user_role_id == link.user_role_id
        assert again.is_active is True

    async def test_role_from_other_organization_rejected(self, session, test_user):
        other = await OrganizationService(session).create_organization(
            OrganizationData(name="Globex")
        )
        service = UserService(session)
        await service.create_user(
            UserData(other.organization_id, "globex-admin", "admin@globex.test"), TEST_PASSWORD
        )
        foreign_role = await RoleService(session).create_role("globex-admin", "Auditor")

        with pytest.raises(ValidationError, match="same organization"):
            await service.assign_role(test_user.user_id, foreign_role.role_id)


class TestRoleService:
    """Test roles scoped by the acting user's organization."""

    async def test_create_role_scoped_to_current_user(self, session, test_user):
        role = await RoleService(session).create_role("admin", "HR Manager", "Manages people")
        assert role.organization_id == test_user.organization_id
        assert role.is_system_role is False

    async def test_unknown_current_user(self, session, test_user):
        with pytest.raises(NotFoundError, match="Current user not found"):
            await RoleService(session).create_role("ghost", "HR Manager")

    async def test_duplicate_role_name_rejected(self, session, test_user):
        service = RoleService(session)
        await service.create_role("admin", "HR Manager")
        with pytest.raises(ConflictError, match="Role name already exists"):
            await service.create_role("admin", "HR Manager")

    async def test_update_role(self, session, test_user):
        service = RoleService(session)
        role = await service.create_role("admin", "HR Manager")
        updated = await service.update_role("admin", role.role_id, "People Lead", "Renamed")
        assert updated.name == "People Lead"
        assert updated.description == "Renamed"

    async def test_system_role_is_protected(self, session, system_role):
        """Test that system roles can be neither changed nor deleted."""
        service = RoleService(session)
        with pytest.raises(StateConflictError, match="Cannot modify system role"):
            await service.update_role("admin", system_role.role_id, "Root")
        with pytest.raises(StateConflictError, match="Cannot delete system role"):
            await service.delete_role("admin", system_role.role_id)

    async def test_assigned_role_cannot_be_deleted(self, session, test_user):
        role = await RoleService(session).create_role("admin", "HR Manager")
        await UserService(session).assign_role(test_user.user_id, role.role_id)

        with pytest.raises(StateConflictError, match="assigned to users"):
            await RoleService(session).delete_role("admin", role.role_id)

    async def test_delete_role(self, session, test_user):
        service = RoleService(session)
        role = await service.create_role("admin", "Temp")
        await service.delete_role("admin", role.role_id)
        with pytest.raises(NotFoundError):
            await service.get_role(role.role_id)

    async def test_grant_and_revoke_permission(self, session, test_user):
        """Test that revoked grants are reactivated instead of duplicated."""
        permission = await PermissionService(session).create_permission(
            "employee:read", resource="employee", action="read"
        )
        service = RoleService(session)
        role = await service.create_role("admin", "Viewer")

        grant = await service.assign_permission("admin", role.role_id, permission.permission_id)
        assert grant.granted_by == "admin"
        with pytest.raises(ConflictError, match="already has this permission"):
            await service.assign_permission("admin", role.role_id, permission.permission_id)

        await service.remove_permission("admin", role.role_id, permission.permission_id)
        assert await service.get_role_permissions(role.role_id) == []

        again = await service.assign_permission("admin", role.role_id, permission.permission_id)
        assert again.role_permission_id == grant.role_permission_id
        assert [p.name for p in await service.get_role_permissions(role.role_id)] == [
            "employee:read"
        ]

    async def test_system_role_permissions_cannot_be_removed(
        self, session, system_role, test_user
    ):
        permission = await PermissionService(session).create_permission("employee:read")
        service = RoleService(session)
        await service.assign_permission("admin", system_role.role_id, permission.permission_id)

        with pytest.raises(StateConflictError, match="system role"):
            await service.remove_permission("admin", system_role.role_id, permission.permission_id)

    async def test_roles_of_other_organization_are_hidden(self, session, test_user, globex_admin):
        """Test that a role cannot be changed from another organization."""
        permission = await PermissionService(session).create_permission("employee:read")
        service = RoleService(session)
        foreign = await service.create_role("globex-admin", "Viewer")
        assert foreign.organization_id == globex_admin.organization_id

        with pytest.raises(NotFoundError):
            await service.update_role("admin", foreign.role_id, "Renamed")
        with pytest.raises(NotFoundError):
            await service.assign_permission("admin", foreign.role_id, permission.permission_id)
        with pytest.raises(NotFoundError):
            await service.delete_role("admin", foreign.role_id)

        await service.assign_permission("globex-admin", foreign.role_id, permission.permission_id)
        with pytest.raises(NotFoundError):
            await service.remove_permission("admin", foreign.role_id, permission.permission_id)
        assert (await service.get_role(foreign.role_id)).name == "Viewer"

    async def test_rename_checks_role_organization(self, session, test_user, globex_admin):
        service = RoleService(session)
        await service.create_role("admin", "Viewer")
        await service.create_role("globex-admin", "Viewer")
        editor = await service.create_role("globex-admin", "Editor")

        with pytest.raises(ConflictError, match="Role name already exists"):
            await service.update_role("globex-admin", editor.role_id, "Viewer")

    async def test_listing_and_statistics(self, session, system_role):
        service = RoleService(session)
        await service.create_role("admin", "HR Manager")
        await service.create_role("admin", "Payroll Clerk")

        page = await service.get_roles("admin", PageRequest(page_size=2))
        assert page.total == 3
        assert [r.name for r in page.items] == ["Administrator", "HR Manager"]

        assert [r.name for r in await service.get_system_roles("admin")] == ["Administrator"]
        assert len(await service.get_custom_roles("admin")) == 2
        search = await service.search_roles("admin", "payroll", PageRequest())
        assert search.total == 1

        stats = await service.get_role_statistics("admin")
        assert (stats.total_roles, stats.system_roles, stats.custom_roles) == (3, 1, 2)


class TestPermissionService:
    """Test the permission catalog."""

    async def test_create_permission_derives_code(self, session):
        permission = await PermissionService(session).create_permission(
            "payroll:approve", resource="payroll", action="approve"
        )
        assert permission.code == "PAYROLL_APPROVE"

    async def test_duplicate_name_rejected(self, session):
        service = PermissionService(session)
        await service.create_permission("payroll:approve")
        with pytest.raises(ConflictError):
            await service.create_permission("payroll:approve")

    async def test_grouping_and_search(self, session):
        service = PermissionService(session)
        await service.create_permission("employee:read", resource="employee")
        await service.create_permission("employee:write", resource="employee")
        await service.create_permission(
            "payroll:approve", resource="payroll", description="Approve payroll runs"
        )
        await service.create_permission("audit", is_system_permission=True)

        grouped = await service.get_permissions_by_category()
        assert sorted(grouped) == ["Other", "employee", "payroll"]
        assert len(grouped["employee"]) == 2

        assert [p.name for p in await service.search_permissions("runs")] == ["payroll:approve"]
        assert len(await service.get_permissions_by_resource("employee")) == 2
        assert await service.permission_exists("audit") is True

        stats = await service.get_permission_statistics()
        assert (stats.total_permissions, stats.system_permissions, stats.custom_permissions) == (
            4,
            1,
            3,
        )

    async def test_get_by_name(self, session):
        service = PermissionService(session)
        await service.create_permission("employee:read")
        assert (await service.get_permission_by_name("employee:read")).code == "EMPLOYEE_READ"
        with pytest.raises(NotFoundError):
            await service.get_permission_by_name("missing")
