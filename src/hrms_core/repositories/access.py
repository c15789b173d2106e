"""User, role and permission repositories."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import distinct, or_, select

from hrms_core.models import Permission, Role, RolePermission, User, UserRole
from hrms_core.repositories.base import Page, PageRequest, Repository


class UserRepository(Repository[User]):
    model = User
    default_order = "username"

    async def find_by_username(self, username: str) -> User | None:
        return await self.find_one(User.username == username)

    async def exists_by_username(self, username: str) -> bool:
        return await self.exists(User.username == username)

    async def find_by_organization_and_email(
        self, organization_id: UUID, email: str
    ) -> User | None:
        return await self.find_one(User.organization_id == organization_id, User.email == email)

    async def find_active_by_organization(self, organization_id: UUID) -> list[User]:
        return await self.find(User.organization_id == organization_id, User.is_active.is_(True))

    async def count_by_organization(self, organization_id: UUID) -> int:
        return await self.count(User.organization_id == organization_id)


class RoleRepository(Repository[Role]):
    model = Role
    default_order = "name"

    async def find_by_organization_and_name(self, organization_id: UUID, name: str) -> Role | None:
        return await self.find_one(Role.organization_id == organization_id, Role.name == name)

    async def exists_by_organization_and_name(self, organization_id: UUID, name: str) -> bool:
        return await self.exists(Role.organization_id == organization_id, Role.name == name)

    async def page_by_organization(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[Role]:
        return await self.paginate(
            Role.organization_id == organization_id, page_request=page_request
        )

    async def search_by_name(
        self, organization_id: UUID, name: str, page_request: PageRequest
    ) -> Page[Role]:
        return await self.paginate(
            Role.organization_id == organization_id,
            Role.name.ilike(f"%{name}%"),
            page_request=page_request,
        )

    async def find_by_organization(self, organization_id: UUID) -> list[Role]:
        return await self.find(Role.organization_id == organization_id)

    async def find_by_system_flag(self, organization_id: UUID, is_system: bool) -> list[Role]:
        return await self.find(
            Role.organization_id == organization_id,
            Role.is_system_role.is_(is_system),
        )

    async def count_by_organization(self, organization_id: UUID) -> int:
        return await self.count(Role.organization_id == organization_id)

    async def count_by_system_flag(self, organization_id: UUID, is_system: bool) -> int:
        return await self.count(
            Role.organization_id == organization_id,
            Role.is_system_role.is_(is_system),
        )


class PermissionRepository(Repository[Permission]):
    model = Permission
    default_order = "name"

    async def find_by_name(self, name: str) -> Permission | None:
        return await self.find_one(Permission.name == name)

    async def exists_by_name(self, name: str) -> bool:
        return await self.exists(Permission.name == name)

    async def find_by_resource(self, resource: str) -> list[Permission]:
        return await self.find(Permission.resource == resource)

    async def find_system(self) -> list[Permission]:
        return await self.find(Permission.is_system_permission.is_(True))

    async def count_system(self) -> int:
        return await self.count(Permission.is_system_permission.is_(True))

    async def search(self, term: str) -> list[Permission]:
        pattern = f"%{term}%"
        return await self.find(
            or_(
                Permission.name.ilike(pattern),
                Permission.description.ilike(pattern),
                Permission.resource.ilike(pattern),
            )
        )

    async def find_all_categories(self) -> list[str]:
        """Distinct non-null resources, sorted."""
        result = await self.session.execute(
            select(distinct(Permission.resource))
            .where(Permission.resource.is_not(None))
            .order_by(Permission.resource)
        )
        return list(result.scalars().all())


class RolePermissionRepository(Repository[RolePermission]):
    model = RolePermission

    async def find_by_role_and_permission(
        self, role_id: UUID, permission_id: UUID
    ) -> RolePermission | None:
        return await self.find_one(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
        )

    async def exists_active(self, role_id: UUID, permission_id: UUID) -> bool:
        return await self.exists(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
            RolePermission.is_active.is_(True),
        )

    async def find_active_permissions_for_role(self, role_id: UUID) -> list[Permission]:
        result = await self.session.execute(
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.permission_id)
            .where(RolePermission.role_id == role_id, RolePermission.is_active.is_(True))
            .order_by(Permission.name)
        )
        return list(result.scalars().all())


class UserRoleRepository(Repository[UserRole]):
    model = UserRole

    async def find_by_user_and_role(self, user_id: UUID, role_id: UUID) -> UserRole | None:
        return await self.find_one(UserRole.user_id == user_id, UserRole.role_id == role_id)

    async def exists_active_for_role(self, role_id: UUID) -> bool:
        return await self.exists(UserRole.role_id == role_id, UserRole.is_active.is_(True))

    async def find_active_roles_for_user(self, user_id: UUID) -> list[Role]:
        result = await self.session.execute(
            select(Role)
            .join(UserRole, UserRole.role_id == Role.role_id)
            .where(UserRole.user_id == user_id, UserRole.is_active.is_(True))
            .order_by(Role.name)
        )
        return list(result.scalars().all())
