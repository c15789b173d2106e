"""Role service - roles and their permission grants.

Every operation that needs an organization scope takes the acting user's
username. The user is resolved explicitly and its organization scopes the
call; nothing is read from ambient request state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError
from hrms_core.models import Permission, Role, RolePermission, User
from hrms_core.repositories import (
    Page,
    PageRequest,
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    UserRepository,
    UserRoleRepository,
)
from hrms_core.services.common import require

logger = logging.getLogger(__name__)


@dataclass
class RoleStatistics:
    total_roles: int
    system_roles: int
    custom_roles: int


class RoleService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.roles = RoleRepository(session)
        self.permissions = PermissionRepository(session)
        self.role_permissions = RolePermissionRepository(session)
        self.users = UserRepository(session)
        self.user_roles = UserRoleRepository(session)

    async def create_role(
        self, current_username: str, name: str, description: str | None = None
    ) -> Role:
        require(name, "Role name is required")
        user = await self._current_user(current_username)

        if await self.roles.exists_by_organization_and_name(user.organization_id, name):
            raise ConflictError("Role name already exists in organization")

        role = Role(
            organization_id=user.organization_id,
            name=name,
            description=description,
            is_system_role=False,
        )
        await self.roles.add(role)
        logger.info("Role %s created by %s", name, current_username)
        return role

    async def get_role(self, role_id: UUID) -> Role:
        role = await self.roles.get(role_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    async def get_roles(self, current_username: str, page_request: PageRequest) -> Page[Role]:
        user = await self._current_user(current_username)
        return await self.roles.page_by_organization(user.organization_id, page_request)

    async def search_roles(
        self, current_username: str, name: str, page_request: PageRequest
    ) -> Page[Role]:
        user = await self._current_user(current_username)
        return await self.roles.search_by_name(user.organization_id, name, page_request)

    async def get_all_roles(self, current_username: str) -> list[Role]:
        user = await self._current_user(current_username)
        return await self.roles.find_by_organization(user.organization_id)

    async def get_custom_roles(self, current_username: str) -> list[Role]:
        user = await self._current_user(current_username)
        return await self.roles.find_by_system_flag(user.organization_id, False)

    async def get_system_roles(self, current_username: str) -> list[Role]:
        user = await self._current_user(current_username)
        return await self.roles.find_by_system_flag(user.organization_id, True)

    async def update_role(
        self,
        current_username: str,
        role_id: UUID,
        name: str,
        description: str | None = None,
    ) -> Role:
        require(name, "Role name is required")
        role = await self._scoped_role(current_username, role_id)

        if role.is_system_role:
            raise StateConflictError("Cannot modify system role")

        if name != role.name:
            existing = await self.roles.find_by_organization_and_name(role.organization_id, name)
            if existing is not None and existing.role_id != role_id:
                raise ConflictError("Role name already exists in organization")

        role.name = name
        role.description = description
        await self.session.flush()
        return role

    async def delete_role(self, current_username: str, role_id: UUID) -> None:
        role = await self._scoped_role(current_username, role_id)
        if role.is_system_role:
            raise StateConflictError("Cannot delete system role")
        if await self.user_roles.exists_active_for_role(role_id):
            raise StateConflictError("Cannot delete role that is assigned to users")
        await self.roles.delete(role)
        logger.info("Deleted role %s by %s", role_id, current_username)

    async def assign_permission(
        self, current_username: str, role_id: UUID, permission_id: UUID
    ) -> RolePermission:
        """Grant a permission; an earlier revoked grant is reactivated."""
        await self._scoped_role(current_username, role_id)
        await self._get_permission(permission_id)

        link = await self.role_permissions.find_by_role_and_permission(role_id, permission_id)
        if link is not None and link.is_active:
            raise ConflictError("Role already has this permission")

        if link is None:
            link = RolePermission(
                role_id=role_id,
                permission_id=permission_id,
                granted_by=current_username,
                is_active=True,
            )
            await self.role_permissions.add(link)
        else:
            link.is_active = True
            link.granted_by = current_username
            await self.session.flush()
        return link

    async def remove_permission(
        self, current_username: str, role_id: UUID, permission_id: UUID
    ) -> None:
        role = await self._scoped_role(current_username, role_id)
        if role.is_system_role:
            raise StateConflictError("Cannot modify permissions of system role")

        link = await self.role_permissions.find_by_role_and_permission(role_id, permission_id)
        if link is None or not link.is_active:
            raise StateConflictError("Role does not have this permission")

        link.is_active = False
        await self.session.flush()

    async def get_role_permissions(self, role_id: UUID) -> list[Permission]:
        await self.get_role(role_id)
        return await self.role_permissions.find_active_permissions_for_role(role_id)

    async def get_role_statistics(self, current_username: str) -> RoleStatistics:
        user = await self._current_user(current_username)
        organization_id = user.organization_id
        return RoleStatistics(
            total_roles=await self.roles.count_by_organization(organization_id),
            system_roles=await self.roles.count_by_system_flag(organization_id, True),
            custom_roles=await self.roles.count_by_system_flag(organization_id, False),
        )

    async def _current_user(self, username: str) -> User:
        user = await self.users.find_by_username(username) if username else None
        if user is None:
            raise NotFoundError("User", message="Current user not found")
        return user

    async def _scoped_role(self, current_username: str, role_id: UUID) -> Role:
        # Roles of other organizations are reported as missing
        user = await self._current_user(current_username)
        role = await self.roles.get(role_id)
        if role is None or role.organization_id != user.organization_id:
            raise NotFoundError("Role", role_id)
        return role

    async def _get_permission(self, permission_id: UUID) -> Permission:
        permission = await self.permissions.get(permission_id)
        if permission is None:
            raise NotFoundError("Permission", permission_id)
        return permission
