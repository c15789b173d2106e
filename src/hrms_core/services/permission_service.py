"""Permission catalog service."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError
from hrms_core.models import Permission
from hrms_core.repositories import PermissionRepository
from hrms_core.services.common import require


@dataclass
class PermissionStatistics:
    total_permissions: int
    system_permissions: int
    custom_permissions: int


class PermissionService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.permissions = PermissionRepository(session)

    async def create_permission(
        self,
        name: str,
        resource: str | None = None,
        action: str | None = None,
        description: str | None = None,
        category: str | None = None,
        is_system_permission: bool = False,
    ) -> Permission:
        require(name, "Permission name is required")
        if await self.permissions.exists_by_name(name):
            raise ConflictError("Permission with this name already exists")

        permission = Permission(
            name=name,
            code=name.upper().replace(" ", "_").replace(":", "_"),
            resource=resource,
            action=action,
            description=description,
            category=category,
            is_system_permission=is_system_permission,
        )
        return await self.permissions.add(permission)

    async def get_all_permissions(self) -> list[Permission]:
        return await self.permissions.find_all()

    async def get_permission(self, permission_id: UUID) -> Permission:
        permission = await self.permissions.get(permission_id)
        if permission is None:
            raise NotFoundError("Permission", permission_id)
        return permission

    async def get_permission_by_name(self, name: str) -> Permission:
        permission = await self.permissions.find_by_name(name)
        if permission is None:
            raise NotFoundError("Permission", message=f"Permission not found with name: {name}")
        return permission

    async def get_permissions_by_resource(self, resource: str) -> list[Permission]:
        return await self.permissions.find_by_resource(resource)

    async def get_system_permissions(self) -> list[Permission]:
        return await self.permissions.find_system()

    async def get_permissions_by_category(self) -> dict[str, list[Permission]]:
        """Group the catalog by resource; permissions without one go under "Other"."""
        grouped: dict[str, list[Permission]] = defaultdict(list)
        for permission in await self.permissions.find_all():
            grouped[permission.resource or "Other"].append(permission)
        return dict(grouped)

    async def search_permissions(self, term: str) -> list[Permission]:
        return await self.permissions.search(term)

    async def permission_exists(self, name: str) -> bool:
        return await self.permissions.exists_by_name(name)

    async def get_permission_statistics(self) -> PermissionStatistics:
        total = await self.permissions.count()
        system = await self.permissions.count_system()
        return PermissionStatistics(
            total_permissions=total,
            system_permissions=system,
            custom_permissions=total - system,
        )
