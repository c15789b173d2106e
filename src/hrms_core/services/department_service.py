"""Department service - org structure and hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import (
    ConflictError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from hrms_core.models import Department
from hrms_core.repositories import (
    DepartmentRepository,
    EmployeeRepository,
    LocationRepository,
    OrganizationRepository,
    Page,
    PageRequest,
)
from hrms_core.services.common import apply_fields, require


@dataclass
class DepartmentData:
    """Writable department fields."""

    organization_id: UUID
    name: str
    code: str | None = None
    description: str | None = None
    parent_department_id: UUID | None = None
    manager_id: UUID | None = None
    location_id: UUID | None = None
    cost_center: str | None = None


@dataclass
class DepartmentNode:
    """Department with its nested sub-departments."""

    department_id: UUID
    name: str
    code: str | None
    description: str | None
    cost_center: str | None
    manager_id: UUID | None
    manager_name: str | None
    children: list[DepartmentNode] = field(default_factory=list)


class DepartmentService:
    """Service for departments.

    Code and name are unique per organization. The parent chain must stay in
    the same organization and must not loop back on itself.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.departments = DepartmentRepository(session)
        self.organizations = OrganizationRepository(session)
        self.employees = EmployeeRepository(session)
        self.locations = LocationRepository(session)

    async def create_department(self, data: DepartmentData) -> Department:
        require(data.name, "Department name is required")
        await self._require_organization(data.organization_id)

        if data.code and await self.departments.find_by_organization_and_code(
            data.organization_id, data.code
        ):
            raise ConflictError("Department with this code already exists in the organization")
        if await self.departments.find_by_organization_and_name(data.organization_id, data.name):
            raise ConflictError("Department with this name already exists in the organization")

        await self._validate_references(data)

        department = Department(is_active=True)
        apply_fields(department, data)
        return await self.departments.add(department)

    async def update_department(self, department_id: UUID, data: DepartmentData) -> Department:
        department = await self.get_department(department_id)
        require(data.name, "Department name is required")
        organization_id = department.organization_id

        if data.code and data.code != department.code:
            existing = await self.departments.find_by_organization_and_code(
                organization_id, data.code
            )
            if existing is not None and existing.department_id != department_id:
                raise ConflictError(
                    "Department with this code already exists in the organization"
                )
        if data.name != department.name:
            existing = await self.departments.find_by_organization_and_name(
                organization_id, data.name
            )
            if existing is not None and existing.department_id != department_id:
                raise ConflictError(
                    "Department with this name already exists in the organization"
                )

        if data.parent_department_id is not None:
            if data.parent_department_id == department_id:
                raise ValidationError("Department cannot be its own parent")
            if await self._is_descendant(data.parent_department_id, department_id):
                raise ValidationError(
                    "Cannot set parent department: would create circular hierarchy"
                )

        data.organization_id = organization_id
        await self._validate_references(data)

        apply_fields(department, data, exclude=("organization_id",))
        await self.session.flush()
        return department

    async def get_department(self, department_id: UUID) -> Department:
        department = await self.departments.get(department_id)
        if department is None:
            raise NotFoundError("Department", department_id)
        return department

    async def get_departments(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[Department]:
        await self._require_organization(organization_id)
        return await self.departments.page_by_organization(organization_id, page_request)

    async def search_departments(
        self, organization_id: UUID, name: str, page_request: PageRequest
    ) -> Page[Department]:
        await self._require_organization(organization_id)
        return await self.departments.search_by_name(organization_id, name, page_request)

    async def get_root_departments(self, organization_id: UUID) -> list[Department]:
        await self._require_organization(organization_id)
        return await self.departments.find_roots(organization_id)

    async def get_sub_departments(self, parent_department_id: UUID) -> list[Department]:
        await self.get_department(parent_department_id)
        return await self.departments.find_children(parent_department_id)

    async def get_department_hierarchy(self, organization_id: UUID) -> list[DepartmentNode]:
        """Build the department forest of an organization from one query."""
        await self._require_organization(organization_id)
        departments = await self.departments.find_by_organization(organization_id)

        manager_ids = {d.manager_id for d in departments if d.manager_id is not None}
        manager_names: dict[UUID, str] = {}
        for manager_id in manager_ids:
            manager = await self.employees.get(manager_id)
            if manager is not None:
                manager_names[manager_id] = manager.full_name

        nodes = {
            d.department_id: DepartmentNode(
                department_id=d.department_id,
                name=d.name,
                code=d.code,
                description=d.description,
                cost_center=d.cost_center,
                manager_id=d.manager_id,
                manager_name=manager_names.get(d.manager_id) if d.manager_id else None,
            )
            for d in departments
        }
        roots: list[DepartmentNode] = []
        for d in departments:
            node = nodes[d.department_id]
            parent = nodes.get(d.parent_department_id) if d.parent_department_id else None
            if parent is None:
                roots.append(node)
            else:
                parent.children.append(node)
        return roots

    async def delete_department(self, department_id: UUID) -> None:
        department = await self.get_department(department_id)

        if await self.departments.exists_children(department_id):
            raise StateConflictError("Cannot delete department with existing sub-departments")
        if await self.employees.exists_by_department(department_id):
            raise StateConflictError("Cannot delete department with assigned employees")

        await self.departments.delete(department)

    async def count_departments_by_organization(self, organization_id: UUID) -> int:
        return await self.departments.count_by_organization(organization_id)

    async def _require_organization(self, organization_id: UUID) -> None:
        if await self.organizations.get(organization_id) is None:
            raise NotFoundError("Organization", organization_id)

    async def _validate_references(self, data: DepartmentData) -> None:
        if data.parent_department_id is not None:
            parent = await self.get_department(data.parent_department_id)
            if parent.organization_id != data.organization_id:
                raise ValidationError("Parent department must belong to the same organization")
        if data.manager_id is not None:
            manager = await self.employees.get(data.manager_id)
            if manager is None:
                raise NotFoundError("Employee", data.manager_id)
            if manager.organization_id != data.organization_id:
                raise ValidationError("Manager must belong to the same organization")
        if data.location_id is not None:
            location = await self.locations.get(data.location_id)
            if location is None:
                raise NotFoundError("Location", data.location_id)
            if location.organization_id != data.organization_id:
                raise ValidationError("Location must belong to the same organization")

    async def _is_descendant(self, candidate_id: UUID, ancestor_id: UUID) -> bool:
        """Walk up from candidate; True if ancestor_id is reached."""
        seen: set[UUID] = set()
        current_id: UUID | None = candidate_id
        while current_id is not None and current_id not in seen:
            if current_id == ancestor_id:
                return True
            seen.add(current_id)
            current = await self.departments.get(current_id)
            current_id = current.parent_department_id if current else None
        return False
