"""Tests for departments and the department hierarchy."""

import pytest

from hrms_core.exceptions import ConflictError, StateConflictError, ValidationError
from hrms_core.repositories import PageRequest
from hrms_core.services import (
    DepartmentData,
    DepartmentService,
    OrganizationData,
    OrganizationService,
)


def department_data(org_id, name, code=None, parent=None, **kwargs):
    return DepartmentData(
        organization_id=org_id, name=name, code=code, parent_department_id=parent, **kwargs
    )


class TestDepartmentService:
    """Test department uniqueness, references and deletion guards."""

    async def test_duplicate_code_rejected(self, session, test_department):
        with pytest.raises(ConflictError, match="code already exists"):
            await DepartmentService(session).create_department(
                department_data(test_department.organization_id, "Platform", code="ENG")
            )

    async def test_duplicate_name_rejected(self, session, test_department):
        with pytest.raises(ConflictError, match="name already exists"):
            await DepartmentService(session).create_department(
                department_data(test_department.organization_id, "Engineering")
            )

    async def test_parent_must_share_organization(self, session, test_department):
        """Test that a parent department cannot come from another organization."""
        other = await OrganizationService(session).create_organization(
            OrganizationData(name="Globex")
        )
        with pytest.raises(ValidationError, match="same organization"):
            await DepartmentService(session).create_department(
                department_data(
                    other.organization_id, "Ops", parent=test_department.department_id
                )
            )

    async def test_manager_must_share_organization(self, session, test_department, test_employee):
        other = await OrganizationService(session).create_organization(
            OrganizationData(name="Globex")
        )
        with pytest.raises(ValidationError, match="Manager must belong"):
            await DepartmentService(session).create_department(
                department_data(other.organization_id, "Ops", manager_id=test_employee.employee_id)
            )

    async def test_self_parent_rejected(self, session, test_department):
        with pytest.raises(ValidationError, match="cannot be its own parent"):
            await DepartmentService(session).update_department(
                test_department.department_id,
                department_data(
                    test_department.organization_id,
                    "Engineering",
                    code="ENG",
                    parent=test_department.department_id,
                ),
            )

    async def test_circular_hierarchy_rejected(self, session, test_department):
        """Test that a department cannot be moved under its own descendant."""
        service = DepartmentService(session)
        org_id = test_department.organization_id
        child = await service.create_department(
            department_data(org_id, "Backend", code="BE", parent=test_department.department_id)
        )
        grandchild = await service.create_department(
            department_data(org_id, "Databases", code="DB", parent=child.department_id)
        )

        with pytest.raises(ValidationError, match="circular hierarchy"):
            await service.update_department(
                test_department.department_id,
                department_data(org_id, "Engineering", code="ENG", parent=grandchild.department_id),
            )

    async def test_move_to_sibling_allowed(self, session, test_department):
        service = DepartmentService(session)
        org_id = test_department.organization_id
        sales = await service.create_department(department_data(org_id, "Sales", code="SAL"))

        moved = await service.update_department(
            sales.department_id,
            department_data(org_id, "Sales", code="SAL", parent=test_department.department_id),
        )
        assert moved.parent_department_id == test_department.department_id

    async def test_hierarchy(self, session, test_department, test_employee):
        """Test that the hierarchy nests children and resolves manager names."""
        service = DepartmentService(session)
        org_id = test_department.organization_id
        await service.update_department(
            test_department.department_id,
            department_data(
                org_id, "Engineering", code="ENG", manager_id=test_employee.employee_id
            ),
        )
        backend = await service.create_department(
            department_data(org_id, "Backend", code="BE", parent=test_department.department_id)
        )
        await service.create_department(
            department_data(org_id, "Databases", code="DB", parent=backend.department_id)
        )
        await service.create_department(department_data(org_id, "Sales", code="SAL"))

        roots = await service.get_department_hierarchy(org_id)

        assert sorted(node.name for node in roots) == ["Engineering", "Sales"]
        engineering = next(node for node in roots if node.name == "Engineering")
        assert engineering.manager_name == "Jane Doe"
        assert [c.name for c in engineering.children] == ["Backend"]
        assert [c.name for c in engineering.children[0].children] == ["Databases"]

    async def test_roots_and_children(self, session, test_department):
        service = DepartmentService(session)
        org_id = test_department.organization_id
        await service.create_department(
            department_data(org_id, "Backend", code="BE", parent=test_department.department_id)
        )

        roots = await service.get_root_departments(org_id)
        assert [d.name for d in roots] == ["Engineering"]
        children = await service.get_sub_departments(test_department.department_id)
        assert [d.name for d in children] == ["Backend"]
        assert await service.count_departments_by_organization(org_id) == 2

    async def test_search(self, session, test_department):
        page = await DepartmentService(session).search_departments(
            test_department.organization_id, "engin", PageRequest()
        )
        assert page.total == 1

    async def test_delete_blocked_by_sub_departments(self, session, test_department):
        service = DepartmentService(session)
        await service.create_department(
            department_data(
                test_department.organization_id,
                "Backend",
                parent=test_department.department_id,
            )
        )
        with pytest.raises(StateConflictError, match="sub-departments"):
            await service.delete_department(test_department.department_id)

    async def test_delete_blocked_by_employees(self, session, test_department, test_employee):
        with pytest.raises(StateConflictError, match="assigned employees"):
            await DepartmentService(session).delete_department(test_department.department_id)

    async def test_delete_leaf_department(self, session, test_department):
        service = DepartmentService(session)
        await service.delete_department(test_department.department_id)
        assert await service.count_departments_by_organization(
            test_department.organization_id
        ) == 0
