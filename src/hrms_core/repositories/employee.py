"""Employee and bank account repositories."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.orm import aliased

from hrms_core.models import Employee, EmployeeBankAccount
from hrms_core.repositories.base import Page, PageRequest, Repository


class EmployeeRepository(Repository[Employee]):
    model = Employee
    default_order = "employee_number"

    async def find_by_organization(self, organization_id: UUID) -> list[Employee]:
        return await self.find(Employee.organization_id == organization_id)

    async def page_by_organization(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[Employee]:
        return await self.paginate(
            Employee.organization_id == organization_id, page_request=page_request
        )

    async def find_by_organization_and_employee_number(
        self, organization_id: UUID, employee_number: str
    ) -> Employee | None:
        return await self.find_one(
            Employee.organization_id == organization_id,
            Employee.employee_number == employee_number,
        )

    async def find_by_organization_and_email(
        self, organization_id: UUID, work_email: str
    ) -> Employee | None:
        return await self.find_one(
            Employee.organization_id == organization_id,
            Employee.work_email == work_email,
        )

    async def exists_by_organization_and_employee_number(
        self, organization_id: UUID, employee_number: str
    ) -> bool:
        return await self.exists(
            Employee.organization_id == organization_id,
            Employee.employee_number == employee_number,
        )

    async def exists_by_organization_and_email(
        self, organization_id: UUID, work_email: str
    ) -> bool:
        return await self.exists(
            Employee.organization_id == organization_id,
            Employee.work_email == work_email,
        )

    async def search(
        self,
        organization_id: UUID,
        page_request: PageRequest,
        name: str | None = None,
        employee_number: str | None = None,
        job_title: str | None = None,
    ) -> Page[Employee]:
        """Case-insensitive containment search over name, number and title."""
        query = select(Employee).where(Employee.organization_id == organization_id)
        if name:
            pattern = f"%{name}%"
            query = query.where(
                or_(
                    Employee.first_name.ilike(pattern),
                    Employee.last_name.ilike(pattern),
                    Employee.middle_name.ilike(pattern),
                )
            )
        if employee_number:
            query = query.where(Employee.employee_number.ilike(f"%{employee_number}%"))
        if job_title:
            query = query.where(Employee.job_title.ilike(f"%{job_title}%"))
        return await self.paginate_query(query, page_request)

    async def page_by_department(
        self, department_id: UUID, page_request: PageRequest
    ) -> Page[Employee]:
        return await self.paginate(
            Employee.department_id == department_id, page_request=page_request
        )

    async def find_by_manager(self, manager_id: UUID) -> list[Employee]:
        return await self.find(Employee.manager_id == manager_id)

    async def exists_by_manager(self, manager_id: UUID) -> bool:
        return await self.exists(Employee.manager_id == manager_id)

    async def exists_by_department(self, department_id: UUID) -> bool:
        return await self.exists(Employee.department_id == department_id)

    async def exists_by_location(self, location_id: UUID) -> bool:
        return await self.exists(Employee.location_id == location_id)

    async def exists_by_organization(self, organization_id: UUID) -> bool:
        return await self.exists(Employee.organization_id == organization_id)

    async def find_by_status(self, organization_id: UUID, status: str) -> list[Employee]:
        return await self.find(
            Employee.organization_id == organization_id,
            Employee.employment_status == status,
        )

    async def find_active(self, organization_id: UUID) -> list[Employee]:
        return await self.find(
            Employee.organization_id == organization_id,
            Employee.employment_status.in_(("ACTIVE", "PROBATION")),
        )

    async def find_with_probation_ending_between(
        self, organization_id: UUID, start: date, end: date
    ) -> list[Employee]:
        return await self.find(
            Employee.organization_id == organization_id,
            Employee.employment_status == "PROBATION",
            Employee.probation_end_date.between(start, end),
        )

    async def find_managers(self, organization_id: UUID) -> list[Employee]:
        """Employees that at least one other employee reports to."""
        report = aliased(Employee)
        reports = select(report.manager_id).where(report.manager_id.is_not(None))
        return await self.find(
            Employee.organization_id == organization_id,
            Employee.employee_id.in_(reports),
        )

    async def count_by_organization(self, organization_id: UUID) -> int:
        return await self.count(Employee.organization_id == organization_id)

    async def count_by_status(self, organization_id: UUID, status: str) -> int:
        return await self.count(
            Employee.organization_id == organization_id,
            Employee.employment_status == status,
        )

    async def count_by_type(self, organization_id: UUID, employment_type: str) -> int:
        return await self.count(
            Employee.organization_id == organization_id,
            Employee.employment_type == employment_type,
        )


class EmployeeBankAccountRepository(Repository[EmployeeBankAccount]):
    model = EmployeeBankAccount
    default_order = "created_at"

    async def find_active_by_employee(self, employee_id: UUID) -> list[EmployeeBankAccount]:
        return await self.find(
            EmployeeBankAccount.employee_id == employee_id,
            EmployeeBankAccount.is_active.is_(True),
        )

    async def find_by_employee_and_account_number(
        self, employee_id: UUID, account_number: str
    ) -> EmployeeBankAccount | None:
        return await self.find_one(
            EmployeeBankAccount.employee_id == employee_id,
            EmployeeBankAccount.account_number == account_number,
        )

    async def find_primary(self, employee_id: UUID) -> EmployeeBankAccount | None:
        return await self.find_one(
            EmployeeBankAccount.employee_id == employee_id,
            EmployeeBankAccount.is_primary.is_(True),
            EmployeeBankAccount.is_active.is_(True),
        )

    async def find_by_type(
        self, employee_id: UUID, account_type: str
    ) -> list[EmployeeBankAccount]:
        return await self.find(
            EmployeeBankAccount.employee_id == employee_id,
            EmployeeBankAccount.account_type == account_type,
            EmployeeBankAccount.is_active.is_(True),
        )

    async def count_active_by_employee(self, employee_id: UUID) -> int:
        return await self.count(
            EmployeeBankAccount.employee_id == employee_id,
            EmployeeBankAccount.is_active.is_(True),
        )

    async def clear_primary_for_employee(self, employee_id: UUID) -> int:
        """Bulk update: unset the primary flag on every account of the employee."""
        result = await self.session.execute(
            update(EmployeeBankAccount)
            .where(EmployeeBankAccount.employee_id == employee_id)
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def deactivate_all_for_employee(self, employee_id: UUID) -> int:
        """Bulk update: deactivate every account of the employee."""
        result = await self.session.execute(
            update(EmployeeBankAccount)
            .where(EmployeeBankAccount.employee_id == employee_id)
            .values(is_active=False, is_primary=False)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
