"""Employee service - employee records and employment lifecycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.models import Employee
from hrms_core.models.enums import EmploymentStatus, EmploymentType
from hrms_core.repositories import (
    DepartmentRepository,
    EmployeeBankAccountRepository,
    EmployeeRepository,
    LocationRepository,
    OrganizationRepository,
    Page,
    PageRequest,
    UserRepository,
)
from hrms_core.services.common import apply_fields, enum_value, require

logger = logging.getLogger(__name__)


@dataclass
class EmployeeData:
    """Writable employee fields."""

    organization_id: UUID
    employee_number: str
    first_name: str
    last_name: str
    middle_name: str | None = None
    work_email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    department_id: UUID | None = None
    location_id: UUID | None = None
    manager_id: UUID | None = None
    user_id: UUID | None = None
    job_title: str | None = None
    employment_status: str = EmploymentStatus.ACTIVE.value
    employment_type: str = EmploymentType.FULL_TIME.value
    hire_date: date | None = None
    probation_end_date: date | None = None
    salary_amount: Decimal | None = None
    salary_currency: str = "USD"
    hourly_rate: Decimal | None = None


@dataclass
class EmployeeStatistics:
    total_employees: int
    active_employees: int
    terminated_employees: int
    on_probation: int
    full_time_employees: int
    part_time_employees: int
    contract_employees: int


class EmployeeService:
    """Service for employees of an organization.

    Employee number and work email are unique per organization but may
    repeat across organizations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.employees = EmployeeRepository(session)
        self.organizations = OrganizationRepository(session)
        self.departments = DepartmentRepository(session)
        self.locations = LocationRepository(session)
        self.users = UserRepository(session)
        self.bank_accounts = EmployeeBankAccountRepository(session)

    async def create_employee(self, data: EmployeeData) -> Employee:
        self._validate(data)
        if await self.organizations.get(data.organization_id) is None:
            raise NotFoundError("Organization", data.organization_id)

        if await self.employees.exists_by_organization_and_employee_number(
            data.organization_id, data.employee_number
        ):
            raise ConflictError("Employee number already exists in organization")
        if data.work_email and await self.employees.exists_by_organization_and_email(
            data.organization_id, data.work_email
        ):
            raise ConflictError("Email already exists in organization")

        await self._validate_references(data, None)

        employee = Employee()
        apply_fields(employee, data)
        await self.employees.add(employee)
        logger.info(
            "Created employee %s in organization %s",
            employee.employee_number,
            employee.organization_id,
        )
        return employee

    async def update_employee(self, employee_id: UUID, data: EmployeeData) -> Employee:
        employee = await self.get_employee(employee_id)
        self._validate(data)
        data.organization_id = employee.organization_id

        if data.employee_number != employee.employee_number:
            existing = await self.employees.find_by_organization_and_employee_number(
                employee.organization_id, data.employee_number
            )
            if existing is not None and existing.employee_id != employee_id:
                raise ConflictError("Employee number already exists in organization")
        if data.work_email and data.work_email != employee.work_email:
            existing = await self.employees.find_by_organization_and_email(
                employee.organization_id, data.work_email
            )
            if existing is not None and existing.employee_id != employee_id:
                raise ConflictError("Email already exists in organization")

        await self._validate_references(data, employee_id)

        apply_fields(employee, data, exclude=("organization_id",))
        await self.session.flush()
        return employee

    async def get_employee(self, employee_id: UUID) -> Employee:
        employee = await self.employees.get(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def get_employees(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[Employee]:
        return await self.employees.page_by_organization(organization_id, page_request)

    async def search_employees(
        self,
        organization_id: UUID,
        page_request: PageRequest,
        name: str | None = None,
        employee_number: str | None = None,
        job_title: str | None = None,
    ) -> Page[Employee]:
        return await self.employees.search(
            organization_id,
            page_request,
            name=name,
            employee_number=employee_number,
            job_title=job_title,
        )

    async def get_employees_by_department(
        self, department_id: UUID, page_request: PageRequest
    ) -> Page[Employee]:
        if await self.departments.get(department_id) is None:
            raise NotFoundError("Department", department_id)
        return await self.employees.page_by_department(department_id, page_request)

    async def get_direct_reports(self, manager_id: UUID) -> list[Employee]:
        await self.get_employee(manager_id)
        return await self.employees.find_by_manager(manager_id)

    async def get_employees_on_probation(self, organization_id: UUID) -> list[Employee]:
        return await self.employees.find_by_status(
            organization_id, EmploymentStatus.PROBATION.value
        )

    async def get_employees_with_upcoming_probation_end(
        self, organization_id: UUID, days_ahead: int
    ) -> list[Employee]:
        today = date.today()
        return await self.employees.find_with_probation_ending_between(
            organization_id, today, today + timedelta(days=days_ahead)
        )

    async def get_managers(self, organization_id: UUID) -> list[Employee]:
        return await self.employees.find_managers(organization_id)

    async def terminate_employee(
        self, employee_id: UUID, termination_date: date, reason: str | None = None
    ) -> Employee:
        """Terminate employment and deactivate the employee's bank accounts."""
        employee = await self.get_employee(employee_id)
        if employee.is_terminated:
            raise StateConflictError("Employee is already terminated")

        employee.employment_status = EmploymentStatus.TERMINATED.value
        employee.termination_date = termination_date
        employee.termination_reason = reason
        await self.session.flush()
        deactivated = await self.bank_accounts.deactivate_all_for_employee(employee_id)
        logger.info(
            "Terminated employee %s, deactivated %d bank account(s)", employee_id, deactivated
        )
        return employee

    async def reactivate_employee(self, employee_id: UUID) -> Employee:
        employee = await self.get_employee(employee_id)
        if not employee.is_terminated:
            raise StateConflictError("Employee is not terminated")

        employee.employment_status = EmploymentStatus.ACTIVE.value
        employee.termination_date = None
        employee.termination_reason = None
        await self.session.flush()
        return employee

    async def confirm_employee(self, employee_id: UUID, confirmation_date: date) -> Employee:
        employee = await self.get_employee(employee_id)
        if employee.employment_status != EmploymentStatus.PROBATION.value:
            raise StateConflictError("Employee is not on probation")

        employee.employment_status = EmploymentStatus.ACTIVE.value
        employee.confirmation_date = confirmation_date
        await self.session.flush()
        return employee

    async def delete_employee(self, employee_id: UUID) -> None:
        employee = await self.get_employee(employee_id)
        if await self.employees.exists_by_manager(employee_id):
            raise StateConflictError("Cannot delete employee who has direct reports")
        await self.employees.delete(employee)
        logger.info("Deleted employee %s", employee_id)

    async def count_employees_by_organization(self, organization_id: UUID) -> int:
        return await self.employees.count_by_organization(organization_id)

    async def get_employee_statistics(self, organization_id: UUID) -> EmployeeStatistics:
        repo = self.employees
        return EmployeeStatistics(
            total_employees=await repo.count_by_organization(organization_id),
            active_employees=await repo.count_by_status(
                organization_id, EmploymentStatus.ACTIVE.value
            ),
            terminated_employees=await repo.count_by_status(
                organization_id, EmploymentStatus.TERMINATED.value
            ),
            on_probation=await repo.count_by_status(
                organization_id, EmploymentStatus.PROBATION.value
            ),
            full_time_employees=await repo.count_by_type(
                organization_id, EmploymentType.FULL_TIME.value
            ),
            part_time_employees=await repo.count_by_type(
                organization_id, EmploymentType.PART_TIME.value
            ),
            contract_employees=await repo.count_by_type(
                organization_id, EmploymentType.CONTRACT.value
            ),
        )

    def _validate(self, data: EmployeeData) -> None:
        require(data.employee_number, "Employee number is required")
        require(data.first_name, "First name is required")
        require(data.last_name, "Last name is required")
        data.employment_status = enum_value(
            EmploymentStatus, data.employment_status, "employment status"
        )
        data.employment_type = enum_value(EmploymentType, data.employment_type, "employment type")
        if data.salary_amount is not None and data.salary_amount < 0:
            raise ValidationError("Salary amount cannot be negative")
        if data.hourly_rate is not None and data.hourly_rate < 0:
            raise ValidationError("Hourly rate cannot be negative")

    async def _validate_references(self, data: EmployeeData, employee_id: UUID | None) -> None:
        organization_id = data.organization_id
        if data.department_id is not None:
            department = await self.departments.get(data.department_id)
            if department is None:
                raise NotFoundError("Department", data.department_id)
            if department.organization_id != organization_id:
                raise ValidationError("Department must belong to the same organization")
        if data.location_id is not None:
            location = await self.locations.get(data.location_id)
            if location is None:
                raise NotFoundError("Location", data.location_id)
            if location.organization_id != organization_id:
                raise ValidationError("Location must belong to the same organization")
        if data.manager_id is not None:
            if data.manager_id == employee_id:
                raise ValidationError("Employee cannot be their own manager")
            manager = await self.employees.get(data.manager_id)
            if manager is None:
                raise NotFoundError("Employee", data.manager_id)
            if manager.organization_id != organization_id:
                raise ValidationError("Manager must belong to the same organization")
        if data.user_id is not None:
            user = await self.users.get(data.user_id)
            if user is None:
                raise NotFoundError("User", data.user_id)
            if user.organization_id != organization_id:
                raise ValidationError("User must belong to the same organization")
