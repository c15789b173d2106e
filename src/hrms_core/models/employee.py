"""Employee and employee bank account models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from hrms_core.models.base import Base, TimestampMixin


class Employee(Base, TimestampMixin):
    """Employee of an organization.

    Department, location, manager and user account are optional references
    resolved by explicit lookup.
    """

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    organization_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("organization.organization_id"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("app_user.user_id"),
        nullable=True,
    )
    department_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("department.department_id"),
        nullable=True,
        index=True,
    )
    location_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("location.location_id"),
        nullable=True,
    )
    manager_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("employee.employee_id"),
        nullable=True,
        index=True,
    )
    employee_number: Mapped[str] = mapped_column(String(32), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    work_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(nullable=True)
    gender: Mapped[str | None] = mapped_column(String(16), nullable=True)
    employment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="ACTIVE")
    employment_type: Mapped[str] = mapped_column(String(16), nullable=False, default="FULL_TIME")
    job_title: Mapped[str | None] = mapped_column(String(128), nullable=True)
    hire_date: Mapped[date | None] = mapped_column(nullable=True)
    probation_end_date: Mapped[date | None] = mapped_column(nullable=True)
    confirmation_date: Mapped[date | None] = mapped_column(nullable=True)
    termination_date: Mapped[date | None] = mapped_column(nullable=True)
    termination_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    salary_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    salary_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "organization_id", "employee_number", name="employee_org_number_unique"
        ),
        UniqueConstraint("organization_id", "work_email", name="employee_org_email_unique"),
        CheckConstraint(
            "employment_status IN ('ACTIVE', 'PROBATION', 'ON_LEAVE', 'SUSPENDED', 'TERMINATED')",
            name="employee_status_check",
        ),
        CheckConstraint(
            "employment_type IN ('FULL_TIME', 'PART_TIME', 'CONTRACT', 'INTERN')",
            name="employee_type_check",
        ),
    )

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)

    @property
    def is_terminated(self) -> bool:
        return self.employment_status == "TERMINATED"


class EmployeeBankAccount(Base, TimestampMixin):
    """Bank account used for salary payments."""

    __tablename__ = "employee_bank_account"

    bank_account_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    employee_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    bank_name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_number: Mapped[str] = mapped_column(String(18), nullable=False)
    ifsc_code: Mapped[str | None] = mapped_column(String(11), nullable=True)
    branch_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_type: Mapped[str] = mapped_column(String(16), nullable=False)
    is_primary: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "account_number", name="bank_account_employee_number_unique"
        ),
    )

    @property
    def masked_account_number(self) -> str:
        if len(self.account_number) <= 4:
            return self.account_number
        return "****" + self.account_number[-4:]
