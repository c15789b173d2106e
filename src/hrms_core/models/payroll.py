"""Payroll run, payslip and payroll item models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from hrms_core.models.base import Base, TimestampMixin

ZERO = Decimal("0.00")


class PayrollRun(Base, TimestampMixin):
    """Payroll run container for one pay period of an organization."""

    __tablename__ = "payroll_run"

    payroll_run_id: Mapped[UUID] = mapped_column(
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
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    pay_period_start: Mapped[date] = mapped_column(nullable=False)
    pay_period_end: Mapped[date] = mapped_column(nullable=False)
    pay_date: Mapped[date] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="DRAFT")
    total_gross: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    total_taxes: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    total_net: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    employee_count: Mapped[int] = mapped_column(nullable=False, default=0)
    processed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    processed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(nullable=True)
    paid_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("pay_period_start <= pay_period_end", name="payroll_run_period_check"),
        CheckConstraint(
            "status IN ('DRAFT', 'PROCESSING', 'CALCULATED', 'APPROVED', 'PAID', "
            "'CANCELLED', 'ERROR')",
            name="payroll_run_status_check",
        ),
    )


class Payslip(Base, TimestampMixin):
    """One employee's pay for a payroll run."""

    __tablename__ = "payslip"

    payslip_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    payroll_run_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("payroll_run.payroll_run_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("employee.employee_id"),
        nullable=False,
        index=True,
    )
    regular_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=ZERO)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=ZERO)
    basic_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    overtime_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    total_taxes: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    is_final: Mapped[bool] = mapped_column(default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("payroll_run_id", "employee_id", name="payslip_run_employee_unique"),
    )


class PayrollItem(Base):
    """Ordered earning, deduction or tax line of a payslip.

    Amounts are stored positive; item_type carries the direction.
    """

    __tablename__ = "payroll_item"

    payroll_item_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    payslip_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("payslip.payslip_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_type: Mapped[str] = mapped_column(String(16), nullable=False)
    item_code: Mapped[str] = mapped_column(String(32), nullable=False)
    item_name: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    sort_order: Mapped[int] = mapped_column(nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(
            "item_type IN ('EARNING', 'DEDUCTION', 'TAX')", name="payroll_item_type_check"
        ),
        CheckConstraint("amount >= 0", name="payroll_item_amount_check"),
    )
