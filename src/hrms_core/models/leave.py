"""Leave type, balance and request models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from hrms_core.models.base import Base, TimestampMixin


class LeaveType(Base, TimestampMixin):
    """Kind of leave an organization grants (annual, sick, ...)."""

    __tablename__ = "leave_type"

    leave_type_id: Mapped[UUID] = mapped_column(
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
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(32), nullable=False)
    category: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_paid: Mapped[bool] = mapped_column(default=True, nullable=False)
    max_days_per_year: Mapped[Decimal] = mapped_column(
        Numeric(5, 1), nullable=False, default=Decimal("0")
    )
    is_carry_forward: Mapped[bool] = mapped_column(default=False, nullable=False)
    max_carry_forward_days: Mapped[Decimal | None] = mapped_column(Numeric(5, 1), nullable=True)
    requires_approval: Mapped[bool] = mapped_column(default=True, nullable=False)
    allow_negative_balance: Mapped[bool] = mapped_column(default=False, nullable=False)
    min_days_notice: Mapped[int] = mapped_column(default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "code", name="leave_type_org_code_unique"),
    )


class LeaveBalance(Base, TimestampMixin):
    """Per-employee, per-type, per-year leave ledger."""

    __tablename__ = "leave_balance"

    leave_balance_id: Mapped[UUID] = mapped_column(
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
    leave_type_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("leave_type.leave_type_id"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(nullable=False)
    allocated_days: Mapped[Decimal] = mapped_column(
        Numeric(5, 1), nullable=False, default=Decimal("0")
    )
    used_days: Mapped[Decimal] = mapped_column(Numeric(5, 1), nullable=False, default=Decimal("0"))
    pending_days: Mapped[Decimal] = mapped_column(
        Numeric(5, 1), nullable=False, default=Decimal("0")
    )
    carry_forward_days: Mapped[Decimal] = mapped_column(
        Numeric(5, 1), nullable=False, default=Decimal("0")
    )
    adjustment_days: Mapped[Decimal] = mapped_column(
        Numeric(5, 1), nullable=False, default=Decimal("0")
    )

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "leave_type_id", "year", name="leave_balance_employee_type_year_unique"
        ),
    )

    @property
    def remaining_days(self) -> Decimal:
        """allocated - used - pending + carry_forward + adjustment."""
        return (
            Decimal(self.allocated_days or 0)
            - Decimal(self.used_days or 0)
            - Decimal(self.pending_days or 0)
            + Decimal(self.carry_forward_days or 0)
            + Decimal(self.adjustment_days or 0)
        )


class LeaveRequest(Base, TimestampMixin):
    """Employee request for leave over an inclusive date range."""

    __tablename__ = "leave_request"

    leave_request_id: Mapped[UUID] = mapped_column(
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
    leave_type_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("leave_type.leave_type_id"),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(nullable=False)
    end_date: Mapped[date] = mapped_column(nullable=False)
    total_days: Mapped[Decimal] = mapped_column(Numeric(5, 1), nullable=False)
    is_half_day: Mapped[bool] = mapped_column(default=False, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="PENDING")
    approved_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="leave_request_dates_check"),
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED', 'CANCELLED', 'WITHDRAWN')",
            name="leave_request_status_check",
        ),
    )
