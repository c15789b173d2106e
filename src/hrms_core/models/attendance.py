"""Attendance record and holiday models."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Numeric, String, Text, Time, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from hrms_core.models.base import Base, TimestampMixin
from hrms_core.models.enums import AttendanceStatus

_PRESENT_STATUSES = (
    AttendanceStatus.PRESENT.value,
    AttendanceStatus.LATE.value,
    AttendanceStatus.HALF_DAY.value,
    AttendanceStatus.WORK_FROM_HOME.value,
)


class AttendanceRecord(Base, TimestampMixin):
    """One employee's attendance on one day."""

    __tablename__ = "attendance_record"

    attendance_record_id: Mapped[UUID] = mapped_column(
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
    attendance_date: Mapped[date] = mapped_column(nullable=False)
    check_in_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    check_out_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    total_hours: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    overtime_hours: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    break_hours: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    location_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("location.location_id"),
        nullable=True,
    )
    check_in_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    check_out_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("employee.employee_id"),
        nullable=True,
    )
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "attendance_date", name="attendance_employee_date_unique"
        ),
    )

    @property
    def is_present(self) -> bool:
        return self.status in _PRESENT_STATUSES

    @property
    def is_full_day(self) -> bool:
        return self.status in (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)

    @property
    def has_overtime(self) -> bool:
        return self.overtime_hours is not None and self.overtime_hours > 0


class Holiday(Base, TimestampMixin):
    """Day off in an organization's calendar."""

    __tablename__ = "holiday"

    holiday_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    organization_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("organization.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    holiday_date: Mapped[date] = mapped_column(nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    holiday_type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_optional: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_recurring: Mapped[bool] = mapped_column(default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "holiday_date", name="holiday_org_date_unique"),
    )

    @property
    def is_mandatory(self) -> bool:
        return not self.is_optional
