"""Compliance jurisdiction, rule and check models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from hrms_core.models.base import Base, TimestampMixin


class ComplianceJurisdiction(Base, TimestampMixin):
    """Legal jurisdiction that compliance rules are issued under."""

    __tablename__ = "compliance_jurisdiction"

    jurisdiction_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    jurisdiction_type: Mapped[str] = mapped_column(String(16), nullable=False, default="COUNTRY")
    country_code: Mapped[str | None] = mapped_column(String(3), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)


class ComplianceRule(Base, TimestampMixin):
    """Policy definition evaluated against organizations.

    A rule without an organization applies to every organization.
    """

    __tablename__ = "compliance_rule"

    rule_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    jurisdiction_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("compliance_jurisdiction.jurisdiction_id"),
        nullable=False,
        index=True,
    )
    organization_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("organization.organization_id"),
        nullable=True,
        index=True,
    )
    rule_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    rule_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default="MEDIUM")
    effective_date: Mapped[date] = mapped_column(nullable=False)
    expiration_date: Mapped[date | None] = mapped_column(nullable=True)
    rule_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    compliance_criteria: Mapped[str | None] = mapped_column(Text, nullable=True)
    violation_consequences: Mapped[str | None] = mapped_column(Text, nullable=True)
    remediation_steps: Mapped[str | None] = mapped_column(Text, nullable=True)
    check_frequency_days: Mapped[int | None] = mapped_column(nullable=True)
    auto_check_enabled: Mapped[bool] = mapped_column(default=False, nullable=False)
    check_query: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    legal_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    is_mandatory: Mapped[bool] = mapped_column(default=True, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "severity IN ('LOW', 'MEDIUM', 'HIGH', 'CRITICAL')",
            name="compliance_rule_severity_check",
        ),
        CheckConstraint(
            "expiration_date IS NULL OR effective_date <= expiration_date",
            name="compliance_rule_window_check",
        ),
    )

    @property
    def needs_periodic_check(self) -> bool:
        frequency = self.check_frequency_days
        return bool(self.auto_check_enabled and frequency is not None and frequency > 0)

    def is_effective(self, on: date) -> bool:
        """Check whether the rule is active and in force on a date."""
        if not self.is_active or self.effective_date > on:
            return False
        return self.expiration_date is None or on <= self.expiration_date


class ComplianceCheck(Base, TimestampMixin):
    """Dated evaluation of one rule against one organization (and optionally one employee)."""

    __tablename__ = "compliance_check"

    check_id: Mapped[UUID] = mapped_column(
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
    rule_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("compliance_rule.rule_id"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("employee.employee_id"),
        nullable=True,
    )
    check_date: Mapped[date] = mapped_column(nullable=False)
    check_type: Mapped[str] = mapped_column(String(16), nullable=False, default="MANUAL")
    checked_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    check_results: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="PENDING")
    compliance_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    findings: Mapped[str | None] = mapped_column(Text, nullable=True)
    violations: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)
    remediation_due_date: Mapped[date | None] = mapped_column(nullable=True)
    next_check_date: Mapped[date | None] = mapped_column(nullable=True)
    is_resolved: Mapped[bool] = mapped_column(default=False, nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    resolved_by_id: Mapped[UUID | None] = mapped_column(PGUUID(as_uuid=True), nullable=True)
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    alert_sent: Mapped[bool] = mapped_column(default=False, nullable=False)
    alert_sent_at: Mapped[datetime | None] = mapped_column(nullable=True)
    remediation_completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    remediated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'COMPLIANT', 'NON_COMPLIANT', 'WARNING', 'REVIEW_REQUIRED')",
            name="compliance_check_status_check",
        ),
    )

    @property
    def is_compliant(self) -> bool:
        return self.status == "COMPLIANT"

    def is_overdue(self, today: date) -> bool:
        return (
            not self.is_resolved
            and self.remediation_due_date is not None
            and self.remediation_due_date < today
        )
