"""Compliance jurisdiction, rule and check repositories."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import or_, select

from hrms_core.models import ComplianceCheck, ComplianceJurisdiction, ComplianceRule
from hrms_core.repositories.base import Page, PageRequest, Repository


class ComplianceJurisdictionRepository(Repository[ComplianceJurisdiction]):
    model = ComplianceJurisdiction
    default_order = "name"

    async def exists_by_code(self, code: str) -> bool:
        return await self.exists(ComplianceJurisdiction.code == code)

    async def find_by_code(self, code: str) -> ComplianceJurisdiction | None:
        return await self.find_one(ComplianceJurisdiction.code == code)


def _in_force(on: date):
    return (
        ComplianceRule.is_active.is_(True),
        ComplianceRule.effective_date <= on,
        or_(ComplianceRule.expiration_date.is_(None), ComplianceRule.expiration_date >= on),
    )


def _applies_to(organization_id: UUID):
    return or_(
        ComplianceRule.organization_id == organization_id,
        ComplianceRule.organization_id.is_(None),
    )


class ComplianceRuleRepository(Repository[ComplianceRule]):
    model = ComplianceRule
    default_order = "rule_code"

    async def find_by_rule_code(self, rule_code: str) -> ComplianceRule | None:
        return await self.find_one(ComplianceRule.rule_code == rule_code)

    async def exists_by_rule_code(self, rule_code: str) -> bool:
        return await self.exists(ComplianceRule.rule_code == rule_code)

    async def find_applicable_to_organization(self, organization_id: UUID) -> list[ComplianceRule]:
        """Rules owned by the organization plus system-wide rules."""
        return await self.find(_applies_to(organization_id))

    async def find_active(
        self, on: date, organization_id: UUID | None = None
    ) -> list[ComplianceRule]:
        criteria = list(_in_force(on))
        if organization_id is not None:
            criteria.append(_applies_to(organization_id))
        return await self.find(*criteria)

    async def find_by_jurisdiction(self, jurisdiction_id: UUID) -> list[ComplianceRule]:
        return await self.find(ComplianceRule.jurisdiction_id == jurisdiction_id)

    async def find_mandatory(self, organization_id: UUID | None = None) -> list[ComplianceRule]:
        criteria = [ComplianceRule.is_mandatory.is_(True), ComplianceRule.is_active.is_(True)]
        if organization_id is not None:
            criteria.append(_applies_to(organization_id))
        return await self.find(*criteria)

    async def find_by_severity(
        self, severity: str, organization_id: UUID | None = None
    ) -> list[ComplianceRule]:
        criteria = [ComplianceRule.severity == severity, ComplianceRule.is_active.is_(True)]
        if organization_id is not None:
            criteria.append(_applies_to(organization_id))
        return await self.find(*criteria)

    async def find_needing_periodic_check(self, on: date) -> list[ComplianceRule]:
        """Rules in force with automatic checking and a positive frequency."""
        return await self.find(
            *_in_force(on),
            ComplianceRule.auto_check_enabled.is_(True),
            ComplianceRule.check_frequency_days > 0,
        )

    async def count_applicable(self, organization_id: UUID) -> int:
        return await self.count(_applies_to(organization_id))

    async def count_active(self, organization_id: UUID, on: date) -> int:
        return await self.count(*_in_force(on), _applies_to(organization_id))


class ComplianceCheckRepository(Repository[ComplianceCheck]):
    model = ComplianceCheck

    async def find_latest_for_rule_and_organization(
        self, rule_id: UUID, organization_id: UUID
    ) -> ComplianceCheck | None:
        result = await self.session.execute(
            select(ComplianceCheck)
            .where(
                ComplianceCheck.rule_id == rule_id,
                ComplianceCheck.organization_id == organization_id,
            )
            .order_by(ComplianceCheck.check_date.desc(), ComplianceCheck.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def exists_by_rule(self, rule_id: UUID) -> bool:
        return await self.exists(ComplianceCheck.rule_id == rule_id)

    async def page_by_organization(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[ComplianceCheck]:
        query = (
            select(ComplianceCheck)
            .where(ComplianceCheck.organization_id == organization_id)
            .order_by(ComplianceCheck.check_date.desc())
        )
        return await self.paginate_query(query, page_request)

    async def find_by_organization_and_date_range(
        self, organization_id: UUID, start: date, end: date
    ) -> list[ComplianceCheck]:
        return await self.find(
            ComplianceCheck.organization_id == organization_id,
            ComplianceCheck.check_date.between(start, end),
            order_by=[ComplianceCheck.check_date],
        )

    async def find_non_compliant(self, organization_id: UUID) -> list[ComplianceCheck]:
        return await self.find(
            ComplianceCheck.organization_id == organization_id,
            ComplianceCheck.status == "NON_COMPLIANT",
            order_by=[ComplianceCheck.check_date.desc()],
        )

    async def find_unresolved_non_compliant(self, organization_id: UUID) -> list[ComplianceCheck]:
        return await self.find(
            ComplianceCheck.organization_id == organization_id,
            ComplianceCheck.status == "NON_COMPLIANT",
            ComplianceCheck.is_resolved.is_(False),
            order_by=[ComplianceCheck.check_date.desc()],
        )

    async def find_needing_alerts(self) -> list[ComplianceCheck]:
        """Non-compliant checks whose alert has not gone out yet."""
        return await self.find(
            ComplianceCheck.status == "NON_COMPLIANT",
            ComplianceCheck.alert_sent.is_(False),
            order_by=[ComplianceCheck.check_date],
        )

    async def find_overdue(self, organization_id: UUID, today: date) -> list[ComplianceCheck]:
        return await self.find(
            ComplianceCheck.organization_id == organization_id,
            ComplianceCheck.is_resolved.is_(False),
            ComplianceCheck.remediation_due_date < today,
            order_by=[ComplianceCheck.remediation_due_date],
        )

    async def count_by_organization(self, organization_id: UUID) -> int:
        return await self.count(ComplianceCheck.organization_id == organization_id)

    async def count_by_status(self, organization_id: UUID, status: str) -> int:
        return await self.count(
            ComplianceCheck.organization_id == organization_id,
            ComplianceCheck.status == status,
        )

    async def count_unresolved_non_compliant(self, organization_id: UUID) -> int:
        return await self.count(
            ComplianceCheck.organization_id == organization_id,
            ComplianceCheck.status == "NON_COMPLIANT",
            ComplianceCheck.is_resolved.is_(False),
        )

    async def count_overdue(self, organization_id: UUID, today: date) -> int:
        return await self.count(
            ComplianceCheck.organization_id == organization_id,
            ComplianceCheck.is_resolved.is_(False),
            ComplianceCheck.remediation_due_date < today,
        )
