"""Compliance service - rules, checks, violation alerts and reporting.

Checks are dated evaluations of one rule against one organization. A check
starts PENDING, is moved to COMPLIANT or NON_COMPLIANT by the evaluator and
is then immutable apart from resolution, remediation and the alert flag.

Batch operations (automated sweeps, run-all, pending alert dispatch) log and
skip per-item failures so that one bad rule does not stop the rest.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.models import (
    ComplianceCheck,
    ComplianceJurisdiction,
    ComplianceRule,
    Employee,
    Organization,
)
from hrms_core.models.base import utcnow
from hrms_core.models.enums import (
    CheckStatus,
    CheckType,
    ComplianceCategory,
    ComplianceSeverity,
    JurisdictionType,
    NotificationPriority,
)
from hrms_core.repositories import (
    ComplianceCheckRepository,
    ComplianceJurisdictionRepository,
    ComplianceRuleRepository,
    EmployeeRepository,
    OrganizationRepository,
    Page,
    PageRequest,
)
from hrms_core.services.common import apply_fields, enum_value, require
from hrms_core.services.compliance_evaluator import (
    ComplianceEvaluator,
    DefaultComplianceEvaluator,
    evaluate_safely,
)
from hrms_core.services.notification_service import NotificationService
from hrms_core.services.state_machine import ComplianceCheckStateMachine

logger = logging.getLogger(__name__)

SYSTEM_USER = "SYSTEM"

_ALERT_PRIORITY = {
    ComplianceSeverity.CRITICAL.value: NotificationPriority.URGENT.value,
    ComplianceSeverity.HIGH.value: NotificationPriority.HIGH.value,
    ComplianceSeverity.MEDIUM.value: NotificationPriority.NORMAL.value,
    ComplianceSeverity.LOW.value: NotificationPriority.LOW.value,
}


@dataclass
class ComplianceRuleData:
    """Writable compliance rule fields."""

    name: str
    rule_code: str
    jurisdiction_id: UUID | None
    effective_date: date | None
    organization_id: UUID | None = None
    description: str | None = None
    category: str | None = None
    rule_type: str | None = None
    severity: str = ComplianceSeverity.MEDIUM.value
    expiration_date: date | None = None
    rule_text: str | None = None
    compliance_criteria: str | None = None
    violation_consequences: str | None = None
    remediation_steps: str | None = None
    check_frequency_days: int | None = None
    auto_check_enabled: bool = False
    check_query: str | None = None
    reference_url: str | None = None
    legal_reference: str | None = None
    notes: str | None = None
    is_mandatory: bool = True


@dataclass
class ComplianceViolation:
    """Unresolved non-compliant check, flattened with its rule."""

    check_id: UUID
    rule_code: str
    rule_name: str
    severity: str
    category: str
    check_date: date
    violations: str | None
    recommendations: str | None
    remediation_due_date: date | None
    is_overdue: bool


@dataclass
class ComplianceReport:
    organization_id: UUID
    period_start: date
    period_end: date
    generated_at: datetime
    total_checks: int = 0
    compliant_checks: int = 0
    non_compliant_checks: int = 0
    unresolved_checks: int = 0
    overdue_checks: int = 0
    compliance_rate: float = 100.0
    average_score: float = 0.0
    critical_violations: int = 0
    high_severity_violations: int = 0
    top_violation_categories: list[tuple[str, int]] = field(default_factory=list)


@dataclass
class ComplianceSummary:
    organization_id: UUID
    total_rules: int
    active_rules: int
    total_checks: int
    non_compliant_checks: int
    unresolved_checks: int
    overdue_checks: int
    compliance_rate: float


class ComplianceService:
    def __init__(self, session: AsyncSession, evaluator: ComplianceEvaluator | None = None):
        self.session = session
        self.evaluator = evaluator or DefaultComplianceEvaluator()
        self.rules = ComplianceRuleRepository(session)
        self.checks = ComplianceCheckRepository(session)
        self.jurisdictions = ComplianceJurisdictionRepository(session)
        self.organizations = OrganizationRepository(session)
        self.employees = EmployeeRepository(session)
        self.notifications = NotificationService(session)

    # Rules

    async def create_compliance_rule(self, data: ComplianceRuleData) -> ComplianceRule:
        await self._validate_rule(data)
        if await self.rules.exists_by_rule_code(data.rule_code):
            raise ConflictError(f"Compliance rule with code '{data.rule_code}' already exists")

        rule = ComplianceRule(is_active=True)
        apply_fields(rule, data)
        await self.rules.add(rule)
        logger.info("Created compliance rule %s (%s)", rule.name, rule.rule_code)
        return rule

    async def update_compliance_rule(
        self, rule_id: UUID, data: ComplianceRuleData
    ) -> ComplianceRule:
        rule = await self.get_compliance_rule(rule_id)
        await self._validate_rule(data)

        existing = await self.rules.find_by_rule_code(data.rule_code)
        if existing is not None and existing.rule_id != rule_id:
            raise ConflictError(f"Compliance rule with code '{data.rule_code}' already exists")

        apply_fields(rule, data)
        await self.session.flush()
        logger.info("Updated compliance rule %s (%s)", rule.name, rule_id)
        return rule

    async def get_compliance_rule(self, rule_id: UUID) -> ComplianceRule:
        rule = await self.rules.get(rule_id)
        if rule is None:
            raise NotFoundError("Compliance rule", rule_id)
        return rule

    async def get_rules_by_organization(self, organization_id: UUID) -> list[ComplianceRule]:
        """Rules owned by the organization plus system-wide rules."""
        await self._get_organization(organization_id)
        return await self.rules.find_applicable_to_organization(organization_id)

    async def get_active_rules(self, organization_id: UUID | None = None) -> list[ComplianceRule]:
        if organization_id is not None:
            await self._get_organization(organization_id)
        return await self.rules.find_active(date.today(), organization_id)

    async def get_rules_by_jurisdiction(self, jurisdiction_id: UUID) -> list[ComplianceRule]:
        await self.get_jurisdiction(jurisdiction_id)
        return await self.rules.find_by_jurisdiction(jurisdiction_id)

    async def get_mandatory_rules(self, organization_id: UUID) -> list[ComplianceRule]:
        await self._get_organization(organization_id)
        return await self.rules.find_mandatory(organization_id)

    async def get_critical_rules(self, organization_id: UUID) -> list[ComplianceRule]:
        await self._get_organization(organization_id)
        return await self.rules.find_by_severity(ComplianceSeverity.CRITICAL.value, organization_id)

    async def delete_compliance_rule(self, rule_id: UUID) -> None:
        rule = await self.get_compliance_rule(rule_id)
        if await self.checks.exists_by_rule(rule_id):
            raise StateConflictError(
                "Cannot delete compliance rule that has associated compliance checks"
            )
        await self.rules.delete(rule)
        logger.info("Deleted compliance rule %s (%s)", rule.name, rule_id)

    # Checks

    async def perform_compliance_check(
        self,
        rule_id: UUID,
        organization_id: UUID,
        checked_by: str,
        employee_id: UUID | None = None,
        check_type: str = CheckType.MANUAL.value,
    ) -> ComplianceCheck:
        rule = await self.get_compliance_rule(rule_id)
        organization = await self._get_organization(organization_id)
        employee = None
        if employee_id is not None:
            employee = await self.employees.get(employee_id)
            if employee is None:
                raise NotFoundError("Employee", employee_id)
        return await self._perform_check(rule, organization, employee, checked_by, check_type)

    async def should_perform_check(self, rule: ComplianceRule, organization_id: UUID) -> bool:
        """Due when there is no prior check or its next check date has arrived."""
        latest = await self.checks.find_latest_for_rule_and_organization(
            rule.rule_id, organization_id
        )
        if latest is None:
            return True
        return latest.next_check_date is not None and date.today() >= latest.next_check_date

    async def execute_automated_compliance_checks(self) -> int:
        """Sweep every rule due for periodic checking across its organizations."""
        logger.info("Starting automated compliance checks")
        rules = await self.rules.find_needing_periodic_check(date.today())
        performed = 0
        active_organizations: list[Organization] | None = None

        for rule in rules:
            if rule.organization_id is not None:
                organization = await self.organizations.get(rule.organization_id)
                targets = [organization] if organization is not None else []
            else:
                if active_organizations is None:
                    active_organizations = await self.organizations.find_active()
                targets = active_organizations

            for organization in targets:
                if await self._automated_check(rule, organization):
                    performed += 1

        logger.info(
            "Completed automated compliance checks: %d rule(s), %d check(s) performed",
            len(rules),
            performed,
        )
        return performed

    async def execute_automated_compliance_checks_for_organization(
        self, organization_id: UUID
    ) -> int:
        organization = await self._get_organization(organization_id)
        rules = await self.rules.find_needing_periodic_check(date.today())
        performed = 0
        for rule in rules:
            if rule.organization_id not in (None, organization_id):
                continue
            if await self._automated_check(rule, organization):
                performed += 1
        logger.info(
            "Completed automated compliance checks for organization %s: %d check(s)",
            organization.name,
            performed,
        )
        return performed

    async def run_compliance_checks(
        self, organization_id: UUID, checked_by: str
    ) -> list[ComplianceCheck]:
        """Check every active rule applicable to the organization."""
        organization = await self._get_organization(organization_id)
        rules = await self.rules.find_active(date.today(), organization_id)

        results: list[ComplianceCheck] = []
        for rule in rules:
            try:
                async with self.session.begin_nested():
                    check = await self._perform_check(
                        rule, organization, None, checked_by, CheckType.MANUAL.value
                    )
            except Exception:
                logger.exception("Error running compliance check for rule %s", rule.rule_code)
                continue
            results.append(check)

        logger.info(
            "Completed compliance checks for organization %s: %d check(s) performed",
            organization.name,
            len(results),
        )
        return results

    async def detect_violations(self, organization_id: UUID) -> list[ComplianceViolation]:
        await self._get_organization(organization_id)
        checks = await self.checks.find_unresolved_non_compliant(organization_id)
        rules = await self._rules_for(checks)
        today = date.today()

        violations = []
        for check in checks:
            rule = rules[check.rule_id]
            violations.append(
                ComplianceViolation(
                    check_id=check.check_id,
                    rule_code=rule.rule_code,
                    rule_name=rule.name,
                    severity=rule.severity,
                    category=rule.category or ComplianceCategory.GENERAL.value,
                    check_date=check.check_date,
                    violations=check.violations,
                    recommendations=check.recommendations,
                    remediation_due_date=check.remediation_due_date,
                    is_overdue=check.is_overdue(today),
                )
            )
        logger.info(
            "Detected %d violation(s) for organization %s", len(violations), organization_id
        )
        return violations

    async def get_compliance_check(self, check_id: UUID) -> ComplianceCheck:
        check = await self.checks.get(check_id)
        if check is None:
            raise NotFoundError("Compliance check", check_id)
        return check

    async def get_checks_by_organization(
        self, organization_id: UUID, page_request: PageRequest
    ) -> Page[ComplianceCheck]:
        await self._get_organization(organization_id)
        return await self.checks.page_by_organization(organization_id, page_request)

    async def get_overdue_checks(self, organization_id: UUID) -> list[ComplianceCheck]:
        await self._get_organization(organization_id)
        return await self.checks.find_overdue(organization_id, date.today())

    async def resolve_compliance_check(
        self, check_id: UUID, resolved_by_id: UUID, notes: str | None = None
    ) -> ComplianceCheck:
        check = await self.get_compliance_check(check_id)
        if check.is_resolved:
            raise StateConflictError("Compliance check is already resolved")
        resolver = await self.employees.get(resolved_by_id)
        if resolver is None:
            raise NotFoundError("Employee", resolved_by_id)

        check.is_resolved = True
        check.resolved_at = utcnow()
        check.resolved_by_id = resolved_by_id
        check.resolution_notes = notes
        await self.session.flush()
        logger.info("Resolved compliance check %s by %s", check_id, resolver.full_name)
        return check

    async def complete_remediation(self, check_id: UUID, remediated_by: str) -> ComplianceCheck:
        check = await self.get_compliance_check(check_id)
        if check.remediation_completed_at is not None:
            raise StateConflictError("Remediation is already completed")
        check.remediation_completed_at = utcnow()
        check.remediated_by = remediated_by
        await self.session.flush()
        logger.info("Completed remediation for compliance check %s by %s", check_id, remediated_by)
        return check

    # Alerts

    async def generate_violation_alert(self, check: ComplianceCheck) -> bool:
        """Raise a compliance notification for a non-compliant check, at most once.

        Returns True when an alert was created. Failures are logged, not raised.
        """
        if check.is_compliant or check.alert_sent:
            return False
        check_id = check.check_id
        try:
            async with self.session.begin_nested():
                rule = await self.get_compliance_rule(check.rule_id)
                organization = await self._get_organization(check.organization_id)
                await self.notifications.create_compliance_alert(
                    organization.organization_id,
                    f"Compliance Violation Detected: {rule.name}",
                    self._alert_message(check, rule, organization),
                    check_id,
                    priority=_ALERT_PRIORITY.get(rule.severity, NotificationPriority.HIGH.value),
                )
                check.alert_sent = True
                check.alert_sent_at = utcnow()
        except Exception:
            logger.exception("Error generating alert for compliance check %s", check_id)
            await self.session.refresh(check)
            return False
        return True

    async def get_violation_alerts(self, organization_id: UUID) -> list[ComplianceCheck]:
        await self._get_organization(organization_id)
        return await self.checks.find_non_compliant(organization_id)

    async def get_checks_needing_alerts(self) -> list[ComplianceCheck]:
        return await self.checks.find_needing_alerts()

    async def send_pending_violation_alerts(self) -> int:
        checks = await self.checks.find_needing_alerts()
        sent = 0
        for check in checks:
            if await self.generate_violation_alert(check):
                sent += 1
        logger.info("Sent %d of %d pending violation alert(s)", sent, len(checks))
        return sent

    # Reporting

    async def generate_compliance_report(
        self, organization_id: UUID, start: date, end: date
    ) -> ComplianceReport:
        if start > end:
            raise ValidationError("Start date cannot be after end date")
        organization = await self._get_organization(organization_id)
        checks = await self.checks.find_by_organization_and_date_range(organization_id, start, end)
        rules = await self._rules_for(checks)
        today = date.today()

        report = ComplianceReport(
            organization_id=organization_id,
            period_start=start,
            period_end=end,
            generated_at=utcnow(),
        )
        non_compliant = [c for c in checks if c.status == CheckStatus.NON_COMPLIANT.value]
        report.total_checks = len(checks)
        report.compliant_checks = sum(1 for c in checks if c.is_compliant)
        report.non_compliant_checks = len(non_compliant)
        report.unresolved_checks = sum(1 for c in checks if not c.is_resolved)
        report.overdue_checks = sum(1 for c in checks if c.is_overdue(today))
        if checks:
            report.compliance_rate = report.compliant_checks / len(checks) * 100

        scores = [c.compliance_score for c in checks if c.compliance_score is not None]
        if scores:
            report.average_score = float(sum(scores, Decimal(0)) / len(scores))

        severities = Counter(rules[c.rule_id].severity for c in non_compliant)
        report.critical_violations = severities[ComplianceSeverity.CRITICAL.value]
        report.high_severity_violations = severities[ComplianceSeverity.HIGH.value]
        categories = Counter(
            rules[c.rule_id].category or ComplianceCategory.GENERAL.value for c in non_compliant
        )
        report.top_violation_categories = categories.most_common(5)

        logger.info(
            "Generated compliance report for %s: %d check(s), rate %.2f%%",
            organization.name,
            report.total_checks,
            report.compliance_rate,
        )
        return report

    async def get_compliance_summary(self, organization_id: UUID) -> ComplianceSummary:
        await self._get_organization(organization_id)
        today = date.today()
        total_checks = await self.checks.count_by_organization(organization_id)
        non_compliant = await self.checks.count_by_status(
            organization_id, CheckStatus.NON_COMPLIANT.value
        )
        rate = 100.0
        if total_checks:
            rate = (total_checks - non_compliant) / total_checks * 100
        return ComplianceSummary(
            organization_id=organization_id,
            total_rules=await self.rules.count_applicable(organization_id),
            active_rules=await self.rules.count_active(organization_id, today),
            total_checks=total_checks,
            non_compliant_checks=non_compliant,
            unresolved_checks=await self.checks.count_unresolved_non_compliant(organization_id),
            overdue_checks=await self.checks.count_overdue(organization_id, today),
            compliance_rate=rate,
        )

    # Jurisdictions

    async def create_jurisdiction(
        self,
        name: str,
        code: str,
        jurisdiction_type: str = JurisdictionType.COUNTRY.value,
        country_code: str | None = None,
        description: str | None = None,
    ) -> ComplianceJurisdiction:
        require(name, "Jurisdiction name is required")
        require(code, "Jurisdiction code is required")
        if await self.jurisdictions.exists_by_code(code):
            raise ConflictError(f"Jurisdiction with code '{code}' already exists")

        jurisdiction = ComplianceJurisdiction(
            name=name,
            code=code,
            jurisdiction_type=enum_value(JurisdictionType, jurisdiction_type, "jurisdiction type"),
            country_code=country_code,
            description=description,
            is_active=True,
        )
        await self.jurisdictions.add(jurisdiction)
        logger.info("Created compliance jurisdiction %s (%s)", name, code)
        return jurisdiction

    async def get_jurisdictions(self) -> list[ComplianceJurisdiction]:
        return await self.jurisdictions.find_all()

    async def get_jurisdiction(self, jurisdiction_id: UUID) -> ComplianceJurisdiction:
        jurisdiction = await self.jurisdictions.get(jurisdiction_id)
        if jurisdiction is None:
            raise NotFoundError("Jurisdiction", jurisdiction_id)
        return jurisdiction

    # Internals

    async def _perform_check(
        self,
        rule: ComplianceRule,
        organization: Organization,
        employee: Employee | None,
        checked_by: str,
        check_type: str,
    ) -> ComplianceCheck:
        logger.info(
            "Performing compliance check for rule %s on organization %s",
            rule.rule_code,
            organization.name,
        )
        today = date.today()
        check = ComplianceCheck(
            organization_id=organization.organization_id,
            rule_id=rule.rule_id,
            employee_id=employee.employee_id if employee else None,
            check_date=today,
            check_type=enum_value(CheckType, check_type, "check type"),
            checked_by=checked_by,
            status=CheckStatus.PENDING.value,
            is_resolved=False,
            alert_sent=False,
        )

        result = evaluate_safely(self.evaluator, rule, organization, employee)
        ComplianceCheckStateMachine.validate_transition(check.status, result.status)
        check.status = result.status
        check.compliance_score = result.score
        check.check_results = result.check_results
        check.findings = result.findings
        check.violations = result.violations
        check.recommendations = result.recommendations

        frequency = rule.check_frequency_days
        if not result.compliant and frequency is not None:
            check.remediation_due_date = today + timedelta(days=frequency)
        if rule.needs_periodic_check:
            check.next_check_date = today + timedelta(days=frequency)

        await self.checks.add(check)
        if not result.compliant:
            await self.generate_violation_alert(check)

        logger.info(
            "Compliance check completed for rule %s: %s", rule.rule_code, check.status
        )
        return check

    async def _automated_check(self, rule: ComplianceRule, organization: Organization) -> bool:
        rule_code, organization_name = rule.rule_code, organization.name
        try:
            if not await self.should_perform_check(rule, organization.organization_id):
                return False
            async with self.session.begin_nested():
                await self._perform_check(
                    rule, organization, None, SYSTEM_USER, CheckType.AUTOMATED.value
                )
        except Exception:
            logger.exception(
                "Error executing automated check for rule %s in organization %s",
                rule_code,
                organization_name,
            )
            return False
        return True

    async def _rules_for(self, checks: list[ComplianceCheck]) -> dict[UUID, ComplianceRule]:
        rules: dict[UUID, ComplianceRule] = {}
        for rule_id in {c.rule_id for c in checks}:
            rules[rule_id] = await self.get_compliance_rule(rule_id)
        return rules

    async def _get_organization(self, organization_id: UUID) -> Organization:
        organization = await self.organizations.get(organization_id)
        if organization is None:
            raise NotFoundError("Organization", organization_id)
        return organization

    async def _validate_rule(self, data: ComplianceRuleData) -> None:
        require(data.name, "Rule name is required")
        require(data.rule_code, "Rule code is required")
        if data.jurisdiction_id is None:
            raise ValidationError("Jurisdiction is required")
        if data.effective_date is None:
            raise ValidationError("Effective date is required")
        if data.expiration_date is not None and data.effective_date > data.expiration_date:
            raise ValidationError("Effective date cannot be after expiration date")
        if data.check_frequency_days is not None and data.check_frequency_days <= 0:
            raise ValidationError("Check frequency days must be positive")
        data.severity = enum_value(ComplianceSeverity, data.severity, "severity")

        await self.get_jurisdiction(data.jurisdiction_id)
        if data.organization_id is not None:
            await self._get_organization(data.organization_id)

    @staticmethod
    def _alert_message(
        check: ComplianceCheck, rule: ComplianceRule, organization: Organization
    ) -> str:
        lines = [
            "A compliance violation has been detected:",
            "",
            f"Rule: {rule.name}",
            f"Organization: {organization.name}",
            f"Check Date: {check.check_date}",
            f"Status: {check.status}",
        ]
        if check.compliance_score is not None:
            lines.append(f"Compliance Score: {check.compliance_score}%")
        if check.violations:
            lines += ["", "Violations:", check.violations]
        if check.recommendations:
            lines += ["", "Recommendations:", check.recommendations]
        if check.remediation_due_date is not None:
            lines += ["", f"Remediation Due Date: {check.remediation_due_date}"]
        return "\n".join(lines)
