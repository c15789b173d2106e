"""Compliance rule evaluators.

An evaluator turns (rule, organization, employee) into an evaluation result.
ComplianceService accepts any object implementing ``ComplianceEvaluator``;
``DefaultComplianceEvaluator`` is the built-in placeholder that scores by
rule category and never inspects organization data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from hrms_core.models import ComplianceRule, Employee, Organization
from hrms_core.models.enums import CheckStatus, ComplianceCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of evaluating one rule."""

    compliant: bool
    score: Decimal
    check_results: str
    findings: str | None = None
    violations: str | None = None
    recommendations: str | None = None

    @property
    def status(self) -> str:
        return CheckStatus.COMPLIANT.value if self.compliant else CheckStatus.NON_COMPLIANT.value


class ComplianceEvaluator(Protocol):
    """Protocol for rule evaluators."""

    def evaluate(
        self,
        rule: ComplianceRule,
        organization: Organization,
        employee: Employee | None = None,
    ) -> EvaluationResult:
        """Evaluate a rule for an organization (and optionally one employee)."""
        ...


# (score, check results, findings) per category
_CATEGORY_RESULTS: dict[str, tuple[int, str, str]] = {
    ComplianceCategory.LABOR_LAW.value: (
        95,
        "Labor law compliance check completed",
        "Organization meets basic labor law requirements",
    ),
    ComplianceCategory.TAX.value: (
        90,
        "Tax compliance check completed",
        "Tax obligations are being met",
    ),
    ComplianceCategory.SAFETY.value: (
        88,
        "Safety compliance check completed",
        "Safety protocols are in place and being followed",
    ),
    ComplianceCategory.PRIVACY.value: (
        92,
        "Privacy compliance check completed",
        "Data privacy measures are adequate",
    ),
    ComplianceCategory.GENERAL.value: (
        85,
        "General compliance check completed",
        "No significant compliance issues identified",
    ),
}


class DefaultComplianceEvaluator:
    """Placeholder evaluator.

    A rule with a custom ``check_query`` scores 100; otherwise the score is
    fixed per category (unknown categories count as GENERAL). Results are
    always compliant. Replace with a real evaluator to get actual findings.
    """

    def evaluate(
        self,
        rule: ComplianceRule,
        organization: Organization,
        employee: Employee | None = None,
    ) -> EvaluationResult:
        if rule.check_query and rule.check_query.strip():
            logger.debug("Executing custom compliance check query for rule %s", rule.rule_code)
            return EvaluationResult(
                compliant=True,
                score=Decimal(100),
                check_results="Custom compliance check executed successfully",
                findings="No violations found",
            )

        category = (rule.category or ComplianceCategory.GENERAL.value).upper()
        score, check_results, findings = _CATEGORY_RESULTS.get(
            category, _CATEGORY_RESULTS[ComplianceCategory.GENERAL.value]
        )
        return EvaluationResult(
            compliant=True,
            score=Decimal(score),
            check_results=check_results,
            findings=findings,
        )


def evaluate_safely(
    evaluator: ComplianceEvaluator,
    rule: ComplianceRule,
    organization: Organization,
    employee: Employee | None = None,
) -> EvaluationResult:
    """Run an evaluator, turning any exception into a non-compliant result."""
    try:
        return evaluator.evaluate(rule, organization, employee)
    except Exception as e:
        logger.exception("Error executing compliance check for rule %s", rule.rule_code)
        return EvaluationResult(
            compliant=False,
            score=Decimal(0),
            check_results=f"Error executing compliance check: {e}",
            findings="System error during compliance evaluation",
            violations="Unable to complete compliance check due to system error",
            recommendations="Contact system administrator to resolve compliance check issues",
        )
