"""Compliance endpoints: jurisdictions, rules, checks, violations and reports."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from hrms_core.api.dependencies import CurrentUsername, DbSession, Paging, SessionFactory
from hrms_core.api.schemas import (
    CheckRequest,
    ComplianceCheckResponse,
    ComplianceReportResponse,
    ComplianceRuleCreate,
    ComplianceRuleResponse,
    ComplianceSummaryResponse,
    ComplianceViolationResponse,
    ErrorResponse,
    JobAccepted,
    JurisdictionCreate,
    JurisdictionResponse,
    PageResponse,
    ResolveRequest,
    ViolationCategoryCount,
)
from hrms_core.services import ComplianceRuleData, ComplianceService
from hrms_core.services.background import schedule_compliance_sweep, schedule_pending_alerts

router = APIRouter(tags=["compliance"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {409: {"model": ErrorResponse}}


# ============================================================================
# Jurisdictions
# ============================================================================


@router.post(
    "/compliance/jurisdictions",
    response_model=JurisdictionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
async def create_jurisdiction(db: DbSession, payload: JurisdictionCreate) -> JurisdictionResponse:
    jurisdiction = await ComplianceService(db).create_jurisdiction(**payload.model_dump())
    return JurisdictionResponse.model_validate(jurisdiction)


@router.get("/compliance/jurisdictions", response_model=list[JurisdictionResponse])
async def list_jurisdictions(db: DbSession) -> list[JurisdictionResponse]:
    jurisdictions = await ComplianceService(db).get_jurisdictions()
    return [JurisdictionResponse.model_validate(j) for j in jurisdictions]


# ============================================================================
# Rules
# ============================================================================


@router.post(
    "/compliance/rules",
    response_model=ComplianceRuleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def create_rule(db: DbSession, payload: ComplianceRuleCreate) -> ComplianceRuleResponse:
    rule = await ComplianceService(db).create_compliance_rule(
        ComplianceRuleData(**payload.model_dump())
    )
    return ComplianceRuleResponse.model_validate(rule)


@router.get("/compliance/rules", response_model=list[ComplianceRuleResponse])
async def list_active_rules(
    db: DbSession, organization_id: UUID | None = None
) -> list[ComplianceRuleResponse]:
    """Rules in effect today, global ones included."""
    rules = await ComplianceService(db).get_active_rules(organization_id)
    return [ComplianceRuleResponse.model_validate(r) for r in rules]


@router.get(
    "/compliance/rules/{rule_id}",
    response_model=ComplianceRuleResponse,
    responses=NOT_FOUND,
)
async def get_rule(db: DbSession, rule_id: Annotated[UUID, Path()]) -> ComplianceRuleResponse:
    rule = await ComplianceService(db).get_compliance_rule(rule_id)
    return ComplianceRuleResponse.model_validate(rule)


@router.put(
    "/compliance/rules/{rule_id}",
    response_model=ComplianceRuleResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def update_rule(
    db: DbSession, rule_id: Annotated[UUID, Path()], payload: ComplianceRuleCreate
) -> ComplianceRuleResponse:
    rule = await ComplianceService(db).update_compliance_rule(
        rule_id, ComplianceRuleData(**payload.model_dump())
    )
    return ComplianceRuleResponse.model_validate(rule)


@router.delete(
    "/compliance/rules/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
)
async def delete_rule(db: DbSession, rule_id: Annotated[UUID, Path()]) -> Response:
    await ComplianceService(db).delete_compliance_rule(rule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/organizations/{organization_id}/compliance/rules",
    response_model=list[ComplianceRuleResponse],
)
async def list_organization_rules(
    db: DbSession,
    organization_id: Annotated[UUID, Path()],
    mandatory_only: bool = False,
) -> list[ComplianceRuleResponse]:
    service = ComplianceService(db)
    if mandatory_only:
        rules = await service.get_mandatory_rules(organization_id)
    else:
        rules = await service.get_rules_by_organization(organization_id)
    return [ComplianceRuleResponse.model_validate(r) for r in rules]


# ============================================================================
# Checks
# ============================================================================


@router.post(
    "/compliance/rules/{rule_id}/checks",
    response_model=ComplianceCheckResponse,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND,
)
async def perform_check(
    db: DbSession,
    username: CurrentUsername,
    rule_id: Annotated[UUID, Path()],
    payload: CheckRequest,
) -> ComplianceCheckResponse:
    check = await ComplianceService(db).perform_compliance_check(
        rule_id, payload.organization_id, username, employee_id=payload.employee_id
    )
    return ComplianceCheckResponse.model_validate(check)


@router.post(
    "/organizations/{organization_id}/compliance/checks/run",
    response_model=list[ComplianceCheckResponse],
    responses=NOT_FOUND,
)
async def run_checks(
    db: DbSession, username: CurrentUsername, organization_id: Annotated[UUID, Path()]
) -> list[ComplianceCheckResponse]:
    """Check every active rule that applies to the organization."""
    checks = await ComplianceService(db).run_compliance_checks(organization_id, username)
    return [ComplianceCheckResponse.model_validate(c) for c in checks]


@router.get(
    "/organizations/{organization_id}/compliance/checks",
    response_model=PageResponse[ComplianceCheckResponse],
)
async def list_checks(
    db: DbSession, paging: Paging, organization_id: Annotated[UUID, Path()]
) -> PageResponse[ComplianceCheckResponse]:
    page = await ComplianceService(db).get_checks_by_organization(organization_id, paging)
    return PageResponse.from_page(page, ComplianceCheckResponse)


@router.get(
    "/organizations/{organization_id}/compliance/checks/overdue",
    response_model=list[ComplianceCheckResponse],
)
async def list_overdue_checks(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> list[ComplianceCheckResponse]:
    checks = await ComplianceService(db).get_overdue_checks(organization_id)
    return [ComplianceCheckResponse.model_validate(c) for c in checks]


@router.get(
    "/compliance/checks/{check_id}",
    response_model=ComplianceCheckResponse,
    responses=NOT_FOUND,
)
async def get_check(db: DbSession, check_id: Annotated[UUID, Path()]) -> ComplianceCheckResponse:
    check = await ComplianceService(db).get_compliance_check(check_id)
    return ComplianceCheckResponse.model_validate(check)


@router.post(
    "/compliance/checks/{check_id}/resolve",
    response_model=ComplianceCheckResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def resolve_check(
    db: DbSession, check_id: Annotated[UUID, Path()], payload: ResolveRequest
) -> ComplianceCheckResponse:
    check = await ComplianceService(db).resolve_compliance_check(
        check_id, payload.resolved_by_id, payload.notes
    )
    return ComplianceCheckResponse.model_validate(check)


@router.post(
    "/compliance/checks/{check_id}/remediate",
    response_model=ComplianceCheckResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def complete_remediation(
    db: DbSession, username: CurrentUsername, check_id: Annotated[UUID, Path()]
) -> ComplianceCheckResponse:
    check = await ComplianceService(db).complete_remediation(check_id, username)
    return ComplianceCheckResponse.model_validate(check)


# ============================================================================
# Violations and reporting
# ============================================================================


@router.get(
    "/organizations/{organization_id}/compliance/violations",
    response_model=list[ComplianceViolationResponse],
)
async def list_violations(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> list[ComplianceViolationResponse]:
    """Unresolved non-compliant checks, most severe first."""
    violations = await ComplianceService(db).detect_violations(organization_id)
    return [ComplianceViolationResponse.model_validate(v) for v in violations]


@router.get(
    "/organizations/{organization_id}/compliance/report",
    response_model=ComplianceReportResponse,
    responses={400: {"model": ErrorResponse}, **NOT_FOUND},
)
async def compliance_report(
    db: DbSession,
    organization_id: Annotated[UUID, Path()],
    start: Annotated[date, Query()],
    end: Annotated[date, Query()],
) -> ComplianceReportResponse:
    report = await ComplianceService(db).generate_compliance_report(organization_id, start, end)
    return ComplianceReportResponse(
        organization_id=report.organization_id,
        period_start=report.period_start,
        period_end=report.period_end,
        generated_at=report.generated_at,
        total_checks=report.total_checks,
        compliant_checks=report.compliant_checks,
        non_compliant_checks=report.non_compliant_checks,
        unresolved_checks=report.unresolved_checks,
        overdue_checks=report.overdue_checks,
        compliance_rate=report.compliance_rate,
        average_score=report.average_score,
        critical_violations=report.critical_violations,
        high_severity_violations=report.high_severity_violations,
        top_violation_categories=[
            ViolationCategoryCount(category=category, count=count)
            for category, count in report.top_violation_categories
        ],
    )


@router.get(
    "/organizations/{organization_id}/compliance/summary",
    response_model=ComplianceSummaryResponse,
    responses=NOT_FOUND,
)
async def compliance_summary(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> ComplianceSummaryResponse:
    summary = await ComplianceService(db).get_compliance_summary(organization_id)
    return ComplianceSummaryResponse.model_validate(summary)


# ============================================================================
# Background jobs
# ============================================================================


@router.post(
    "/compliance/sweep",
    response_model=JobAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def trigger_sweep(
    factory: SessionFactory, organization_id: UUID | None = None
) -> JobAccepted:
    """Schedule automated compliance checks without waiting for them."""
    schedule_compliance_sweep(factory, organization_id)
    return JobAccepted(job="compliance-sweep")


@router.post(
    "/compliance/alerts/dispatch",
    response_model=JobAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def trigger_alert_dispatch(factory: SessionFactory) -> JobAccepted:
    """Schedule delivery of pending violation alerts."""
    schedule_pending_alerts(factory)
    return JobAccepted(job="send-violation-alerts")
