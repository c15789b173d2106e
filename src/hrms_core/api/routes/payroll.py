"""Payroll run endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from hrms_core.api.dependencies import CurrentUsername, DbSession, Paging
from hrms_core.api.schemas import (
    CancelRequest,
    ErrorResponse,
    PageResponse,
    PayrollItemResponse,
    PayrollRunCreate,
    PayrollRunResponse,
    PayslipDetailResponse,
    PayslipResponse,
    ProcessRequest,
)
from hrms_core.services import PayrollRunData, PayrollService

router = APIRouter(tags=["payroll"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {409: {"model": ErrorResponse}}


# ============================================================================
# Payroll runs
# ============================================================================


@router.post(
    "/payroll-runs",
    response_model=PayrollRunResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, **NOT_FOUND, **CONFLICT},
)
async def create_payroll_run(db: DbSession, payload: PayrollRunCreate) -> PayrollRunResponse:
    """Create a new payroll run in draft status."""
    run = await PayrollService(db).create_payroll_run(PayrollRunData(**payload.model_dump()))
    return PayrollRunResponse.model_validate(run)


@router.get(
    "/organizations/{organization_id}/payroll-runs",
    response_model=PageResponse[PayrollRunResponse],
)
async def list_payroll_runs(
    db: DbSession, paging: Paging, organization_id: Annotated[UUID, Path()]
) -> PageResponse[PayrollRunResponse]:
    page = await PayrollService(db).get_payroll_runs(organization_id, paging)
    return PageResponse.from_page(page, PayrollRunResponse)


@router.get(
    "/payroll-runs/{payroll_run_id}",
    response_model=PayrollRunResponse,
    responses=NOT_FOUND,
)
async def get_payroll_run(
    db: DbSession, payroll_run_id: Annotated[UUID, Path()]
) -> PayrollRunResponse:
    run = await PayrollService(db).get_payroll_run(payroll_run_id)
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/payroll-runs/{payroll_run_id}/process",
    response_model=PayrollRunResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def process_payroll_run(
    db: DbSession,
    username: CurrentUsername,
    payroll_run_id: Annotated[UUID, Path()],
    payload: ProcessRequest | None = None,
) -> PayrollRunResponse:
    """Calculate payslips for all active employees.

    A calculation failure is reported through the run's ERROR status and
    notes rather than an error response.
    """
    overtime = payload.overtime_hours if payload else None
    run = await PayrollService(db).process_payroll_run(payroll_run_id, username, overtime)
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/payroll-runs/{payroll_run_id}/approve",
    response_model=PayrollRunResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def approve_payroll_run(
    db: DbSession, username: CurrentUsername, payroll_run_id: Annotated[UUID, Path()]
) -> PayrollRunResponse:
    run = await PayrollService(db).approve_payroll_run(payroll_run_id, username)
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/payroll-runs/{payroll_run_id}/pay",
    response_model=PayrollRunResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def mark_payroll_run_paid(
    db: DbSession, username: CurrentUsername, payroll_run_id: Annotated[UUID, Path()]
) -> PayrollRunResponse:
    run = await PayrollService(db).mark_payroll_run_paid(payroll_run_id, username)
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/payroll-runs/{payroll_run_id}/cancel",
    response_model=PayrollRunResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def cancel_payroll_run(
    db: DbSession,
    payroll_run_id: Annotated[UUID, Path()],
    payload: CancelRequest | None = None,
) -> PayrollRunResponse:
    reason = payload.reason if payload else None
    run = await PayrollService(db).cancel_payroll_run(payroll_run_id, reason)
    return PayrollRunResponse.model_validate(run)


# ============================================================================
# Payslips
# ============================================================================


@router.get(
    "/payroll-runs/{payroll_run_id}/payslips",
    response_model=list[PayslipResponse],
    responses=NOT_FOUND,
)
async def list_payslips(
    db: DbSession, payroll_run_id: Annotated[UUID, Path()]
) -> list[PayslipResponse]:
    payslips = await PayrollService(db).get_payslips(payroll_run_id)
    return [PayslipResponse.model_validate(p) for p in payslips]


@router.get("/payslips/{payslip_id}", response_model=PayslipDetailResponse, responses=NOT_FOUND)
async def get_payslip(
    db: DbSession, payslip_id: Annotated[UUID, Path()]
) -> PayslipDetailResponse:
    """Payslip with its earning, deduction and tax lines in display order."""
    service = PayrollService(db)
    payslip = await service.get_payslip(payslip_id)
    items = await service.get_payslip_items(payslip_id)
    detail = PayslipDetailResponse.model_validate(payslip)
    detail.items = [PayrollItemResponse.model_validate(i) for i in items]
    return detail


@router.get(
    "/employees/{employee_id}/payslips",
    response_model=list[PayslipResponse],
    responses=NOT_FOUND,
)
async def list_employee_payslips(
    db: DbSession, employee_id: Annotated[UUID, Path()]
) -> list[PayslipResponse]:
    payslips = await PayrollService(db).get_employee_payslips(employee_id)
    return [PayslipResponse.model_validate(p) for p in payslips]
