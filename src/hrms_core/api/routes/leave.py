"""Leave types, balances and requests."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from hrms_core.api.dependencies import CurrentUsername, DbSession
from hrms_core.api.schemas import (
    BalanceAdjustment,
    CarryForwardRequest,
    CountResponse,
    ErrorResponse,
    LeaveBalanceResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveTypeCreate,
    LeaveTypeResponse,
    RejectionRequest,
)
from hrms_core.services import LeaveRequestData, LeaveService, LeaveTypeData

router = APIRouter(tags=["leave"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {409: {"model": ErrorResponse}}


# ============================================================================
# Leave types
# ============================================================================


@router.post(
    "/leave/types",
    response_model=LeaveTypeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def create_leave_type(db: DbSession, payload: LeaveTypeCreate) -> LeaveTypeResponse:
    leave_type = await LeaveService(db).create_leave_type(LeaveTypeData(**payload.model_dump()))
    return LeaveTypeResponse.model_validate(leave_type)


@router.get(
    "/organizations/{organization_id}/leave/types",
    response_model=list[LeaveTypeResponse],
)
async def list_leave_types(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> list[LeaveTypeResponse]:
    leave_types = await LeaveService(db).get_leave_types(organization_id)
    return [LeaveTypeResponse.model_validate(t) for t in leave_types]


@router.get("/leave/types/{leave_type_id}", response_model=LeaveTypeResponse, responses=NOT_FOUND)
async def get_leave_type(
    db: DbSession, leave_type_id: Annotated[UUID, Path()]
) -> LeaveTypeResponse:
    leave_type = await LeaveService(db).get_leave_type(leave_type_id)
    return LeaveTypeResponse.model_validate(leave_type)


# ============================================================================
# Balances
# ============================================================================


@router.post(
    "/employees/{employee_id}/leave/balances",
    response_model=list[LeaveBalanceResponse],
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND,
)
async def initialize_balances(
    db: DbSession, employee_id: Annotated[UUID, Path()], year: int | None = None
) -> list[LeaveBalanceResponse]:
    """Create any missing balances for the year; existing ones are left untouched."""
    balances = await LeaveService(db).initialize_leave_balances(employee_id, year)
    return [LeaveBalanceResponse.model_validate(b) for b in balances]


@router.get(
    "/employees/{employee_id}/leave/balances",
    response_model=list[LeaveBalanceResponse],
    responses=NOT_FOUND,
)
async def list_balances(
    db: DbSession, employee_id: Annotated[UUID, Path()], year: int | None = None
) -> list[LeaveBalanceResponse]:
    balances = await LeaveService(db).get_leave_balances(employee_id, year or date.today().year)
    return [LeaveBalanceResponse.model_validate(b) for b in balances]


@router.post(
    "/employees/{employee_id}/leave/balances/adjust",
    response_model=LeaveBalanceResponse,
    responses=NOT_FOUND,
)
async def adjust_balance(
    db: DbSession, employee_id: Annotated[UUID, Path()], payload: BalanceAdjustment
) -> LeaveBalanceResponse:
    balance = await LeaveService(db).adjust_balance(
        employee_id, payload.leave_type_id, payload.year, payload.days
    )
    return LeaveBalanceResponse.model_validate(balance)


@router.post("/leave/carry-forward", response_model=CountResponse)
async def carry_forward(db: DbSession, payload: CarryForwardRequest) -> CountResponse:
    count = await LeaveService(db).process_carry_forward(
        payload.from_year, payload.to_year, payload.organization_id
    )
    return CountResponse(count=count)


# ============================================================================
# Requests
# ============================================================================


@router.post(
    "/leave/requests",
    response_model=LeaveRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, **NOT_FOUND, **CONFLICT},
)
async def create_leave_request(
    db: DbSession, payload: LeaveRequestCreate
) -> LeaveRequestResponse:
    request = await LeaveService(db).create_leave_request(LeaveRequestData(**payload.model_dump()))
    return LeaveRequestResponse.model_validate(request)


@router.get(
    "/leave/requests/{leave_request_id}",
    response_model=LeaveRequestResponse,
    responses=NOT_FOUND,
)
async def get_leave_request(
    db: DbSession, leave_request_id: Annotated[UUID, Path()]
) -> LeaveRequestResponse:
    request = await LeaveService(db).get_leave_request(leave_request_id)
    return LeaveRequestResponse.model_validate(request)


@router.get(
    "/employees/{employee_id}/leave/requests",
    response_model=list[LeaveRequestResponse],
)
async def list_employee_requests(
    db: DbSession,
    employee_id: Annotated[UUID, Path()],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> list[LeaveRequestResponse]:
    requests = await LeaveService(db).get_employee_leave_requests(employee_id, status_filter)
    return [LeaveRequestResponse.model_validate(r) for r in requests]


@router.post(
    "/leave/requests/{leave_request_id}/approve",
    response_model=LeaveRequestResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def approve_leave_request(
    db: DbSession, username: CurrentUsername, leave_request_id: Annotated[UUID, Path()]
) -> LeaveRequestResponse:
    request = await LeaveService(db).approve_leave_request(leave_request_id, username)
    return LeaveRequestResponse.model_validate(request)


@router.post(
    "/leave/requests/{leave_request_id}/reject",
    response_model=LeaveRequestResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def reject_leave_request(
    db: DbSession,
    username: CurrentUsername,
    leave_request_id: Annotated[UUID, Path()],
    payload: RejectionRequest,
) -> LeaveRequestResponse:
    request = await LeaveService(db).reject_leave_request(
        leave_request_id, username, payload.reason
    )
    return LeaveRequestResponse.model_validate(request)


@router.post(
    "/leave/requests/{leave_request_id}/cancel",
    response_model=LeaveRequestResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def cancel_leave_request(
    db: DbSession, leave_request_id: Annotated[UUID, Path()]
) -> LeaveRequestResponse:
    request = await LeaveService(db).cancel_leave_request(leave_request_id)
    return LeaveRequestResponse.model_validate(request)


@router.post(
    "/leave/requests/{leave_request_id}/withdraw",
    response_model=LeaveRequestResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def withdraw_leave_request(
    db: DbSession, leave_request_id: Annotated[UUID, Path()]
) -> LeaveRequestResponse:
    request = await LeaveService(db).withdraw_leave_request(leave_request_id)
    return LeaveRequestResponse.model_validate(request)
