"""Employee and bank account endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from hrms_core.api.dependencies import DbSession, Paging
from hrms_core.api.schemas import (
    BankAccountCreate,
    BankAccountResponse,
    ConfirmationRequest,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeStatisticsResponse,
    ErrorResponse,
    PageResponse,
    TerminationRequest,
)
from hrms_core.services import BankAccountData, BankAccountService, EmployeeData, EmployeeService

router = APIRouter(tags=["employees"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {409: {"model": ErrorResponse}}


# ============================================================================
# Employees
# ============================================================================


@router.post(
    "/employees",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def create_employee(db: DbSession, payload: EmployeeCreate) -> EmployeeResponse:
    employee = await EmployeeService(db).create_employee(EmployeeData(**payload.model_dump()))
    return EmployeeResponse.model_validate(employee)


@router.get(
    "/organizations/{organization_id}/employees",
    response_model=PageResponse[EmployeeResponse],
)
async def list_employees(
    db: DbSession,
    paging: Paging,
    organization_id: Annotated[UUID, Path()],
    name: str | None = None,
    employee_number: str | None = None,
    job_title: str | None = None,
) -> PageResponse[EmployeeResponse]:
    """List employees of an organization with optional search filters."""
    service = EmployeeService(db)
    if name or employee_number or job_title:
        page = await service.search_employees(
            organization_id,
            paging,
            name=name,
            employee_number=employee_number,
            job_title=job_title,
        )
    else:
        page = await service.get_employees(organization_id, paging)
    return PageResponse.from_page(page, EmployeeResponse)


@router.get(
    "/organizations/{organization_id}/employees/statistics",
    response_model=EmployeeStatisticsResponse,
)
async def employee_statistics(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> EmployeeStatisticsResponse:
    stats = await EmployeeService(db).get_employee_statistics(organization_id)
    return EmployeeStatisticsResponse.model_validate(stats)


@router.get(
    "/organizations/{organization_id}/employees/probation",
    response_model=list[EmployeeResponse],
)
async def employees_on_probation(
    db: DbSession,
    organization_id: Annotated[UUID, Path()],
    ending_within_days: Annotated[int | None, Query(ge=0)] = None,
) -> list[EmployeeResponse]:
    """Employees on probation; with ``ending_within_days`` only those ending soon."""
    service = EmployeeService(db)
    if ending_within_days is None:
        employees = await service.get_employees_on_probation(organization_id)
    else:
        employees = await service.get_employees_with_upcoming_probation_end(
            organization_id, ending_within_days
        )
    return [EmployeeResponse.model_validate(e) for e in employees]


@router.get(
    "/organizations/{organization_id}/managers",
    response_model=list[EmployeeResponse],
)
async def list_managers(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> list[EmployeeResponse]:
    managers = await EmployeeService(db).get_managers(organization_id)
    return [EmployeeResponse.model_validate(e) for e in managers]


@router.get(
    "/departments/{department_id}/employees",
    response_model=PageResponse[EmployeeResponse],
)
async def list_department_employees(
    db: DbSession, paging: Paging, department_id: Annotated[UUID, Path()]
) -> PageResponse[EmployeeResponse]:
    page = await EmployeeService(db).get_employees_by_department(department_id, paging)
    return PageResponse.from_page(page, EmployeeResponse)


@router.get("/employees/{employee_id}", response_model=EmployeeResponse, responses=NOT_FOUND)
async def get_employee(db: DbSession, employee_id: Annotated[UUID, Path()]) -> EmployeeResponse:
    employee = await EmployeeService(db).get_employee(employee_id)
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/employees/{employee_id}",
    response_model=EmployeeResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def update_employee(
    db: DbSession, employee_id: Annotated[UUID, Path()], payload: EmployeeCreate
) -> EmployeeResponse:
    employee = await EmployeeService(db).update_employee(
        employee_id, EmployeeData(**payload.model_dump())
    )
    return EmployeeResponse.model_validate(employee)


@router.delete(
    "/employees/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **CONFLICT},
)
async def delete_employee(db: DbSession, employee_id: Annotated[UUID, Path()]) -> Response:
    await EmployeeService(db).delete_employee(employee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/employees/{employee_id}/direct-reports", response_model=list[EmployeeResponse])
async def direct_reports(
    db: DbSession, employee_id: Annotated[UUID, Path()]
) -> list[EmployeeResponse]:
    reports = await EmployeeService(db).get_direct_reports(employee_id)
    return [EmployeeResponse.model_validate(e) for e in reports]


@router.post(
    "/employees/{employee_id}/terminate",
    response_model=EmployeeResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def terminate_employee(
    db: DbSession, employee_id: Annotated[UUID, Path()], payload: TerminationRequest
) -> EmployeeResponse:
    """Terminate an employee and deactivate their bank accounts."""
    employee = await EmployeeService(db).terminate_employee(
        employee_id, payload.termination_date, payload.reason
    )
    return EmployeeResponse.model_validate(employee)


@router.post(
    "/employees/{employee_id}/reactivate",
    response_model=EmployeeResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def reactivate_employee(
    db: DbSession, employee_id: Annotated[UUID, Path()]
) -> EmployeeResponse:
    employee = await EmployeeService(db).reactivate_employee(employee_id)
    return EmployeeResponse.model_validate(employee)


@router.post(
    "/employees/{employee_id}/confirm",
    response_model=EmployeeResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def confirm_employee(
    db: DbSession, employee_id: Annotated[UUID, Path()], payload: ConfirmationRequest
) -> EmployeeResponse:
    employee = await EmployeeService(db).confirm_employee(employee_id, payload.confirmation_date)
    return EmployeeResponse.model_validate(employee)


# ============================================================================
# Bank accounts
# ============================================================================


@router.post(
    "/employees/{employee_id}/bank-accounts",
    response_model=BankAccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def add_bank_account(
    db: DbSession, employee_id: Annotated[UUID, Path()], payload: BankAccountCreate
) -> BankAccountResponse:
    account = await BankAccountService(db).add_bank_account(
        employee_id, BankAccountData(**payload.model_dump())
    )
    return BankAccountResponse.model_validate(account)


@router.get(
    "/employees/{employee_id}/bank-accounts",
    response_model=list[BankAccountResponse],
)
async def list_bank_accounts(
    db: DbSession,
    employee_id: Annotated[UUID, Path()],
    account_type: str | None = None,
) -> list[BankAccountResponse]:
    service = BankAccountService(db)
    if account_type:
        accounts = await service.get_bank_accounts_by_type(employee_id, account_type)
    else:
        accounts = await service.get_bank_accounts(employee_id)
    return [BankAccountResponse.model_validate(a) for a in accounts]


@router.get(
    "/employees/{employee_id}/bank-accounts/primary",
    response_model=BankAccountResponse,
    responses=NOT_FOUND,
)
async def get_primary_account(
    db: DbSession, employee_id: Annotated[UUID, Path()]
) -> BankAccountResponse:
    account = await BankAccountService(db).get_primary_account(employee_id)
    return BankAccountResponse.model_validate(account)


@router.post(
    "/employees/{employee_id}/bank-accounts/{bank_account_id}/primary",
    response_model=BankAccountResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def set_primary_account(
    db: DbSession,
    employee_id: Annotated[UUID, Path()],
    bank_account_id: Annotated[UUID, Path()],
) -> BankAccountResponse:
    account = await BankAccountService(db).set_primary_account(employee_id, bank_account_id)
    return BankAccountResponse.model_validate(account)


@router.put(
    "/bank-accounts/{bank_account_id}",
    response_model=BankAccountResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def update_bank_account(
    db: DbSession, bank_account_id: Annotated[UUID, Path()], payload: BankAccountCreate
) -> BankAccountResponse:
    account = await BankAccountService(db).update_bank_account(
        bank_account_id, BankAccountData(**payload.model_dump())
    )
    return BankAccountResponse.model_validate(account)


@router.delete(
    "/bank-accounts/{bank_account_id}",
    response_model=BankAccountResponse,
    responses=NOT_FOUND,
)
async def delete_bank_account(
    db: DbSession, bank_account_id: Annotated[UUID, Path()]
) -> BankAccountResponse:
    """Deactivate a bank account; accounts are never removed."""
    account = await BankAccountService(db).delete_bank_account(bank_account_id)
    return BankAccountResponse.model_validate(account)


@router.post(
    "/bank-accounts/{bank_account_id}/reactivate",
    response_model=BankAccountResponse,
    responses=NOT_FOUND,
)
async def reactivate_bank_account(
    db: DbSession, bank_account_id: Annotated[UUID, Path()]
) -> BankAccountResponse:
    account = await BankAccountService(db).reactivate_bank_account(bank_account_id)
    return BankAccountResponse.model_validate(account)
