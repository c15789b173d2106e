"""Organization, location and department endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from hrms_core.api.dependencies import DbSession, Paging
from hrms_core.api.schemas import (
    CountResponse,
    DepartmentCreate,
    DepartmentNodeResponse,
    DepartmentResponse,
    ErrorResponse,
    LocationCreate,
    LocationResponse,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationStatisticsResponse,
    PageResponse,
)
from hrms_core.services import (
    DepartmentData,
    DepartmentService,
    LocationData,
    LocationService,
    OrganizationData,
    OrganizationService,
)

router = APIRouter(tags=["organizations"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {409: {"model": ErrorResponse}}


# ============================================================================
# Organizations
# ============================================================================


@router.post(
    "/organizations",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, **CONFLICT},
)
async def create_organization(db: DbSession, payload: OrganizationCreate) -> OrganizationResponse:
    organization = await OrganizationService(db).create_organization(
        OrganizationData(**payload.model_dump())
    )
    return OrganizationResponse.model_validate(organization)


@router.get("/organizations", response_model=PageResponse[OrganizationResponse])
async def list_organizations(
    db: DbSession,
    paging: Paging,
    name: str | None = None,
    industry: str | None = None,
    company_size: str | None = None,
) -> PageResponse[OrganizationResponse]:
    """List organizations, optionally filtered by name, industry or size."""
    service = OrganizationService(db)
    if name or industry or company_size:
        page = await service.search_organizations(
            paging, name=name, industry=industry, company_size=company_size
        )
    else:
        page = await service.get_organizations(paging)
    return PageResponse.from_page(page, OrganizationResponse)


@router.get("/organizations/statistics", response_model=OrganizationStatisticsResponse)
async def organization_statistics(db: DbSession) -> OrganizationStatisticsResponse:
    stats = await OrganizationService(db).get_organization_statistics()
    return OrganizationStatisticsResponse.model_validate(stats)


@router.get(
    "/organizations/{organization_id}",
    response_model=OrganizationResponse,
    responses=NOT_FOUND,
)
async def get_organization(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> OrganizationResponse:
    organization = await OrganizationService(db).get_organization(organization_id)
    return OrganizationResponse.model_validate(organization)


@router.put(
    "/organizations/{organization_id}",
    response_model=OrganizationResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def update_organization(
    db: DbSession, organization_id: Annotated[UUID, Path()], payload: OrganizationCreate
) -> OrganizationResponse:
    organization = await OrganizationService(db).update_organization(
        organization_id, OrganizationData(**payload.model_dump())
    )
    return OrganizationResponse.model_validate(organization)


@router.delete(
    "/organizations/{organization_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **CONFLICT},
)
async def delete_organization(db: DbSession, organization_id: Annotated[UUID, Path()]) -> Response:
    await OrganizationService(db).delete_organization(organization_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/organizations/{organization_id}/activate", response_model=OrganizationResponse)
async def activate_organization(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> OrganizationResponse:
    organization = await OrganizationService(db).activate_organization(organization_id)
    return OrganizationResponse.model_validate(organization)


@router.post("/organizations/{organization_id}/deactivate", response_model=OrganizationResponse)
async def deactivate_organization(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> OrganizationResponse:
    organization = await OrganizationService(db).deactivate_organization(organization_id)
    return OrganizationResponse.model_validate(organization)


# ============================================================================
# Locations
# ============================================================================


@router.post(
    "/locations",
    response_model=LocationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def create_location(db: DbSession, payload: LocationCreate) -> LocationResponse:
    location = await LocationService(db).create_location(LocationData(**payload.model_dump()))
    return LocationResponse.model_validate(location)


@router.get(
    "/organizations/{organization_id}/locations",
    response_model=PageResponse[LocationResponse],
)
async def list_locations(
    db: DbSession,
    paging: Paging,
    organization_id: Annotated[UUID, Path()],
    name: str | None = None,
) -> PageResponse[LocationResponse]:
    service = LocationService(db)
    if name:
        page = await service.search_locations_by_name(organization_id, name, paging)
    else:
        page = await service.get_locations_by_organization(organization_id, paging)
    return PageResponse.from_page(page, LocationResponse)


@router.get(
    "/organizations/{organization_id}/locations/headquarters",
    response_model=LocationResponse,
    responses=NOT_FOUND,
)
async def get_headquarters(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> LocationResponse:
    location = await LocationService(db).get_headquarters(organization_id)
    return LocationResponse.model_validate(location)


@router.get("/locations/{location_id}", response_model=LocationResponse, responses=NOT_FOUND)
async def get_location(db: DbSession, location_id: Annotated[UUID, Path()]) -> LocationResponse:
    location = await LocationService(db).get_location(location_id)
    return LocationResponse.model_validate(location)


@router.put("/locations/{location_id}", response_model=LocationResponse, responses=NOT_FOUND)
async def update_location(
    db: DbSession, location_id: Annotated[UUID, Path()], payload: LocationCreate
) -> LocationResponse:
    location = await LocationService(db).update_location(
        location_id, LocationData(**payload.model_dump())
    )
    return LocationResponse.model_validate(location)


@router.delete(
    "/locations/{location_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **CONFLICT},
)
async def delete_location(db: DbSession, location_id: Annotated[UUID, Path()]) -> Response:
    await LocationService(db).delete_location(location_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Departments
# ============================================================================


@router.post(
    "/departments",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def create_department(db: DbSession, payload: DepartmentCreate) -> DepartmentResponse:
    department = await DepartmentService(db).create_department(
        DepartmentData(**payload.model_dump())
    )
    return DepartmentResponse.model_validate(department)


@router.get(
    "/organizations/{organization_id}/departments",
    response_model=PageResponse[DepartmentResponse],
)
async def list_departments(
    db: DbSession,
    paging: Paging,
    organization_id: Annotated[UUID, Path()],
    name: Annotated[str | None, Query()] = None,
) -> PageResponse[DepartmentResponse]:
    service = DepartmentService(db)
    if name:
        page = await service.search_departments(organization_id, name, paging)
    else:
        page = await service.get_departments(organization_id, paging)
    return PageResponse.from_page(page, DepartmentResponse)


@router.get(
    "/organizations/{organization_id}/departments/hierarchy",
    response_model=list[DepartmentNodeResponse],
)
async def department_hierarchy(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> list[DepartmentNodeResponse]:
    """Department tree rooted at the top-level departments."""
    roots = await DepartmentService(db).get_department_hierarchy(organization_id)
    return [DepartmentNodeResponse.model_validate(node) for node in roots]


@router.get("/organizations/{organization_id}/departments/count", response_model=CountResponse)
async def count_departments(
    db: DbSession, organization_id: Annotated[UUID, Path()]
) -> CountResponse:
    count = await DepartmentService(db).count_departments_by_organization(organization_id)
    return CountResponse(count=count)


@router.get(
    "/departments/{department_id}",
    response_model=DepartmentResponse,
    responses=NOT_FOUND,
)
async def get_department(
    db: DbSession, department_id: Annotated[UUID, Path()]
) -> DepartmentResponse:
    department = await DepartmentService(db).get_department(department_id)
    return DepartmentResponse.model_validate(department)


@router.get(
    "/departments/{department_id}/sub-departments",
    response_model=list[DepartmentResponse],
)
async def list_sub_departments(
    db: DbSession, department_id: Annotated[UUID, Path()]
) -> list[DepartmentResponse]:
    children = await DepartmentService(db).get_sub_departments(department_id)
    return [DepartmentResponse.model_validate(d) for d in children]


@router.put(
    "/departments/{department_id}",
    response_model=DepartmentResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def update_department(
    db: DbSession, department_id: Annotated[UUID, Path()], payload: DepartmentCreate
) -> DepartmentResponse:
    department = await DepartmentService(db).update_department(
        department_id, DepartmentData(**payload.model_dump())
    )
    return DepartmentResponse.model_validate(department)


@router.delete(
    "/departments/{department_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **CONFLICT},
)
async def delete_department(db: DbSession, department_id: Annotated[UUID, Path()]) -> Response:
    await DepartmentService(db).delete_department(department_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
