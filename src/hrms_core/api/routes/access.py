"""User, role and permission endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Response, status

from hrms_core.api.dependencies import CurrentUsername, DbSession, Paging
from hrms_core.api.schemas import (
    Credentials,
    ErrorResponse,
    PageResponse,
    PermissionAssignment,
    PermissionCreate,
    PermissionResponse,
    PermissionStatisticsResponse,
    RoleAssignment,
    RoleCreate,
    RoleResponse,
    RoleStatisticsResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from hrms_core.services import PermissionService, RoleService, UserData, UserService

router = APIRouter(tags=["access"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {409: {"model": ErrorResponse}}


# ============================================================================
# Users
# ============================================================================


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def create_user(db: DbSession, payload: UserCreate) -> UserResponse:
    data = UserData(**payload.model_dump(exclude={"password"}))
    user = await UserService(db).create_user(data, payload.password)
    return UserResponse.model_validate(user)


@router.post(
    "/users/authenticate",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
)
async def authenticate(db: DbSession, payload: Credentials) -> UserResponse:
    service = UserService(db)
    if not await service.verify_password(payload.username, payload.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    user = await service.get_user_by_username(payload.username)
    return UserResponse.model_validate(user)


@router.get("/users/{user_id}", response_model=UserResponse, responses=NOT_FOUND)
async def get_user(db: DbSession, user_id: Annotated[UUID, Path()]) -> UserResponse:
    user = await UserService(db).get_user(user_id)
    return UserResponse.model_validate(user)


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def update_user(
    db: DbSession, user_id: Annotated[UUID, Path()], payload: UserUpdate
) -> UserResponse:
    user = await UserService(db).update_user(user_id, **payload.model_dump())
    return UserResponse.model_validate(user)


@router.post("/users/{user_id}/activate", response_model=UserResponse)
async def activate_user(db: DbSession, user_id: Annotated[UUID, Path()]) -> UserResponse:
    user = await UserService(db).activate_user(user_id)
    return UserResponse.model_validate(user)


@router.post("/users/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(db: DbSession, user_id: Annotated[UUID, Path()]) -> UserResponse:
    user = await UserService(db).deactivate_user(user_id)
    return UserResponse.model_validate(user)


@router.get("/users/{user_id}/roles", response_model=list[RoleResponse])
async def list_user_roles(db: DbSession, user_id: Annotated[UUID, Path()]) -> list[RoleResponse]:
    roles = await UserService(db).get_user_roles(user_id)
    return [RoleResponse.model_validate(r) for r in roles]


@router.post(
    "/users/{user_id}/roles",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **CONFLICT},
)
async def assign_role(
    db: DbSession,
    username: CurrentUsername,
    user_id: Annotated[UUID, Path()],
    payload: RoleAssignment,
) -> Response:
    await UserService(db).assign_role(user_id, payload.role_id, assigned_by=username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/users/{user_id}/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
)
async def remove_role(
    db: DbSession, user_id: Annotated[UUID, Path()], role_id: Annotated[UUID, Path()]
) -> Response:
    await UserService(db).remove_role(user_id, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Roles
# ============================================================================
#
# Roles are scoped to the organization of the acting user (X-Username).


@router.post(
    "/roles",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
)
async def create_role(
    db: DbSession, username: CurrentUsername, payload: RoleCreate
) -> RoleResponse:
    role = await RoleService(db).create_role(username, payload.name, payload.description)
    return RoleResponse.model_validate(role)


@router.get("/roles", response_model=PageResponse[RoleResponse])
async def list_roles(
    db: DbSession, username: CurrentUsername, paging: Paging, name: str | None = None
) -> PageResponse[RoleResponse]:
    service = RoleService(db)
    if name:
        page = await service.search_roles(username, name, paging)
    else:
        page = await service.get_roles(username, paging)
    return PageResponse.from_page(page, RoleResponse)


@router.get("/roles/statistics", response_model=RoleStatisticsResponse)
async def role_statistics(db: DbSession, username: CurrentUsername) -> RoleStatisticsResponse:
    stats = await RoleService(db).get_role_statistics(username)
    return RoleStatisticsResponse.model_validate(stats)


@router.get("/roles/{role_id}", response_model=RoleResponse, responses=NOT_FOUND)
async def get_role(db: DbSession, role_id: Annotated[UUID, Path()]) -> RoleResponse:
    role = await RoleService(db).get_role(role_id)
    return RoleResponse.model_validate(role)


@router.put(
    "/roles/{role_id}",
    response_model=RoleResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def update_role(
    db: DbSession,
    username: CurrentUsername,
    role_id: Annotated[UUID, Path()],
    payload: RoleCreate,
) -> RoleResponse:
    role = await RoleService(db).update_role(username, role_id, payload.name, payload.description)
    return RoleResponse.model_validate(role)


@router.delete(
    "/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **CONFLICT},
)
async def delete_role(
    db: DbSession, username: CurrentUsername, role_id: Annotated[UUID, Path()]
) -> Response:
    await RoleService(db).delete_role(username, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/roles/{role_id}/permissions", response_model=list[PermissionResponse])
async def list_role_permissions(
    db: DbSession, role_id: Annotated[UUID, Path()]
) -> list[PermissionResponse]:
    permissions = await RoleService(db).get_role_permissions(role_id)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.post(
    "/roles/{role_id}/permissions",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **CONFLICT},
)
async def assign_permission(
    db: DbSession,
    username: CurrentUsername,
    role_id: Annotated[UUID, Path()],
    payload: PermissionAssignment,
) -> Response:
    await RoleService(db).assign_permission(username, role_id, payload.permission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/roles/{role_id}/permissions/{permission_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **CONFLICT},
)
async def remove_permission(
    db: DbSession,
    username: CurrentUsername,
    role_id: Annotated[UUID, Path()],
    permission_id: Annotated[UUID, Path()],
) -> Response:
    await RoleService(db).remove_permission(username, role_id, permission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Permissions
# ============================================================================


@router.post(
    "/permissions",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
async def create_permission(db: DbSession, payload: PermissionCreate) -> PermissionResponse:
    permission = await PermissionService(db).create_permission(**payload.model_dump())
    return PermissionResponse.model_validate(permission)


@router.get("/permissions", response_model=list[PermissionResponse])
async def list_permissions(
    db: DbSession, resource: str | None = None, q: str | None = None
) -> list[PermissionResponse]:
    service = PermissionService(db)
    if resource:
        permissions = await service.get_permissions_by_resource(resource)
    elif q:
        permissions = await service.search_permissions(q)
    else:
        permissions = await service.get_all_permissions()
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.get("/permissions/by-category", response_model=dict[str, list[PermissionResponse]])
async def permissions_by_category(db: DbSession) -> dict[str, list[PermissionResponse]]:
    grouped = await PermissionService(db).get_permissions_by_category()
    return {
        category: [PermissionResponse.model_validate(p) for p in permissions]
        for category, permissions in grouped.items()
    }


@router.get("/permissions/statistics", response_model=PermissionStatisticsResponse)
async def permission_statistics(db: DbSession) -> PermissionStatisticsResponse:
    stats = await PermissionService(db).get_permission_statistics()
    return PermissionStatisticsResponse.model_validate(stats)


@router.get(
    "/permissions/{permission_id}",
    response_model=PermissionResponse,
    responses=NOT_FOUND,
)
async def get_permission(
    db: DbSession, permission_id: Annotated[UUID, Path()]
) -> PermissionResponse:
    permission = await PermissionService(db).get_permission(permission_id)
    return PermissionResponse.model_validate(permission)
