"""User notification endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from hrms_core.api.dependencies import DbSession
from hrms_core.api.schemas import CountResponse, ErrorResponse, NotificationResponse
from hrms_core.services import NotificationService

router = APIRouter(tags=["notifications"])


@router.get(
    "/organizations/{organization_id}/users/{user_id}/notifications",
    response_model=list[NotificationResponse],
)
async def list_notifications(
    db: DbSession,
    organization_id: Annotated[UUID, Path()],
    user_id: Annotated[UUID, Path()],
    unread_only: bool = False,
) -> list[NotificationResponse]:
    """Notifications addressed to the user plus organization broadcasts."""
    notifications = await NotificationService(db).get_notifications_for_user(
        organization_id, user_id, unread_only
    )
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get(
    "/organizations/{organization_id}/users/{user_id}/notifications/unread-count",
    response_model=CountResponse,
)
async def unread_count(
    db: DbSession,
    organization_id: Annotated[UUID, Path()],
    user_id: Annotated[UUID, Path()],
) -> CountResponse:
    count = await NotificationService(db).get_unread_count(organization_id, user_id)
    return CountResponse(count=count)


@router.post(
    "/notifications/{notification_id}/read",
    response_model=NotificationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def mark_as_read(
    db: DbSession, notification_id: Annotated[UUID, Path()]
) -> NotificationResponse:
    notification = await NotificationService(db).mark_as_read(notification_id)
    return NotificationResponse.model_validate(notification)


@router.post("/users/{user_id}/notifications/read-all", response_model=CountResponse)
async def mark_all_as_read(db: DbSession, user_id: Annotated[UUID, Path()]) -> CountResponse:
    count = await NotificationService(db).mark_all_as_read(user_id)
    return CountResponse(count=count)
