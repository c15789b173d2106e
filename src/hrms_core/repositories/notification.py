"""System notification repository."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, or_, update

from hrms_core.models import SystemNotification
from hrms_core.repositories.base import Repository


class SystemNotificationRepository(Repository[SystemNotification]):
    model = SystemNotification

    async def find_for_user(
        self, organization_id: UUID, user_id: UUID, unread_only: bool = False
    ) -> list[SystemNotification]:
        """Notifications addressed to the user plus organization broadcasts."""
        criteria = [
            SystemNotification.organization_id == organization_id,
            or_(SystemNotification.user_id == user_id, SystemNotification.user_id.is_(None)),
        ]
        if unread_only:
            criteria.append(SystemNotification.is_read.is_(False))
        return await self.find(*criteria, order_by=[SystemNotification.created_at.desc()])

    async def count_unread_for_user(self, organization_id: UUID, user_id: UUID) -> int:
        return await self.count(
            SystemNotification.organization_id == organization_id,
            or_(SystemNotification.user_id == user_id, SystemNotification.user_id.is_(None)),
            SystemNotification.is_read.is_(False),
        )

    async def find_by_type(
        self, organization_id: UUID, notification_type: str
    ) -> list[SystemNotification]:
        return await self.find(
            SystemNotification.organization_id == organization_id,
            SystemNotification.notification_type == notification_type,
        )

    async def mark_all_read_for_user(self, user_id: UUID, read_at: datetime) -> int:
        """Bulk update: mark every unread notification of the user as read."""
        result = await self.session.execute(
            update(SystemNotification)
            .where(
                SystemNotification.user_id == user_id,
                SystemNotification.is_read.is_(False),
            )
            .values(is_read=True, read_at=read_at)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def delete_expired(self, now: datetime) -> int:
        """Bulk delete: notifications whose expiry is in the past."""
        result = await self.session.execute(
            delete(SystemNotification)
            .where(
                SystemNotification.expires_at.is_not(None),
                SystemNotification.expires_at < now,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def delete_read_before(self, cutoff: datetime) -> int:
        """Bulk delete: read notifications older than the cutoff."""
        result = await self.session.execute(
            delete(SystemNotification)
            .where(
                SystemNotification.is_read.is_(True),
                SystemNotification.read_at < cutoff,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
