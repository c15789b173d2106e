"""Notification service - in-app notifications and compliance alerts."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import NotFoundError
from hrms_core.models import SystemNotification
from hrms_core.models.base import utcnow
from hrms_core.models.enums import NotificationPriority, NotificationType
from hrms_core.repositories import SystemNotificationRepository
from hrms_core.services.common import enum_value, require

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.notifications = SystemNotificationRepository(session)

    async def create_notification(
        self,
        organization_id: UUID,
        title: str,
        message: str,
        user_id: UUID | None = None,
        notification_type: str = NotificationType.INFO.value,
        priority: str = NotificationPriority.NORMAL.value,
        expires_at: datetime | None = None,
        reference_type: str | None = None,
        reference_id: UUID | None = None,
    ) -> SystemNotification:
        """Create a notification; without ``user_id`` it is an organization broadcast."""
        require(title, "Notification title is required")
        require(message, "Notification message is required")
        notification = SystemNotification(
            organization_id=organization_id,
            user_id=user_id,
            title=title,
            message=message,
            notification_type=enum_value(NotificationType, notification_type, "notification type"),
            priority=enum_value(NotificationPriority, priority, "priority"),
            expires_at=expires_at,
            reference_type=reference_type,
            reference_id=reference_id,
            is_read=False,
        )
        return await self.notifications.add(notification)

    async def create_compliance_alert(
        self,
        organization_id: UUID,
        title: str,
        message: str,
        check_id: UUID,
        priority: str = NotificationPriority.HIGH.value,
    ) -> SystemNotification:
        notification = await self.create_notification(
            organization_id,
            title,
            message,
            notification_type=NotificationType.COMPLIANCE.value,
            priority=priority,
            reference_type="COMPLIANCE_CHECK",
            reference_id=check_id,
        )
        logger.warning("Compliance alert for organization %s: %s", organization_id, title)
        return notification

    async def get_notification(self, notification_id: UUID) -> SystemNotification:
        notification = await self.notifications.get(notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        return notification

    async def get_notifications_for_user(
        self, organization_id: UUID, user_id: UUID, unread_only: bool = False
    ) -> list[SystemNotification]:
        return await self.notifications.find_for_user(organization_id, user_id, unread_only)

    async def get_notifications_by_type(
        self, organization_id: UUID, notification_type: str
    ) -> list[SystemNotification]:
        kind = enum_value(NotificationType, notification_type, "notification type")
        return await self.notifications.find_by_type(organization_id, kind)

    async def get_unread_count(self, organization_id: UUID, user_id: UUID) -> int:
        return await self.notifications.count_unread_for_user(organization_id, user_id)

    async def mark_as_read(self, notification_id: UUID) -> SystemNotification:
        notification = await self.get_notification(notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            await self.session.flush()
        return notification

    async def mark_all_as_read(self, user_id: UUID) -> int:
        return await self.notifications.mark_all_read_for_user(user_id, utcnow())

    async def cleanup_expired_notifications(self) -> int:
        deleted = await self.notifications.delete_expired(utcnow())
        logger.info("Removed %d expired notification(s)", deleted)
        return deleted

    async def purge_read_notifications(self, retention_days: int) -> int:
        """Delete read notifications older than the retention window."""
        cutoff = utcnow() - timedelta(days=retention_days)
        deleted = await self.notifications.delete_read_before(cutoff)
        logger.info("Purged %d read notification(s) older than %d days", deleted, retention_days)
        return deleted
