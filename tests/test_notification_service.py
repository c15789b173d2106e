"""Tests for in-app notifications."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from hrms_core.exceptions import NotFoundError, ValidationError
from hrms_core.services import NotificationService, UserData, UserService


def days_ago(days):
    return datetime.now(timezone.utc) - timedelta(days=days)


class TestNotificationService:
    async def test_create_notification_defaults(self, session, test_user):
        notification = await NotificationService(session).create_notification(
            test_user.organization_id, "Welcome", "Your account is ready", user_id=test_user.user_id
        )
        assert notification.notification_type == "INFO"
        assert notification.priority == "NORMAL"
        assert notification.is_read is False

    async def test_values_are_normalized(self, session, test_organization):
        notification = await NotificationService(session).create_notification(
            test_organization.organization_id,
            "Payroll",
            "Run approved",
            notification_type="warning",
            priority="high",
        )
        assert (notification.notification_type, notification.priority) == ("WARNING", "HIGH")

    async def test_invalid_type_rejected(self, session, test_organization):
        with pytest.raises(ValidationError, match="Invalid notification type 'email'"):
            await NotificationService(session).create_notification(
                test_organization.organization_id, "Hi", "There", notification_type="email"
            )

    async def test_title_required(self, session, test_organization):
        with pytest.raises(ValidationError):
            await NotificationService(session).create_notification(
                test_organization.organization_id, "", "Body"
            )

    async def test_compliance_alert(self, session, test_organization):
        check_id = uuid4()
        alert = await NotificationService(session).create_compliance_alert(
            test_organization.organization_id, "Violation", "Overtime limit exceeded", check_id
        )
        assert alert.notification_type == "COMPLIANCE"
        assert alert.priority == "HIGH"
        assert alert.user_id is None
        assert (alert.reference_type, alert.reference_id) == ("COMPLIANCE_CHECK", check_id)

    async def test_user_inbox_includes_broadcasts(self, session, test_user):
        """Test that a user sees personal notifications and organization broadcasts."""
        service = NotificationService(session)
        org_id = test_user.organization_id
        await service.create_notification(org_id, "Personal", "Hi", user_id=test_user.user_id)
        await service.create_notification(org_id, "Broadcast", "Office closed Friday")
        other = await UserService(session).create_user(
            UserData(org_id, "clerk", "clerk@acme.test"), "another-password"
        )
        await service.create_notification(org_id, "Someone else", "Hi", user_id=other.user_id)

        inbox = await service.get_notifications_for_user(org_id, test_user.user_id)
        assert sorted(n.title for n in inbox) == ["Broadcast", "Personal"]
        assert await service.get_unread_count(org_id, test_user.user_id) == 2

    async def test_mark_as_read(self, session, test_user):
        service = NotificationService(session)
        org_id = test_user.organization_id
        notification = await service.create_notification(
            org_id, "Personal", "Hi", user_id=test_user.user_id
        )

        read = await service.mark_as_read(notification.notification_id)
        assert read.is_read is True
        assert read.read_at is not None
        assert await service.get_notifications_for_user(
            org_id, test_user.user_id, unread_only=True
        ) == []

    async def test_mark_all_as_read(self, session, test_user):
        service = NotificationService(session)
        org_id = test_user.organization_id
        for title in ("One", "Two"):
            await service.create_notification(org_id, title, "Hi", user_id=test_user.user_id)
        broadcast = await service.create_notification(org_id, "Broadcast", "Hi")

        assert await service.mark_all_as_read(test_user.user_id) == 2
        # Broadcasts are shared and stay unread
        assert broadcast.is_read is False
        assert await service.get_unread_count(org_id, test_user.user_id) == 1

    async def test_get_by_type(self, session, test_organization):
        service = NotificationService(session)
        org_id = test_organization.organization_id
        await service.create_notification(org_id, "Info", "Hi")
        await service.create_compliance_alert(org_id, "Violation", "Details", uuid4())

        alerts = await service.get_notifications_by_type(org_id, "compliance")
        assert [n.title for n in alerts] == ["Violation"]

    async def test_cleanup_expired(self, session, test_organization):
        service = NotificationService(session)
        org_id = test_organization.organization_id
        expired = await service.create_notification(
            org_id, "Old", "Gone", expires_at=days_ago(1)
        )
        await service.create_notification(
            org_id, "Current", "Stays", expires_at=days_ago(-7)
        )
        await service.create_notification(org_id, "Forever", "Stays")

        assert await service.cleanup_expired_notifications() == 1
        with pytest.raises(NotFoundError):
            await service.get_notification(expired.notification_id)

    async def test_purge_read(self, session, test_organization):
        service = NotificationService(session)
        org_id = test_organization.organization_id
        old = await service.create_notification(org_id, "Old", "Read long ago")
        old.is_read = True
        old.read_at = days_ago(40)
        recent = await service.create_notification(org_id, "Recent", "Read today")
        await service.mark_as_read(recent.notification_id)
        await service.create_notification(org_id, "Unread", "Never read")
        await session.flush()

        assert await service.purge_read_notifications(30) == 1
        assert (await service.get_notification(recent.notification_id)).is_read is True
