"""
Tests for in-app notifications.
"""

import pytest

from notifications.models import Notification
from notifications.utils import send_notification

pytestmark = pytest.mark.django_db


class TestNotifications:

    def test_send_creates_unread_notification(self, employee):
        notification = send_notification(
            user_id=employee.pk,
            type=Notification.TYPE_REMINDER,
            title="Checklist due",
            message="Your onboarding checklist is due tomorrow.",
        )

        assert notification.metadata == {}
        assert list(Notification.objects.unread()) == [notification]

    def test_mark_as_read(self, employee):
        notification = send_notification(employee.pk, Notification.TYPE_SYSTEM, "Hello", "Welcome aboard")

        notification.mark_as_read()

        notification.refresh_from_db()
        assert notification.is_read
        assert notification.read_at is not None
        assert not Notification.objects.unread().exists()
