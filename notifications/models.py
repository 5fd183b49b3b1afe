# ===========================================================
# notifications/models.py
# ===========================================================
from django.db import models
from django.conf import settings
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)


class NotificationQuerySet(models.QuerySet):
    """Custom QuerySet for common notification queries."""

    def unread(self):
        return self.filter(is_read=False)


class NotificationManager(models.Manager):

    def get_queryset(self):
        return NotificationQuerySet(self.model, using=self._db)

    def unread(self):
        return self.get_queryset().unread()


class Notification(models.Model):
    """
    In-app notification shown in the bell menu of the frontend.
    """

    TYPE_SYSTEM = "system"
    TYPE_TASK = "task"
    TYPE_FEEDBACK = "feedback"
    TYPE_REMINDER = "reminder"
    TYPE_SUPERVISOR_ASSESSMENT_REQUIRED = "supervisor_assessment_required"
    TYPE_ASSESSMENT_PENDING = "assessment_pending"

    TYPE_CHOICES = [
        (TYPE_SYSTEM, "System"),
        (TYPE_TASK, "Task"),
        (TYPE_FEEDBACK, "Feedback"),
        (TYPE_REMINDER, "Reminder"),
        (TYPE_SUPERVISOR_ASSESSMENT_REQUIRED, "Supervisor Assessment Required"),
        (TYPE_ASSESSMENT_PENDING, "Assessment Pending"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=40, choices=TYPE_CHOICES, default=TYPE_SYSTEM, db_index=True)
    title = models.CharField(max_length=255)
    message = models.TextField()
    metadata = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = NotificationManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notif_user_read_idx"),
        ]

    def __str__(self):
        return f"[{self.type}] {self.title} → {self.user_id}"

    def mark_as_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=["is_read", "read_at"])
