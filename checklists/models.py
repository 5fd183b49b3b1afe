# ===========================================================
# checklists/models.py
# ===========================================================
"""
Checklist catalog, assignments and per-item progress.

ChecklistProgress is a projection of (assignment user × checklist item):
its rows are created and removed only by the checklist progress rebuild,
while the application updates their payload (completion, notes,
verification) in between.
"""

from django.conf import settings
from django.db import models
from django.db.models import Count, Q
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)

User = settings.AUTH_USER_MODEL


# ===========================================================
# Checklist Catalog
# ===========================================================
class Checklist(models.Model):
    PROGRAM_CHOICES = [
        ("inkompass", "Inkompass"),
        ("earlyTalent", "Early Talent"),
        ("apprenticeship", "Apprenticeship"),
        ("academicPlacement", "Academic Placement"),
        ("workExperience", "Work Experience"),
        ("all", "All Programs"),
    ]

    STAGE_CHOICES = [
        ("prepare", "Prepare"),
        ("orient", "Orient"),
        ("land", "Land"),
        ("integrate", "Integrate"),
        ("excel", "Excel"),
        ("all", "All Stages"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    program_type = models.CharField(max_length=30, choices=PROGRAM_CHOICES, default="all")
    stage = models.CharField(max_length=20, choices=STAGE_CHOICES, default="all")
    auto_assign = models.BooleanField(default=False)
    requires_verification = models.BooleanField(default=True)
    due_in_days = models.PositiveIntegerField(null=True, blank=True)
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checklists_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["title"]

    def __str__(self):
        return self.title


class ChecklistItem(models.Model):
    CONTROLLED_BY_CHOICES = [
        ("hr", "HR"),
        ("employee", "Employee"),
        ("both", "Both"),
    ]

    checklist = models.ForeignKey(Checklist, on_delete=models.CASCADE, related_name="items")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    is_required = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=0)
    controlled_by = models.CharField(max_length=10, choices=CONTROLLED_BY_CHOICES, default="both")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["checklist", "order", "id"]

    def __str__(self):
        return f"{self.checklist.title} / {self.title}"


# ===========================================================
# Assignments (projection source)
# ===========================================================
class ChecklistAssignment(models.Model):
    STATUS_ASSIGNED = "assigned"
    STATUS_IN_PROGRESS = "in_progress"
    STATUS_COMPLETED = "completed"
    STATUS_OVERDUE = "overdue"

    STATUS_CHOICES = [
        (STATUS_ASSIGNED, "Assigned"),
        (STATUS_IN_PROGRESS, "In Progress"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_OVERDUE, "Overdue"),
    ]

    checklist = models.ForeignKey(Checklist, on_delete=models.CASCADE, related_name="assignments")
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="checklist_assignments",
    )
    assigned_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checklist_assignments_made",
    )
    due_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ASSIGNED, db_index=True)
    completion_percentage = models.PositiveSmallIntegerField(default=0)
    is_auto_assigned = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "checklist"], name="chk_assign_user_idx"),
        ]

    def __str__(self):
        return f"{self.checklist} → {self.user_id or 'unassigned'}"

    def refresh_completion(self):
        """Recompute completion_percentage and status from the user's progress rows."""
        if not self.user_id:
            return
        stats = ChecklistProgress.objects.filter(
            user_id=self.user_id,
            checklist_item__checklist_id=self.checklist_id,
        ).aggregate(
            total=Count("id"),
            done=Count("id", filter=Q(is_completed=True)),
        )
        total = stats["total"] or 0
        self.completion_percentage = round(100 * stats["done"] / total) if total else 0

        if total and stats["done"] == total:
            self.status = self.STATUS_COMPLETED
            self.completed_at = self.completed_at or timezone.now()
        elif stats["done"]:
            self.status = self.STATUS_IN_PROGRESS
            self.completed_at = None
        else:
            self.status = self.STATUS_ASSIGNED
            self.completed_at = None

        self.save(update_fields=["completion_percentage", "status", "completed_at", "updated_at"])


# ===========================================================
# Progress (projection)
# ===========================================================
class ChecklistProgress(models.Model):
    VERIFICATION_PENDING = "pending"
    VERIFICATION_APPROVED = "approved"
    VERIFICATION_REJECTED = "rejected"

    VERIFICATION_CHOICES = [
        (VERIFICATION_PENDING, "Pending"),
        (VERIFICATION_APPROVED, "Approved"),
        (VERIFICATION_REJECTED, "Rejected"),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="checklist_progress")
    checklist_item = models.ForeignKey(ChecklistItem, on_delete=models.CASCADE, related_name="progress")

    is_completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    verification_status = models.CharField(
        max_length=10,
        choices=VERIFICATION_CHOICES,
        default=VERIFICATION_PENDING,
        db_index=True,
    )
    verified_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checklist_progress_verified",
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    verification_notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "checklist_progress"
        verbose_name_plural = "Checklist Progress"
        ordering = ["user", "checklist_item"]
        # Legacy data may still hold duplicate (user, item) rows; the rebuild
        # and the duplicate cleanup command reduce them to one.
        indexes = [
            models.Index(fields=["user", "checklist_item"], name="chk_progress_key_idx"),
        ]

    def __str__(self):
        return f"{self.user_id}:{self.checklist_item_id} ({'done' if self.is_completed else 'open'})"

    def mark_completed(self, completed, notes=None):
        self.is_completed = completed
        self.completed_at = timezone.now() if completed else None
        if notes is not None:
            self.notes = notes
        self.save(update_fields=["is_completed", "completed_at", "notes", "updated_at"])

    def verify(self, verifier, approved, notes=""):
        self.verification_status = self.VERIFICATION_APPROVED if approved else self.VERIFICATION_REJECTED
        self.verified_by = verifier
        self.verified_at = timezone.now()
        self.verification_notes = notes or ""
        self.save(update_fields=[
            "verification_status", "verified_by", "verified_at", "verification_notes", "updated_at",
        ])
        logger.info(f"Checklist progress {self.pk} {self.verification_status} by {verifier.pk}")
