# ===========================================================
# onboarding/models.py
# ===========================================================
"""
Onboarding journey models.

- OnboardingTask / UserTaskProgress: the phase task catalog and each
  employee's completion of it.
- OnboardingProgress: one row per employee, maintained by the
  setup_onboarding_journey command.
- SupervisorAssessment: created once an employee finishes phase 1.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL

STAGE_PRE_ONBOARDING = "pre_onboarding"
STAGE_PHASE_1 = "phase_1"
STAGE_PHASE_2 = "phase_2"

STAGE_CHOICES = [
    (STAGE_PRE_ONBOARDING, "Pre-onboarding"),
    (STAGE_PHASE_1, "Phase 1"),
    (STAGE_PHASE_2, "Phase 2"),
]

JOURNEY_SFP = "SFP"
JOURNEY_CC = "CC"
JOURNEY_BOTH = "both"


# ===========================================================
# Task Catalog
# ===========================================================
class OnboardingTask(models.Model):
    JOURNEY_CHOICES = [
        (JOURNEY_SFP, "SFP"),
        (JOURNEY_CC, "CC"),
        (JOURNEY_BOTH, "Both"),
    ]

    CONTROLLED_BY_CHOICES = [
        ("hr", "HR"),
        ("employee", "Employee"),
        ("both", "Both"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    stage = models.CharField(max_length=20, choices=STAGE_CHOICES, db_index=True)
    order = models.PositiveIntegerField(default=0)
    is_default = models.BooleanField(default=True)
    controlled_by = models.CharField(max_length=10, choices=CONTROLLED_BY_CHOICES, default="both")
    journey_type = models.CharField(max_length=5, choices=JOURNEY_CHOICES, default=JOURNEY_BOTH)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["stage", "order", "id"]

    def __str__(self):
        return f"[{self.stage}] {self.title}"


class UserTaskProgress(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="task_progress")
    task = models.ForeignKey(OnboardingTask, on_delete=models.CASCADE, related_name="user_progress")
    is_completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    hr_validated = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "User Task Progress"
        constraints = [
            models.UniqueConstraint(fields=["user", "task"], name="uniq_user_task_progress"),
        ]

    def __str__(self):
        return f"{self.user_id}:{self.task_id} ({'done' if self.is_completed else 'open'})"


# ===========================================================
# Journey Progress (projection of employees)
# ===========================================================
class OnboardingProgress(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("in_progress", "In Progress"),
        ("completed", "Completed"),
        ("overdue", "Overdue"),
    ]

    JOURNEY_CHOICES = [
        (JOURNEY_SFP, "SFP"),
        (JOURNEY_CC, "CC"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="onboarding_progress")
    stage = models.CharField(max_length=20, choices=STAGE_CHOICES, default=STAGE_PRE_ONBOARDING)
    progress = models.PositiveSmallIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    journey_type = models.CharField(max_length=5, choices=JOURNEY_CHOICES, default=JOURNEY_SFP)
    stage_start_date = models.DateTimeField(default=timezone.now)
    estimated_completion_date = models.DateTimeField(null=True, blank=True)

    # Legacy five-stage journey, still read by the phase 1 completion check.
    orient_progress = models.PositiveSmallIntegerField(default=0)
    land_progress = models.PositiveSmallIntegerField(default=0)
    integrate_progress = models.PositiveSmallIntegerField(default=0)
    excel_progress = models.PositiveSmallIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "onboarding_progress"
        verbose_name_plural = "Onboarding Progress"

    def __str__(self):
        return f"{self.user_id} @ {self.stage} ({self.progress}%)"

    @property
    def uses_phase_journey(self):
        return self.stage in (STAGE_PHASE_1, STAGE_PHASE_2)


# ===========================================================
# Supervisor Assessment
# ===========================================================
class SupervisorAssessment(models.Model):
    STATUS_PENDING_CERTIFICATE = "pending_certificate"

    STATUS_CHOICES = [
        (STATUS_PENDING_CERTIFICATE, "Pending Certificate"),
        ("certificate_uploaded", "Certificate Uploaded"),
        ("assessment_pending", "Assessment Pending"),
        ("assessment_completed", "Assessment Completed"),
        ("decision_pending", "Decision Pending"),
        ("decision_made", "Decision Made"),
        ("hr_approval_pending", "HR Approval Pending"),
        ("hr_approved", "HR Approved"),
        ("hr_rejected", "HR Rejected"),
        ("completed", "Completed"),
    ]

    DECISION_CHOICES = [
        ("proceed_to_phase_2", "Proceed to Phase 2"),
        ("terminate", "Terminate"),
        ("put_on_hold", "Put on Hold"),
    ]

    onboarding_progress = models.OneToOneField(
        OnboardingProgress,
        on_delete=models.CASCADE,
        related_name="supervisor_assessment",
    )
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="supervisor_assessments")
    supervisor = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="assessments_to_review",
    )
    status = models.CharField(
        max_length=30,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING_CERTIFICATE,
        db_index=True,
    )
    phase1_completed_date = models.DateTimeField(null=True, blank=True)
    supervisor_decision = models.CharField(max_length=30, choices=DECISION_CHOICES, blank=True)
    supervisor_comments = models.TextField(blank=True)
    decision_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Assessment of {self.user_id} ({self.status})"
