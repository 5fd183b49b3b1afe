# ===========================================================
# onboarding/services.py
# ===========================================================
"""
Phase 1 completion check and the supervisor assessment backfill.
"""

from dataclasses import dataclass
import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.utils import timezone

from maintenance.exceptions import PlanApplicationError
from maintenance.unit_of_work import run_in_transaction
from notifications.models import Notification
from notifications.utils import send_notification
from .models import (
    JOURNEY_BOTH,
    OnboardingProgress,
    OnboardingTask,
    STAGE_PHASE_1,
    SupervisorAssessment,
    UserTaskProgress,
)

logger = logging.getLogger(__name__)

LEGACY_STAGE_COMPLETE = 100


@dataclass(frozen=True)
class BackfillSummary:
    created: int = 0
    skipped_existing: int = 0
    not_eligible: int = 0

    @property
    def is_noop(self):
        return not self.created

    def as_dict(self):
        return {
            "created": self.created,
            "skipped_existing": self.skipped_existing,
            "not_eligible": self.not_eligible,
        }


def phase_one_completed(progress, using=None):
    """
    Phase journey: every phase 1 task of the employee's journey has a
    completed progress row. Legacy journey: orient and land are at 100%.
    """
    if not progress.uses_phase_journey:
        return (
            progress.orient_progress >= LEGACY_STAGE_COMPLETE
            and progress.land_progress >= LEGACY_STAGE_COMPLETE
        )

    task_ids = list(
        OnboardingTask.objects.db_manager(using)
        .filter(stage=STAGE_PHASE_1, journey_type__in=[progress.journey_type, JOURNEY_BOTH])
        .values_list("pk", flat=True)
    )
    if not task_ids:
        return False

    rows = UserTaskProgress.objects.db_manager(using).filter(user_id=progress.user_id, task_id__in=task_ids)
    return rows.count() == len(task_ids) and not rows.filter(is_completed=False).exists()


def _notify_assessment_created(assessment, employee):
    try:
        send_notification(
            user_id=assessment.supervisor_id,
            type=Notification.TYPE_SUPERVISOR_ASSESSMENT_REQUIRED,
            title="Supervisor Assessment Required",
            message=(
                f"{employee.get_full_name()} has completed Phase 1 of onboarding and requires "
                f"your assessment. Please review their progress and complete the assessment."
            ),
            metadata={
                "assessment_id": assessment.pk,
                "employee_id": employee.pk,
                "employee_name": employee.get_full_name(),
                "type": "supervisor_assessment",
            },
        )
        send_notification(
            user_id=employee.pk,
            type=Notification.TYPE_ASSESSMENT_PENDING,
            title="Assessment Pending",
            message=(
                "You have completed Phase 1! Your supervisor will now assess your progress "
                "before you can proceed to Phase 2."
            ),
            metadata={"assessment_id": assessment.pk, "type": "supervisor_assessment_pending"},
        )
    except DatabaseError as exc:
        # The assessment is committed already; a missing notification is not worth failing the run.
        logger.error(f"Failed to notify about assessment {assessment.pk}: {exc}")


def backfill_supervisor_assessments(using=None, dry_run=False):
    """
    Create the supervisor assessment of every active employee who has a
    supervisor, an onboarding progress row and a completed phase 1, but
    no assessment yet. Notifications go out after commit.
    """
    User = get_user_model()

    def work():
        created = skipped = not_eligible = 0
        employees = (
            User.objects.db_manager(using)
            .active()
            .employees()
            .select_related("onboarding_progress__supervisor_assessment")
            .order_by("pk")
        )
        for employee in employees:
            progress = getattr(employee, "onboarding_progress", None)
            if not employee.supervisor_id or progress is None:
                not_eligible += 1
                continue
            if hasattr(progress, "supervisor_assessment"):
                skipped += 1
                continue
            if not phase_one_completed(progress, using=using):
                not_eligible += 1
                continue

            assessment = SupervisorAssessment.objects.db_manager(using).create(
                onboarding_progress=progress,
                user=employee,
                supervisor_id=employee.supervisor_id,
                status=SupervisorAssessment.STATUS_PENDING_CERTIFICATE,
                phase1_completed_date=timezone.now(),
            )
            logger.info(f"Supervisor assessment {assessment.pk} created for {employee.emp_id}")
            transaction.on_commit(
                lambda a=assessment, e=employee: _notify_assessment_created(a, e),
                using=using,
            )
            created += 1

        return {
            "supervisor_assessments": BackfillSummary(
                created=created, skipped_existing=skipped, not_eligible=not_eligible,
            )
        }

    try:
        return run_in_transaction(work, using=using, rollback=dry_run, label="backfill_supervisor_assessments")
    except DatabaseError as exc:
        raise PlanApplicationError(f"Supervisor assessment backfill failed: {exc}") from exc
