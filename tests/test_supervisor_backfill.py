"""
Tests for the supervisor assessment backfill.
"""

import pytest

from notifications.models import Notification
from onboarding.models import (
    JOURNEY_BOTH,
    JOURNEY_CC,
    JOURNEY_SFP,
    OnboardingProgress,
    OnboardingTask,
    STAGE_PHASE_1,
    STAGE_PRE_ONBOARDING,
    SupervisorAssessment,
    UserTaskProgress,
)
from onboarding.services import backfill_supervisor_assessments, phase_one_completed
from users.models import User

pytestmark = pytest.mark.django_db


@pytest.fixture
def supervisor(make_user):
    return make_user(role=User.ROLE_SUPERVISOR, name="Sam Supervisor")


@pytest.fixture
def phase_one_tasks(db):
    return [
        OnboardingTask.objects.create(title="Meet the team", stage=STAGE_PHASE_1, journey_type=JOURNEY_BOTH),
        OnboardingTask.objects.create(title="SFP induction", stage=STAGE_PHASE_1, journey_type=JOURNEY_SFP),
        OnboardingTask.objects.create(title="CC induction", stage=STAGE_PHASE_1, journey_type=JOURNEY_CC),
    ]


@pytest.fixture
def make_starter(make_user, supervisor):
    """Employee on the SFP phase journey with a supervisor."""

    def _make(**kwargs):
        kwargs.setdefault("supervisor", supervisor)
        user = make_user(**kwargs)
        OnboardingProgress.objects.create(user=user, stage=STAGE_PHASE_1, journey_type=JOURNEY_SFP)
        return user

    return _make


def complete(user, tasks):
    for task in tasks:
        UserTaskProgress.objects.create(user=user, task=task, is_completed=True)


class TestPhaseOneCompleted:

    def test_requires_every_task_of_the_journey(self, make_starter, phase_one_tasks):
        user = make_starter()
        both, sfp, _ = phase_one_tasks
        complete(user, [both])

        assert not phase_one_completed(user.onboarding_progress)

        complete(user, [sfp])
        assert phase_one_completed(user.onboarding_progress)

    def test_incomplete_task_row_does_not_count(self, make_starter, phase_one_tasks):
        user = make_starter()
        both, sfp, _ = phase_one_tasks
        complete(user, [both])
        UserTaskProgress.objects.create(user=user, task=sfp, is_completed=False)

        assert not phase_one_completed(user.onboarding_progress)

    def test_legacy_journey_uses_orient_and_land(self, make_user):
        user = make_user()
        progress = OnboardingProgress.objects.create(
            user=user, stage=STAGE_PRE_ONBOARDING, orient_progress=100, land_progress=100,
        )
        assert phase_one_completed(progress)

        progress.land_progress = 80
        assert not phase_one_completed(progress)


class TestBackfill:

    def test_creates_assessment_and_notifies_after_commit(
        self, make_starter, supervisor, phase_one_tasks, django_capture_on_commit_callbacks,
    ):
        user = make_starter(name="Ada Starter")
        complete(user, phase_one_tasks[:2])

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            result = backfill_supervisor_assessments()

        summary = result["supervisor_assessments"]
        assert summary.as_dict() == {"created": 1, "skipped_existing": 0, "not_eligible": 0}
        assert len(callbacks) == 1

        assessment = SupervisorAssessment.objects.get(user=user)
        assert assessment.supervisor == supervisor
        assert assessment.status == SupervisorAssessment.STATUS_PENDING_CERTIFICATE
        assert assessment.phase1_completed_date is not None

        to_supervisor = Notification.objects.get(user=supervisor)
        assert to_supervisor.type == Notification.TYPE_SUPERVISOR_ASSESSMENT_REQUIRED
        assert "Ada Starter" in to_supervisor.message
        assert to_supervisor.metadata["assessment_id"] == assessment.pk
        assert Notification.objects.get(user=user).type == Notification.TYPE_ASSESSMENT_PENDING

    def test_skip_rules(self, make_user, make_starter, supervisor, phase_one_tasks):
        done = make_starter()
        complete(done, phase_one_tasks)
        SupervisorAssessment.objects.create(
            onboarding_progress=done.onboarding_progress, user=done, supervisor=supervisor,
        )
        unfinished = make_starter()
        complete(unfinished, phase_one_tasks[:1])
        no_supervisor = make_starter(supervisor=None)
        complete(no_supervisor, phase_one_tasks)
        make_user()  # no onboarding progress
        gone = make_starter()
        complete(gone, phase_one_tasks)
        gone.soft_delete()

        summary = backfill_supervisor_assessments()["supervisor_assessments"]

        assert summary.as_dict() == {"created": 0, "skipped_existing": 1, "not_eligible": 3}
        assert summary.is_noop
        assert SupervisorAssessment.objects.count() == 1

    def test_second_run_skips_existing(self, make_starter, phase_one_tasks):
        user = make_starter()
        complete(user, phase_one_tasks)

        backfill_supervisor_assessments()
        summary = backfill_supervisor_assessments()["supervisor_assessments"]

        assert summary.created == 0
        assert summary.skipped_existing == 1

    def test_dry_run_creates_nothing(self, make_starter, phase_one_tasks, django_capture_on_commit_callbacks):
        user = make_starter()
        complete(user, phase_one_tasks)

        with django_capture_on_commit_callbacks(execute=True):
            summary = backfill_supervisor_assessments(dry_run=True)["supervisor_assessments"]

        assert summary.created == 1
        assert not SupervisorAssessment.objects.exists()
        assert not Notification.objects.exists()
