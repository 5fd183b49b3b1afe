"""
Tests for the operator maintenance commands.
"""

from datetime import datetime, timezone as dt_timezone
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError, OperationalError, connections

from checklists.models import ChecklistProgress
from maintenance.models import MaintenanceLock, MaintenanceRun, MaintenanceRunManager
from onboarding.models import OnboardingProgress, STAGE_PHASE_1, STAGE_PRE_ONBOARDING
from surveys.models import Survey, SurveyQuestion, SurveyQuestionResponse, SurveyResponse

pytestmark = pytest.mark.django_db


def run(name, *args, **options):
    out = StringIO()
    call_command(name, *args, stdout=out, no_color=True, **options)
    return out.getvalue()


# ===========================================================
# rebuild_checklist_progress
# ===========================================================
class TestRebuildChecklistProgressCommand:

    def test_reports_summary_and_records_run(self, employee, make_checklist, assign):
        assign(make_checklist(items=2), employee)

        output = run("rebuild_checklist_progress")

        assert "checklist_progress: inserted=2 deleted=0 unchanged=0" in output
        assert ChecklistProgress.objects.count() == 2
        ledger = MaintenanceRun.objects.get()
        assert ledger.command == "rebuild_checklist_progress"
        assert ledger.status == MaintenanceRun.STATUS_SUCCEEDED
        assert ledger.exit_code == 0
        assert ledger.summary == {"checklist_progress": {"inserted": 2, "deleted": 0, "unchanged": 0}}
        assert not MaintenanceLock.objects.exists()

    def test_second_run_has_nothing_to_do(self, employee, make_checklist, assign):
        assign(make_checklist(items=2), employee)
        run("rebuild_checklist_progress")

        output = run("rebuild_checklist_progress")

        assert "inserted=0 deleted=0 unchanged=2 (nothing to do)" in output

    def test_dry_run_reports_without_writing(self, employee, make_checklist, assign):
        assign(make_checklist(items=3), employee)

        output = run("rebuild_checklist_progress", dry_run=True)

        assert output.startswith("[dry run] checklist_progress: inserted=3")
        assert not ChecklistProgress.objects.exists()
        assert MaintenanceRun.objects.get().status == MaintenanceRun.STATUS_DRY_RUN

    def test_refuses_to_run_while_locked(self, employee, make_checklist, assign):
        assign(make_checklist(items=1), employee)
        MaintenanceLock.objects.acquire("checklist_progress", owner="other-host:42")

        with pytest.raises(CommandError) as excinfo:
            run("rebuild_checklist_progress")

        assert excinfo.value.returncode == 5
        assert "other-host:42" in str(excinfo.value)
        assert not ChecklistProgress.objects.exists()
        ledger = MaintenanceRun.objects.get()
        assert ledger.status == MaintenanceRun.STATUS_FAILED
        assert ledger.exit_code == 5
        assert "MaintenanceInProgressError" in ledger.error

    def test_unreachable_store_fails_before_anything(self, monkeypatch):
        def refuse():
            raise OperationalError("could not connect")

        monkeypatch.setattr(connections["default"], "ensure_connection", refuse)

        with pytest.raises(CommandError) as excinfo:
            run("rebuild_checklist_progress")

        monkeypatch.undo()
        assert excinfo.value.returncode == 3
        assert not MaintenanceRun.objects.exists()

    def test_failed_apply_exits_with_plan_error(self, monkeypatch, employee, make_checklist, assign):
        from checklists.projections import ChecklistProgressProjection

        assign(make_checklist(items=2), employee)

        def explode(self, source):
            raise ValueError("bad default payload")

        monkeypatch.setattr(ChecklistProgressProjection, "build_instance", explode)

        with pytest.raises(CommandError) as excinfo:
            run("rebuild_checklist_progress")

        assert excinfo.value.returncode == 2
        assert not ChecklistProgress.objects.exists()
        assert MaintenanceRun.objects.get().status == MaintenanceRun.STATUS_FAILED


# ===========================================================
# cleanup_checklist_progress_duplicates
# ===========================================================
class TestCleanupDuplicatesCommand:

    def test_keeps_latest_row_and_ignores_stale_rows(self, employee, make_user, make_checklist, assign, make_progress):
        checklist = make_checklist(items=1)
        item = checklist.items.get()
        assign(checklist, employee)
        older = make_progress(employee, item, notes="old")
        newer = make_progress(employee, item, notes="new")
        ChecklistProgress.objects.filter(pk=older.pk).update(
            updated_at=datetime(2000, 1, 1, tzinfo=dt_timezone.utc)
        )
        # Not assigned: stale for a rebuild, but the cleanup leaves it alone.
        stranger = make_progress(make_user(), item)

        output = run("cleanup_checklist_progress_duplicates")

        assert "checklist_progress: inserted=0 deleted=1 unchanged=2" in output
        assert set(ChecklistProgress.objects.values_list("pk", flat=True)) == {newer.pk, stranger.pk}

    def test_unassigned_pair_is_reduced_to_latest(self, employee, make_checklist, make_progress):
        item = make_checklist(items=1).items.get()
        older = make_progress(employee, item, notes="old")
        newer = make_progress(employee, item, notes="new")
        ChecklistProgress.objects.filter(pk=older.pk).update(
            updated_at=datetime(2000, 1, 1, tzinfo=dt_timezone.utc)
        )

        output = run("cleanup_checklist_progress_duplicates")

        assert "checklist_progress: inserted=0 deleted=1 unchanged=1" in output
        assert list(ChecklistProgress.objects.values_list("pk", flat=True)) == [newer.pk]

    def test_does_not_create_missing_rows(self, employee, make_checklist, assign):
        assign(make_checklist(items=2), employee)

        run("cleanup_checklist_progress_duplicates")

        assert not ChecklistProgress.objects.exists()


# ===========================================================
# reset_survey_responses
# ===========================================================
@pytest.fixture
def answered_surveys(make_user):
    """Two surveys, each answered by two users."""
    surveys = []
    users = [make_user(), make_user()]
    for title in ("Onboarding", "Pulse"):
        survey = Survey.objects.create(title=title, status="active")
        question = SurveyQuestion.objects.create(survey=survey, text="How was it?")
        for user in users:
            response = SurveyResponse.objects.create(survey=survey, user=user)
            SurveyQuestionResponse.objects.create(response=response, question=question, answer="Fine")
            response.submit()
        surveys.append(survey)
    return surveys


class TestResetSurveyResponsesCommand:

    def test_purges_every_response(self, answered_surveys):
        output = run("reset_survey_responses")

        assert "survey_question_responses: inserted=0 deleted=4 unchanged=0" in output
        assert "survey_responses: inserted=0 deleted=4 unchanged=0" in output
        assert not SurveyResponse.objects.exists()
        assert not SurveyQuestionResponse.objects.exists()
        assert Survey.objects.count() == 2
        assert SurveyQuestion.objects.count() == 2

    def test_scoped_to_selected_survey(self, answered_surveys):
        onboarding, pulse = answered_surveys

        output = run("reset_survey_responses", "--survey", str(onboarding.pk))

        assert "survey_responses: inserted=0 deleted=2 unchanged=2" in output
        assert set(SurveyResponse.objects.values_list("survey_id", flat=True)) == {pulse.pk}
        assert SurveyQuestionResponse.objects.filter(response__survey=pulse).count() == 2

    def test_nothing_to_reset(self, db):
        output = run("reset_survey_responses")

        assert "survey_responses: inserted=0 deleted=0 unchanged=0 (nothing to do)" in output

    def test_dry_run_keeps_responses(self, answered_surveys):
        run("reset_survey_responses", dry_run=True)

        assert SurveyResponse.objects.count() == 4


# ===========================================================
# setup_onboarding_journey
# ===========================================================
class TestSetupOnboardingJourneyCommand:

    def test_creates_missing_rows_and_preserves_existing(self, make_user):
        started = make_user(start_date=datetime(2026, 1, 5, tzinfo=dt_timezone.utc))
        fresh = make_user()
        existing = OnboardingProgress.objects.create(user=started, stage=STAGE_PHASE_1, progress=40)

        output = run("setup_onboarding_journey")

        assert "onboarding_progress: inserted=1 deleted=0 unchanged=1" in output
        existing.refresh_from_db()
        assert existing.stage == STAGE_PHASE_1
        assert existing.progress == 40

        created = OnboardingProgress.objects.get(user=fresh)
        assert created.stage == STAGE_PRE_ONBOARDING
        assert created.progress == 0
        assert created.estimated_completion_date > created.stage_start_date

    def test_new_row_starts_at_user_start_date(self, make_user):
        start = datetime(2026, 3, 2, 9, 0, tzinfo=dt_timezone.utc)
        user = make_user(start_date=start)

        run("setup_onboarding_journey")

        assert OnboardingProgress.objects.get(user=user).stage_start_date == start

    def test_soft_deleted_users_get_a_row_too(self, make_user):
        user = make_user()
        user.soft_delete()

        run("setup_onboarding_journey")

        assert OnboardingProgress.objects.filter(user=user).exists()


# ===========================================================
# Exit codes and the run ledger
# ===========================================================
ALL_COMMANDS = [
    "rebuild_checklist_progress",
    "cleanup_checklist_progress_duplicates",
    "reset_survey_responses",
    "setup_onboarding_journey",
    "backfill_supervisor_assessments",
]


class TestExitCodes:

    @pytest.mark.parametrize("name", ALL_COMMANDS)
    def test_successful_run_returns_normally(self, name, employee):
        output = run(name)

        assert output
        ledger = MaintenanceRun.objects.get()
        assert ledger.command == name
        assert ledger.status == MaintenanceRun.STATUS_SUCCEEDED
        assert ledger.exit_code == 0
        assert ledger.finished_at is not None
        assert not MaintenanceLock.objects.exists()

    @pytest.mark.parametrize("name", ALL_COMMANDS)
    def test_dry_run_returns_normally(self, name, employee):
        run(name, dry_run=True)

        assert MaintenanceRun.objects.get().status == MaintenanceRun.STATUS_DRY_RUN

    def test_lost_constraint_checks_exit_with_code_4(self, monkeypatch, answered_surveys):
        connection = connections["default"]

        def broken_enable():
            raise DatabaseError("connection lost")

        monkeypatch.setattr(connection, "disable_constraint_checking", lambda: True)
        monkeypatch.setattr(connection, "enable_constraint_checking", broken_enable)

        with pytest.raises(CommandError) as excinfo:
            run("reset_survey_responses")

        monkeypatch.undo()
        assert excinfo.value.returncode == 4
        assert SurveyResponse.objects.count() == 4
        ledger = MaintenanceRun.objects.get()
        assert ledger.status == MaintenanceRun.STATUS_FAILED
        assert ledger.exit_code == 4
        assert "ConstraintRestorationError" in ledger.error

    def test_unexpected_error_is_recorded_and_propagates(self, monkeypatch):
        from checklists.management.commands.rebuild_checklist_progress import Command

        def explode(self, using, dry_run, **options):
            raise DatabaseError("disk full")

        monkeypatch.setattr(Command, "run_maintenance", explode)

        with pytest.raises(DatabaseError, match="disk full"):
            run("rebuild_checklist_progress")

        ledger = MaintenanceRun.objects.get()
        assert ledger.status == MaintenanceRun.STATUS_FAILED
        assert ledger.exit_code == 1
        assert ledger.error == "DatabaseError: disk full"
        assert ledger.finished_at is not None
        assert not MaintenanceLock.objects.exists()

    def test_ledger_that_cannot_be_opened_fails_with_code_1(self, monkeypatch):
        def refuse(self, command, owner=None):
            raise DatabaseError("table maintenance_run is read-only")

        monkeypatch.setattr(MaintenanceRunManager, "start", refuse)

        with pytest.raises(CommandError) as excinfo:
            run("rebuild_checklist_progress")

        assert excinfo.value.returncode == 1
        assert "run ledger" in str(excinfo.value)
        assert not MaintenanceRun.objects.exists()
        assert not MaintenanceLock.objects.exists()
