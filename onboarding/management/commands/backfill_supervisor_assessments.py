# ===========================================================
# onboarding/management/commands/backfill_supervisor_assessments.py
# ===========================================================

from maintenance.command import MaintenanceCommand
from onboarding.services import backfill_supervisor_assessments


class Command(MaintenanceCommand):
    help = "Create missing supervisor assessments for employees who completed onboarding phase 1."

    lock_names = ("supervisor_assessments",)

    def run_maintenance(self, using, dry_run, **options):
        return backfill_supervisor_assessments(using=using, dry_run=dry_run)
