# ===========================================================
# checklists/management/commands/cleanup_checklist_progress_duplicates.py
# ===========================================================
"""
Delete duplicate checklist progress rows, keeping the most recently
updated row of each (user, item) pair. Nothing else is touched.
"""

from checklists.projections import ChecklistProgressProjection
from maintenance.command import MaintenanceCommand
from maintenance.projection import rebuild


class Command(MaintenanceCommand):
    help = "Remove duplicate checklist progress rows, keeping the latest of each pair."

    lock_names = (ChecklistProgressProjection.name,)

    def run_maintenance(self, using, dry_run, **options):
        return rebuild(
            [ChecklistProgressProjection(using=using)],
            dry_run=dry_run,
            plan_filter=lambda plan: plan.duplicates_only(),
            label=self.command_name,
        )
