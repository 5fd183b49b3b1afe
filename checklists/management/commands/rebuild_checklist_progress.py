# ===========================================================
# checklists/management/commands/rebuild_checklist_progress.py
# ===========================================================
"""
Reconcile checklist progress rows with checklist assignments.

Missing (user, item) rows are created with default state, rows whose
assignment or item is gone are deleted, existing rows keep their
completion, notes and verification.
"""

from checklists.projections import ChecklistProgressProjection
from maintenance.command import MaintenanceCommand
from maintenance.projection import rebuild


class Command(MaintenanceCommand):
    help = "Reconcile checklist progress rows with checklist assignments and items."

    lock_names = (ChecklistProgressProjection.name,)

    def run_maintenance(self, using, dry_run, **options):
        return rebuild(
            [ChecklistProgressProjection(using=using)],
            dry_run=dry_run,
            label=self.command_name,
        )
