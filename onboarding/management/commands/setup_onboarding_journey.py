# ===========================================================
# onboarding/management/commands/setup_onboarding_journey.py
# ===========================================================
"""
Give every user an onboarding progress row. Existing rows are kept as they are.
"""

from maintenance.command import MaintenanceCommand
from maintenance.projection import rebuild
from onboarding.projections import OnboardingProgressProjection


class Command(MaintenanceCommand):
    help = "Create missing onboarding progress rows, one per user."

    lock_names = (OnboardingProgressProjection.name,)

    def run_maintenance(self, using, dry_run, **options):
        return rebuild(
            [OnboardingProgressProjection(using=using)],
            dry_run=dry_run,
            label=self.command_name,
        )
