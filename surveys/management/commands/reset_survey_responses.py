# ===========================================================
# surveys/management/commands/reset_survey_responses.py
# ===========================================================
"""
Delete survey responses and their answers so surveys can be submitted again.
"""

from maintenance.command import MaintenanceCommand
from maintenance.projection import rebuild
from surveys.projections import survey_reset_projections


class Command(MaintenanceCommand):
    help = "Delete all survey responses and answers, or only those of the given surveys."

    lock_names = ("survey_question_responses", "survey_responses")

    def add_arguments(self, parser):
        super().add_arguments(parser)
        parser.add_argument(
            "--survey",
            dest="survey_ids",
            action="append",
            type=int,
            metavar="ID",
            help="Only reset responses of this survey. Repeatable.",
        )

    def run_maintenance(self, using, dry_run, **options):
        return rebuild(
            survey_reset_projections(options.get("survey_ids"), using=using),
            dry_run=dry_run,
            label=self.command_name,
        )
