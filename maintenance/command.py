# ===========================================================
# maintenance/command.py
# ===========================================================
"""
Base class for operator maintenance commands.

Lifecycle of a run:
1. check the store is reachable (ConnectivityError, nothing mutated)
2. open a MaintenanceRun ledger row
3. take the maintenance lock of every target
4. run the maintenance work (one transaction, see projection.rebuild)
5. close the ledger row and print the summary

Maintenance failures are logged, recorded and turned into a CommandError
whose return code identifies the error class. Any other exception is
recorded as a failed run and propagates unchanged. A ledger row that
cannot be opened fails the run with the generic return code 1.
"""

from contextlib import ExitStack
import logging

from django.core.management.base import BaseCommand, CommandError
from django.db import DEFAULT_DB_ALIAS, DatabaseError

from .exceptions import ConnectivityError, ConstraintRestorationError, MaintenanceError
from .locks import maintenance_lock
from .models import MaintenanceRun, default_owner
from .unit_of_work import ensure_store_available

logger = logging.getLogger(__name__)


class MaintenanceCommand(BaseCommand):
    """
    Subclasses implement ``run_maintenance()`` and return an ordered
    ``{name: summary}`` mapping where every summary has ``as_dict()``.
    """

    lock_names = ()

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Compute and report the changes without writing them.",
        )
        parser.add_argument(
            "--database",
            default=DEFAULT_DB_ALIAS,
            help='Database alias to run against. Defaults to "default".',
        )

    @property
    def command_name(self):
        return self.__class__.__module__.rsplit(".", 1)[-1]

    def get_lock_names(self, options):
        return list(self.lock_names)

    def run_maintenance(self, using, dry_run, **options):
        raise NotImplementedError

    def handle(self, *args, **options):
        alias = options.pop("database")
        dry_run = options.pop("dry_run")
        owner = default_owner()
        run = None

        try:
            ensure_store_available(alias)
            run = self._open_run(alias, owner)
            logger.info(f"[{self.command_name}] Started (run={run.pk}, dry_run={dry_run})")

            with ExitStack() as stack:
                for name in self.get_lock_names(options):
                    stack.enter_context(maintenance_lock(name, owner=owner, using=alias))
                summaries = self.run_maintenance(alias, dry_run, **options)
        except MaintenanceError as exc:
            self._record_failure(run, exc)
            raise CommandError(f"{self.command_name} failed: {exc}", returncode=exc.exit_code) from exc
        except Exception as exc:
            self._record_failure(run, exc)
            raise

        run.mark_finished(summaries, dry_run=dry_run)
        logger.info(f"[{self.command_name}] Finished (run={run.pk})")
        self.report(summaries, dry_run)

    def _open_run(self, alias, owner):
        try:
            return MaintenanceRun.objects.db_manager(alias).start(self.command_name, owner=owner)
        except DatabaseError as exc:
            raise MaintenanceError(f"Could not open the run ledger on '{alias}': {exc}") from exc

    def _record_failure(self, run, exc):
        if isinstance(exc, ConstraintRestorationError):
            logger.critical(f"[{self.command_name}] {exc}")
        elif isinstance(exc, MaintenanceError):
            logger.error(f"[{self.command_name}] {exc}")
        else:
            logger.exception(f"[{self.command_name}] Unexpected failure: {exc.__class__.__name__}: {exc}")

        if run is None or isinstance(exc, ConnectivityError):
            return
        try:
            run.mark_failed(exc)
        except DatabaseError as ledger_exc:
            logger.exception(f"[{self.command_name}] Could not record failed run {run.pk}: {ledger_exc}")

    def report(self, summaries, dry_run):
        prefix = "[dry run] " if dry_run else ""
        for name, summary in summaries.items():
            counts = " ".join(f"{key}={value}" for key, value in summary.as_dict().items())
            line = f"{prefix}{name}: {counts}"
            if getattr(summary, "is_noop", False):
                self.stdout.write(f"{line} (nothing to do)")
            else:
                self.stdout.write(self.style.SUCCESS(line))
