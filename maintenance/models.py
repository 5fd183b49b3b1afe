# ===========================================================
# maintenance/models.py
# ===========================================================
"""
Maintenance bookkeeping:
- MaintenanceLock: single-writer flag per projection, committed before a
  rebuild starts so application writers can see it.
- MaintenanceRun: ledger of operator command runs and their outcome.
"""

from datetime import timedelta
import logging
import os
import socket

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.utils import timezone

from .exceptions import MaintenanceInProgressError

logger = logging.getLogger(__name__)


def default_owner():
    return f"{socket.gethostname()}:{os.getpid()}"


# ===========================================================
# Maintenance Lock
# ===========================================================
class MaintenanceLockQuerySet(models.QuerySet):

    def live(self):
        return self.filter(expires_at__gt=timezone.now())

    def expired(self):
        return self.filter(expires_at__lte=timezone.now())


class MaintenanceLockManager(models.Manager):

    def get_queryset(self):
        return MaintenanceLockQuerySet(self.model, using=self._db)

    def is_held(self, name):
        return self.get_queryset().live().filter(name=name).exists()

    def acquire(self, name, owner=None, ttl=None):
        """
        Take the lock called ``name``. Expired locks are taken over;
        a live lock raises MaintenanceInProgressError.
        """
        owner = owner or default_owner()
        ttl = ttl or settings.MAINTENANCE["LOCK_TTL_SECONDS"]
        now = timezone.now()

        with transaction.atomic(using=self.db):
            stale, _ = self.get_queryset().expired().filter(name=name).delete()
            if stale:
                logger.warning(f"[lock:{name}] Took over expired maintenance lock")
            try:
                with transaction.atomic(using=self.db):
                    lock = self.create(
                        name=name,
                        owner=owner,
                        acquired_at=now,
                        expires_at=now + timedelta(seconds=ttl),
                    )
            except IntegrityError:
                holder = self.get_queryset().filter(name=name).values_list("owner", flat=True).first()
                raise MaintenanceInProgressError(
                    f"Maintenance lock '{name}' is held by {holder}",
                    lock_name=name,
                    holder=holder,
                )

        logger.info(f"[lock:{name}] Acquired by {owner}")
        return lock

    def release(self, lock):
        deleted, _ = self.get_queryset().filter(pk=lock.pk, owner=lock.owner).delete()
        if deleted:
            logger.info(f"[lock:{lock.name}] Released")
        else:
            logger.warning(f"[lock:{lock.name}] Was no longer held by {lock.owner} at release")
        return bool(deleted)


class MaintenanceLock(models.Model):
    name = models.CharField(max_length=100, unique=True)
    owner = models.CharField(max_length=255)
    acquired_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField(db_index=True)

    objects = MaintenanceLockManager()

    class Meta:
        db_table = "maintenance_lock"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.owner})"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()


# ===========================================================
# Maintenance Run Ledger
# ===========================================================
class MaintenanceRunManager(models.Manager):

    def start(self, command, owner=None):
        return self.create(command=command, owner=owner or default_owner())


class MaintenanceRun(models.Model):
    STATUS_RUNNING = "running"
    STATUS_SUCCEEDED = "succeeded"
    STATUS_FAILED = "failed"
    STATUS_DRY_RUN = "dry_run"

    STATUS_CHOICES = [
        (STATUS_RUNNING, "Running"),
        (STATUS_SUCCEEDED, "Succeeded"),
        (STATUS_FAILED, "Failed"),
        (STATUS_DRY_RUN, "Dry Run"),
    ]

    command = models.CharField(max_length=100, db_index=True)
    owner = models.CharField(max_length=255, default=default_owner)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_RUNNING, db_index=True)
    summary = models.JSONField(default=dict, blank=True)
    error = models.TextField(blank=True)
    exit_code = models.PositiveSmallIntegerField(null=True, blank=True)
    started_at = models.DateTimeField(default=timezone.now)
    finished_at = models.DateTimeField(null=True, blank=True)

    objects = MaintenanceRunManager()

    class Meta:
        db_table = "maintenance_run"
        ordering = ["-started_at"]
        indexes = [
            models.Index(fields=["command", "-started_at"], name="maint_run_cmd_idx"),
        ]

    def __str__(self):
        return f"{self.command} [{self.status}] {self.started_at:%Y-%m-%d %H:%M}"

    @property
    def duration(self):
        if not self.finished_at:
            return None
        return self.finished_at - self.started_at

    def mark_finished(self, summaries, dry_run=False):
        self.status = self.STATUS_DRY_RUN if dry_run else self.STATUS_SUCCEEDED
        self.summary = {name: summary.as_dict() for name, summary in summaries.items()}
        self.exit_code = 0
        self.finished_at = timezone.now()
        self.save(update_fields=["status", "summary", "exit_code", "finished_at"])

    def mark_failed(self, exc):
        self.status = self.STATUS_FAILED
        self.error = f"{exc.__class__.__name__}: {exc}"
        self.exit_code = getattr(exc, "exit_code", 1)
        self.finished_at = timezone.now()
        self.save(update_fields=["status", "error", "exit_code", "finished_at"])
