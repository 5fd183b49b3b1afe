# ===========================================================
# maintenance/locks.py
# ===========================================================

from contextlib import contextmanager

from django.db import DEFAULT_DB_ALIAS

from .exceptions import MaintenanceInProgressError
from .models import MaintenanceLock


@contextmanager
def maintenance_lock(name, owner=None, ttl=None, using=None):
    """Hold the maintenance lock ``name`` for the duration of the block."""
    manager = MaintenanceLock.objects.db_manager(using or DEFAULT_DB_ALIAS)
    lock = manager.acquire(name, owner=owner, ttl=ttl)
    try:
        yield lock
    finally:
        manager.release(lock)


def ensure_not_under_maintenance(name, using=None):
    """Refuse a normal application write while a rebuild owns ``name``."""
    if MaintenanceLock.objects.db_manager(using or DEFAULT_DB_ALIAS).is_held(name):
        raise MaintenanceInProgressError(
            f"'{name}' is being rebuilt, try again shortly",
            lock_name=name,
        )
