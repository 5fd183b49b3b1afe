# ===========================================================
# maintenance/integrity.py
# ===========================================================
"""
Referential integrity guard.

Suspends foreign-key enforcement for the duration of a scope through the
active database backend:

- MySQL:       SET foreign_key_checks = 0 / 1
- SQLite:      PRAGMA foreign_keys (ignored inside a transaction; Django
               creates SQLite foreign keys DEFERRABLE INITIALLY DEFERRED)
- PostgreSQL:  no-op, foreign keys are created deferred and are checked
               at commit

Nested scopes on the same connection only toggle once.
"""

import logging
import threading
from contextlib import contextmanager

from django.db import DEFAULT_DB_ALIAS, connections

from .exceptions import ConstraintRestorationError

logger = logging.getLogger(__name__)

_local = threading.local()


def _scopes():
    """Per-thread {alias: [depth, disabled]} bookkeeping."""
    if not hasattr(_local, "scopes"):
        _local.scopes = {}
    return _local.scopes


def integrity_guard_depth(using=None):
    scope = _scopes().get(using or DEFAULT_DB_ALIAS)
    return scope[0] if scope else 0


@contextmanager
def with_integrity_checks_suspended(using=None, table_names=None):
    """
    Disable foreign-key enforcement on ``using`` while the block runs.

    Yields True when the backend actually stopped checking constraints.
    Re-enablement is attempted on every exit path; if it fails a
    ConstraintRestorationError is raised. When checks were really off,
    ``table_names`` are re-validated when the block succeeds.
    """
    alias = using or DEFAULT_DB_ALIAS
    scopes = _scopes()

    if alias in scopes:
        scope = scopes[alias]
        scope[0] += 1
        try:
            yield scope[1]
        finally:
            scope[0] -= 1
        return

    connection = connections[alias]
    if not connection.in_atomic_block:
        logger.warning(f"[{alias}] Suspending integrity checks outside a transaction")

    disabled = connection.disable_constraint_checking()
    scopes[alias] = [1, disabled]
    logger.info(
        f"[{alias}] Integrity checks suspended "
        f"({connection.vendor}, effective={disabled})"
    )

    failed = False
    try:
        yield disabled
    except BaseException:
        failed = True
        raise
    finally:
        del scopes[alias]
        if disabled:
            _restore(connection, alias)
            # Rows written while checks were off are verified on success only;
            # a failing scope is rolled back by its transaction.
            if not failed:
                connection.check_constraints(table_names=table_names)
        logger.info(f"[{alias}] Integrity checks restored")


def _restore(connection, alias):
    try:
        connection.enable_constraint_checking()
    except Exception as exc:
        logger.critical(
            f"[{alias}] FAILED to re-enable foreign key checks: {exc}. "
            f"Operator intervention required."
        )
        raise ConstraintRestorationError(
            f"Could not re-enable foreign key checks on '{alias}': {exc}"
        ) from exc
