# ===========================================================
# maintenance/unit_of_work.py
# ===========================================================
"""
Transactional unit of work for maintenance operations.
"""

import logging

from django.db import DEFAULT_DB_ALIAS, InterfaceError, OperationalError, connections, transaction

from .exceptions import ConnectivityError

logger = logging.getLogger(__name__)


def ensure_store_available(using=None):
    """Open the connection up front so an unreachable store fails before any mutation."""
    alias = using or DEFAULT_DB_ALIAS
    try:
        connections[alias].ensure_connection()
    except (OperationalError, InterfaceError) as exc:
        logger.error(f"[{alias}] Database unreachable: {exc}")
        raise ConnectivityError(f"Cannot reach database '{alias}': {exc}") from exc


def run_in_transaction(work, using=None, rollback=False, label="unit-of-work"):
    """
    Run ``work()`` in a single atomic block and return its result.

    Any exception rolls the block back and propagates unchanged.
    ``rollback=True`` discards the changes of a successful run (dry runs).
    """
    alias = using or DEFAULT_DB_ALIAS
    try:
        with transaction.atomic(using=alias):
            result = work()
            if rollback:
                transaction.set_rollback(True, using=alias)
    except Exception as exc:
        logger.warning(f"[{label}] Rolled back: {exc.__class__.__name__}: {exc}")
        raise

    if rollback:
        logger.info(f"[{label}] Dry run complete, changes discarded")
    else:
        logger.info(f"[{label}] Committed")
    return result
