# ===========================================================
# maintenance/exceptions.py
# ===========================================================
"""
Error taxonomy for maintenance operations.

Every class carries the process exit code the operator commands
return when it reaches the command boundary.
"""


class MaintenanceError(Exception):
    """Base class for all maintenance failures."""

    exit_code = 1

    def __init__(self, message, *, projection=None):
        super().__init__(message)
        self.projection = projection


class PlanApplicationError(MaintenanceError):
    """An insert or delete of a rebuild plan failed; the whole plan was rolled back."""

    exit_code = 2


class ConnectivityError(MaintenanceError):
    """The store could not be reached. Raised before any mutation."""

    exit_code = 3


class ConstraintRestorationError(MaintenanceError):
    """
    Foreign-key enforcement could not be re-enabled after a guarded scope.

    The store may be left in a degraded state and needs operator attention.
    """

    exit_code = 4


class MaintenanceInProgressError(MaintenanceError):
    """Another maintenance run holds the lock for this target."""

    exit_code = 5

    def __init__(self, message, *, lock_name=None, holder=None):
        super().__init__(message)
        self.lock_name = lock_name
        self.holder = holder
