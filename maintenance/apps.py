# ===============================================
# maintenance/apps.py
# ===============================================
# App configuration for the maintenance module:
# projection rebuilds, integrity guard, maintenance locks
# and the run ledger.
# ===============================================

from django.apps import AppConfig


class MaintenanceConfig(AppConfig):
    """AppConfig for the Maintenance module."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "maintenance"
    verbose_name = "Data Maintenance"
