# ===============================================
# users/apps.py
# ===============================================

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """AppConfig for the Users module (employees, supervisors, managers, HR)."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
    verbose_name = "User Management"
