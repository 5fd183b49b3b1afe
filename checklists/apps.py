# ===============================================
# checklists/apps.py
# ===============================================

from django.apps import AppConfig


class ChecklistsConfig(AppConfig):
    """AppConfig for onboarding checklists, their assignments and per-item progress."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "checklists"
    verbose_name = "Onboarding Checklists"
