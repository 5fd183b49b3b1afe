# ===============================================
# surveys/apps.py
# ===============================================

from django.apps import AppConfig


class SurveysConfig(AppConfig):
    """AppConfig for employee surveys and their responses."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "surveys"
    verbose_name = "Employee Surveys"
