# ===============================================
# onboarding/apps.py
# ===============================================

from django.apps import AppConfig


class OnboardingConfig(AppConfig):
    """AppConfig for onboarding journeys, tasks and supervisor assessments."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "onboarding"
    verbose_name = "Onboarding Journeys"
