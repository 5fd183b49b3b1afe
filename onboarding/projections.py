# ===========================================================
# onboarding/projections.py
# ===========================================================

from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from maintenance.projection import Projection, SourceRecord
from .models import OnboardingProgress, STAGE_PRE_ONBOARDING


class OnboardingProgressProjection(Projection):
    """One onboarding progress row per user, soft-deleted users included."""

    name = "onboarding_progress"
    model = OnboardingProgress
    key_fields = ("user_id",)

    def sources(self):
        users = get_user_model()._base_manager.using(self.using).order_by("pk")
        for user_id, start_date in users.values_list("pk", "start_date").iterator():
            yield SourceRecord(key=(user_id,), context={"start_date": start_date})

    def default_payload(self, source):
        now = timezone.now()
        return {
            "stage": STAGE_PRE_ONBOARDING,
            "progress": 0,
            "stage_start_date": source.context["start_date"] or now,
            "estimated_completion_date": now + timedelta(days=settings.MAINTENANCE["ONBOARDING_ESTIMATE_DAYS"]),
        }
