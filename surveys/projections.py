# ===========================================================
# surveys/projections.py
# ===========================================================
"""
Survey responses as purge targets: resetting surveys removes every
response (optionally only those of selected surveys). Answers are purged
before the responses they reference.
"""

from maintenance.projection import PurgeProjection
from .models import SurveyQuestionResponse, SurveyResponse


class _SurveyScopedPurge(PurgeProjection):
    requires_integrity_guard = True
    survey_lookup = None

    def __init__(self, survey_ids=None, **kwargs):
        super().__init__(**kwargs)
        self.survey_ids = list(survey_ids) if survey_ids else None

    def retained(self):
        if not self.survey_ids:
            return super().retained()
        return self.get_queryset().exclude(**{f"{self.survey_lookup}__in": self.survey_ids})


class SurveyQuestionResponsePurge(_SurveyScopedPurge):
    name = "survey_question_responses"
    model = SurveyQuestionResponse
    survey_lookup = "response__survey_id"


class SurveyResponsePurge(_SurveyScopedPurge):
    name = "survey_responses"
    model = SurveyResponse
    survey_lookup = "survey_id"


def survey_reset_projections(survey_ids=None, using=None):
    return [
        SurveyQuestionResponsePurge(survey_ids=survey_ids, using=using),
        SurveyResponsePurge(survey_ids=survey_ids, using=using),
    ]
