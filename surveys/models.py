# ===========================================================
# surveys/models.py
# ===========================================================

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Survey(models.Model):
    TYPE_CHOICES = [
        ("onboarding", "Onboarding"),
        ("pulse", "Pulse"),
        ("exit", "Exit"),
        ("custom", "Custom"),
    ]

    STATUS_CHOICES = [
        ("draft", "Draft"),
        ("active", "Active"),
        ("closed", "Closed"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="custom")
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="draft", db_index=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="surveys_created")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class SurveyQuestion(models.Model):
    TYPE_CHOICES = [
        ("text", "Free Text"),
        ("rating", "Rating"),
        ("single_choice", "Single Choice"),
        ("multiple_choice", "Multiple Choice"),
    ]

    survey = models.ForeignKey(Survey, on_delete=models.CASCADE, related_name="questions")
    text = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="text")
    options = models.JSONField(default=list, blank=True)
    required = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["survey", "order", "id"]

    def __str__(self):
        return self.text[:60]


class SurveyResponse(models.Model):
    STATUS_CHOICES = [
        ("in_progress", "In Progress"),
        ("completed", "Completed"),
    ]

    survey = models.ForeignKey(Survey, on_delete=models.CASCADE, related_name="responses")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="survey_responses")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="in_progress")
    submitted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "survey_response"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["survey", "user"], name="uniq_survey_response_user"),
        ]

    def __str__(self):
        return f"{self.survey_id}:{self.user_id} ({self.status})"

    def submit(self):
        self.status = "completed"
        self.submitted_at = timezone.now()
        self.save(update_fields=["status", "submitted_at", "updated_at"])


class SurveyQuestionResponse(models.Model):
    response = models.ForeignKey(SurveyResponse, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey(SurveyQuestion, on_delete=models.CASCADE, related_name="answers")
    answer = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "survey_question_response"
        constraints = [
            models.UniqueConstraint(fields=["response", "question"], name="uniq_answer_per_question"),
        ]

    def __str__(self):
        return f"{self.response_id}:{self.question_id}"
