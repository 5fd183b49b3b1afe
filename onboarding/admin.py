# ===============================================
# onboarding/admin.py
# ===============================================

from django.contrib import admin

from .models import OnboardingProgress, OnboardingTask, SupervisorAssessment, UserTaskProgress


@admin.register(OnboardingTask)
class OnboardingTaskAdmin(admin.ModelAdmin):
    list_display = ("title", "stage", "journey_type", "order", "controlled_by", "is_default")
    list_filter = ("stage", "journey_type", "controlled_by")
    search_fields = ("title",)


@admin.register(UserTaskProgress)
class UserTaskProgressAdmin(admin.ModelAdmin):
    list_display = ("user", "task", "is_completed", "hr_validated", "completed_at")
    list_filter = ("is_completed", "hr_validated", "task__stage")
    list_select_related = ("user", "task")


@admin.register(OnboardingProgress)
class OnboardingProgressAdmin(admin.ModelAdmin):
    list_display = ("user", "stage", "progress", "status", "journey_type", "stage_start_date")
    list_filter = ("stage", "status", "journey_type")
    search_fields = ("user__email", "user__name")
    list_select_related = ("user",)


@admin.register(SupervisorAssessment)
class SupervisorAssessmentAdmin(admin.ModelAdmin):
    list_display = ("user", "supervisor", "status", "phase1_completed_date", "created_at")
    list_filter = ("status",)
    search_fields = ("user__email", "supervisor__email")
    list_select_related = ("user", "supervisor")
