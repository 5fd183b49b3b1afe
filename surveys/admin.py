# ===============================================
# surveys/admin.py
# ===============================================

from django.contrib import admin

from .models import Survey, SurveyQuestion, SurveyQuestionResponse, SurveyResponse


class SurveyQuestionInline(admin.TabularInline):
    model = SurveyQuestion
    extra = 0


@admin.register(Survey)
class SurveyAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "status", "created_at")
    list_filter = ("type", "status")
    search_fields = ("title",)
    inlines = [SurveyQuestionInline]


class SurveyQuestionResponseInline(admin.TabularInline):
    model = SurveyQuestionResponse
    extra = 0
    readonly_fields = ("question", "answer")


@admin.register(SurveyResponse)
class SurveyResponseAdmin(admin.ModelAdmin):
    list_display = ("survey", "user", "status", "submitted_at")
    list_filter = ("status", "survey")
    list_select_related = ("survey", "user")
    inlines = [SurveyQuestionResponseInline]
