# ===============================================
# checklists/admin.py
# ===============================================

from django.contrib import admin

from .models import Checklist, ChecklistAssignment, ChecklistItem, ChecklistProgress


class ChecklistItemInline(admin.TabularInline):
    model = ChecklistItem
    extra = 0
    fields = ("order", "title", "is_required", "controlled_by")


@admin.register(Checklist)
class ChecklistAdmin(admin.ModelAdmin):
    list_display = ("title", "program_type", "stage", "auto_assign", "requires_verification", "created_at")
    list_filter = ("program_type", "stage", "auto_assign")
    search_fields = ("title", "description")
    inlines = [ChecklistItemInline]


@admin.register(ChecklistAssignment)
class ChecklistAssignmentAdmin(admin.ModelAdmin):
    list_display = ("checklist", "user", "status", "completion_percentage", "due_date", "created_at")
    list_filter = ("status", "is_auto_assigned")
    search_fields = ("checklist__title", "user__email", "user__name")
    list_select_related = ("checklist", "user")


@admin.register(ChecklistProgress)
class ChecklistProgressAdmin(admin.ModelAdmin):
    """Rows are managed by rebuild_checklist_progress; only the payload is editable here."""

    list_display = ("user", "checklist_item", "is_completed", "verification_status", "updated_at")
    list_filter = ("is_completed", "verification_status")
    search_fields = ("user__email", "checklist_item__title")
    list_select_related = ("user", "checklist_item")
    readonly_fields = ("user", "checklist_item", "created_at", "updated_at")

    def has_add_permission(self, request):
        return False
