# ===============================================
# users/admin.py
# ===============================================
# Django Admin configuration for the custom User model.
# ===============================================

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = (
        "emp_id",
        "email",
        "name",
        "role",
        "department",
        "supervisor",
        "is_active",
        "deleted_at",
    )
    list_filter = ("role", "department", "is_active", "is_staff")
    search_fields = ("emp_id", "email", "name", "department", "supervisor__email")
    ordering = ("emp_id",)
    list_per_page = 25
    readonly_fields = ("emp_id", "created_at", "updated_at", "last_login", "deleted_at")
    list_select_related = ("supervisor",)

    fieldsets = (
        (_("Login Info"), {"fields": ("email",)}),
        (
            _("Personal Info"),
            {"fields": ("emp_id", "name", "role", "department", "supervisor", "start_date")},
        ),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Audit"), {"fields": ("last_login", "deleted_at", "created_at", "updated_at")}),
    )

    actions = ["soft_delete_users"]

    @admin.action(description="Soft delete selected users")
    def soft_delete_users(self, request, queryset):
        count = 0
        for user in queryset.active():
            user.soft_delete()
            count += 1
        messages.success(request, f"{count} user(s) soft-deleted.")
