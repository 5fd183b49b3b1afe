# ===============================================
# maintenance/admin.py
# ===============================================
# Read-only admin views of the run ledger and the
# currently held maintenance locks.
# ===============================================

from django.contrib import admin
from django.utils.html import format_html

from .models import MaintenanceLock, MaintenanceRun


@admin.register(MaintenanceRun)
class MaintenanceRunAdmin(admin.ModelAdmin):
    list_display = ("id", "command", "colored_status", "exit_code", "owner", "started_at", "finished_at")
    list_filter = ("status", "command")
    search_fields = ("command", "owner", "error")
    date_hierarchy = "started_at"
    readonly_fields = [field.name for field in MaintenanceRun._meta.fields]
    list_per_page = 25

    STATUS_COLORS = {
        MaintenanceRun.STATUS_SUCCEEDED: "green",
        MaintenanceRun.STATUS_FAILED: "red",
        MaintenanceRun.STATUS_DRY_RUN: "gray",
        MaintenanceRun.STATUS_RUNNING: "orange",
    }

    @admin.display(description="Status", ordering="status")
    def colored_status(self, obj):
        color = self.STATUS_COLORS.get(obj.status, "black")
        return format_html('<b style="color:{};">{}</b>', color, obj.get_status_display())

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(MaintenanceLock)
class MaintenanceLockAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "acquired_at", "expires_at", "is_expired")
    readonly_fields = ("name", "owner", "acquired_at", "expires_at")

    @admin.display(boolean=True, description="Expired")
    def is_expired(self, obj):
        return obj.is_expired

    def has_add_permission(self, request):
        return False
