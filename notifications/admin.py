# ===============================================
# notifications/admin.py
# ===============================================

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "type", "is_read", "created_at")
    list_filter = ("type", "is_read")
    search_fields = ("title", "message", "user__email")
    list_select_related = ("user",)
    readonly_fields = ("created_at", "read_at")
