# ===========================================================
# maintenance/serializers.py
# ===========================================================

from rest_framework import serializers

from .models import MaintenanceRun


class MaintenanceRunSerializer(serializers.ModelSerializer):
    duration_seconds = serializers.SerializerMethodField()

    class Meta:
        model = MaintenanceRun
        fields = [
            "id",
            "command",
            "owner",
            "status",
            "summary",
            "error",
            "exit_code",
            "started_at",
            "finished_at",
            "duration_seconds",
        ]
        read_only_fields = fields

    def get_duration_seconds(self, obj):
        duration = obj.duration
        return round(duration.total_seconds(), 3) if duration is not None else None
