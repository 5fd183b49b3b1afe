# ===========================================================
# checklists/serializers.py
# ===========================================================

from rest_framework import serializers

from .models import ChecklistProgress


class ChecklistProgressSerializer(serializers.ModelSerializer):
    """Progress row as shown in the employee checklist view. Only the payload is writable."""

    item_title = serializers.CharField(source="checklist_item.title", read_only=True)
    checklist_id = serializers.IntegerField(source="checklist_item.checklist_id", read_only=True)
    checklist_title = serializers.CharField(source="checklist_item.checklist.title", read_only=True)

    class Meta:
        model = ChecklistProgress
        fields = [
            "id",
            "user",
            "checklist_item",
            "item_title",
            "checklist_id",
            "checklist_title",
            "is_completed",
            "completed_at",
            "notes",
            "verification_status",
            "verified_by",
            "verified_at",
            "verification_notes",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "user",
            "checklist_item",
            "completed_at",
            "verification_status",
            "verified_by",
            "verified_at",
            "verification_notes",
            "updated_at",
        ]


class ChecklistVerificationSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
