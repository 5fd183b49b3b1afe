# ===========================================================
# checklists/filters.py
# ===========================================================

import django_filters

from .models import ChecklistProgress


class ChecklistProgressFilter(django_filters.FilterSet):
    checklist = django_filters.NumberFilter(field_name="checklist_item__checklist_id")
    user = django_filters.NumberFilter(field_name="user_id")

    class Meta:
        model = ChecklistProgress
        fields = ["checklist", "user", "is_completed", "verification_status"]
