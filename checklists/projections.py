# ===========================================================
# checklists/projections.py
# ===========================================================

from collections import defaultdict

from maintenance.projection import Projection, SourceRecord
from .models import ChecklistAssignment, ChecklistItem, ChecklistProgress


class ChecklistProgressProjection(Projection):
    """One progress row per (assigned user, item of the assigned checklist)."""

    name = "checklist_progress"
    model = ChecklistProgress
    key_fields = ("user_id", "checklist_item_id")

    def sources(self):
        items_by_checklist = defaultdict(list)
        items = ChecklistItem.objects.using(self.using).order_by("checklist_id", "order", "id")
        for checklist_id, item_id in items.values_list("checklist_id", "id").iterator():
            items_by_checklist[checklist_id].append(item_id)

        assignments = (
            ChecklistAssignment.objects.using(self.using)
            .filter(user__isnull=False)
            .order_by("id")
            .values_list("user_id", "checklist_id")
        )
        for user_id, checklist_id in assignments.iterator():
            for item_id in items_by_checklist.get(checklist_id, ()):
                yield SourceRecord(key=(user_id, item_id))

    def default_payload(self, source):
        return {
            "is_completed": False,
            "notes": "",
            "verification_status": ChecklistProgress.VERIFICATION_PENDING,
        }
