# ===========================================================
# checklists/views.py
# ===========================================================
"""
Checklist progress endpoints.

Employees read and update their own progress rows; HR sees every row
and verifies completed items. Rows are never created or deleted here,
that is the job of the rebuild_checklist_progress command. While that
command runs, writes are refused with 503.
"""

from django.db import transaction
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
import logging

from maintenance.exceptions import MaintenanceInProgressError
from maintenance.locks import ensure_not_under_maintenance
from maintenance.views import MaintenanceInProgress
from users.permissions import IsHR, IsOwnerOrHR
from .filters import ChecklistProgressFilter
from .models import ChecklistAssignment, ChecklistProgress
from .projections import ChecklistProgressProjection
from .serializers import ChecklistProgressSerializer, ChecklistVerificationSerializer

logger = logging.getLogger(__name__)


def guard_projection_writes():
    try:
        ensure_not_under_maintenance(ChecklistProgressProjection.name)
    except MaintenanceInProgressError as exc:
        logger.info(f"Write refused: {exc}")
        raise MaintenanceInProgress()


class ChecklistProgressViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    GET    /api/checklists/progress/              → List (filter: checklist, user, is_completed, verification_status)
    GET    /api/checklists/progress/{id}/         → Detail
    PATCH  /api/checklists/progress/{id}/         → Update is_completed / notes
    POST   /api/checklists/progress/{id}/verify/  → HR approves or rejects
    """

    queryset = ChecklistProgress.objects.select_related("checklist_item__checklist")
    serializer_class = ChecklistProgressSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrHR]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ChecklistProgressFilter
    ordering_fields = ["updated_at", "checklist_item"]
    ordering = ["checklist_item__checklist_id", "checklist_item__order", "id"]

    def get_queryset(self):
        qs = super().get_queryset()
        if self.request.user.is_hr():
            return qs
        return qs.filter(user=self.request.user)

    @transaction.atomic
    def perform_update(self, serializer):
        guard_projection_writes()
        instance = serializer.instance
        completed = serializer.validated_data.get("is_completed", instance.is_completed)
        notes = serializer.validated_data.get("notes")
        instance.mark_completed(completed, notes=notes)

        for assignment in ChecklistAssignment.objects.filter(
            user_id=instance.user_id,
            checklist_id=instance.checklist_item.checklist_id,
        ):
            assignment.refresh_completion()

        logger.info(f"[ChecklistProgress] {instance.pk} updated by {self.request.user.pk}")

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated, IsHR])
    def verify(self, request, pk=None):
        progress = self.get_object()
        guard_projection_writes()

        if not progress.is_completed:
            return Response(
                {"error": "Only completed items can be verified."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = ChecklistVerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        progress.verify(
            request.user,
            approved=serializer.validated_data["approved"],
            notes=serializer.validated_data.get("notes", ""),
        )
        return Response(ChecklistProgressSerializer(progress).data)
