# ===========================================================
# maintenance/views.py
# ===========================================================
"""
Read-only access to the maintenance run ledger for HR.
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, status, viewsets
from rest_framework.exceptions import APIException

from users.permissions import IsHR
from .models import MaintenanceRun
from .serializers import MaintenanceRunSerializer


class MaintenanceInProgress(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "This data is being rebuilt. Please retry shortly."
    default_code = "maintenance_in_progress"


class MaintenanceRunViewSet(viewsets.ReadOnlyModelViewSet):
    """
    GET /api/maintenance/runs/          → List runs (filter: command, status)
    GET /api/maintenance/runs/{id}/     → Run detail
    """

    queryset = MaintenanceRun.objects.all()
    serializer_class = MaintenanceRunSerializer
    permission_classes = [permissions.IsAuthenticated, IsHR]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ["command", "status"]
    ordering_fields = ["started_at", "finished_at"]
    ordering = ["-started_at"]
