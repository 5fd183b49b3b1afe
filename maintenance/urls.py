# ===============================================
# maintenance/urls.py
# ===============================================

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import MaintenanceRunViewSet

app_name = "maintenance"

router = DefaultRouter()
router.register(r"runs", MaintenanceRunViewSet, basename="maintenance-run")

urlpatterns = [
    path("", include(router.urls)),
]
