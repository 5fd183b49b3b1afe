# ===============================================
# checklists/urls.py
# ===============================================

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ChecklistProgressViewSet

app_name = "checklists"

router = DefaultRouter()
router.register(r"progress", ChecklistProgressViewSet, basename="checklist-progress")

urlpatterns = [
    path("", include(router.urls)),
]
