"""
URL configuration for LicenseGovernanceService project.
"""
from django.contrib import admin
from django.urls import path

from core.views import HealthDBView, HealthView, MetricsView

urlpatterns = [
    path("admin/", admin.site.urls),
    # Health check endpoints
    path("health/", HealthView.as_view(), name="health"),
    path("health/db/", HealthDBView.as_view(), name="health-db"),
    path("metrics/", MetricsView.as_view(), name="metrics"),
]
