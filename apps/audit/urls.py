"""URL routing for the audit trail."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AuditLogViewSet

router = SimpleRouter()
router.register(r"", AuditLogViewSet, basename="auditlog")

urlpatterns = [
    path("", include(router.urls)),
]
