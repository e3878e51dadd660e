"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PropertyViewSet, UnitAvailabilityViewSet, UnitViewSet

router = DefaultRouter()
router.register(r"properties", PropertyViewSet, basename="property")
router.register(r"units", UnitViewSet, basename="unit")
router.register(r"unit-availability", UnitAvailabilityViewSet, basename="unit-availability")

urlpatterns = [
    path("", include(router.urls)),
]
