"""Inbox routes: list, read, read-all and unread-count."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import NotificationViewSet

inbox_router = SimpleRouter()
inbox_router.register(r"", NotificationViewSet, basename="notification")

urlpatterns = [
    path("", include(inbox_router.urls)),
]
