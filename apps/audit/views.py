"""Read-only audit trail API for platform administrators."""

from __future__ import annotations

import django_filters  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import viewsets  # type: ignore

from apps.users.permissions import IsPlatformAdmin

from .models import AuditLog
from .serializers import AuditLogSerializer


class AuditLogFilterSet(django_filters.FilterSet):
    created_from = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_to = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")
    performed_by = django_filters.UUIDFilter(field_name="performed_by_id")

    class Meta:
        model = AuditLog
        fields = ["entity_type", "entity_id", "action", "action_name", "performed_by", "is_successful"]


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = AuditLog.objects.select_related("performed_by").order_by("-created_at")
    serializer_class = AuditLogSerializer
    permission_classes = [IsPlatformAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_class = AuditLogFilterSet
