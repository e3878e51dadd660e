"""Serializers for the audit trail."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    performed_by_email = serializers.ReadOnlyField(source="performed_by.email")

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "entity_type",
            "entity_id",
            "action",
            "action_name",
            "old_values",
            "new_values",
            "performed_by",
            "performed_by_email",
            "notes",
            "is_successful",
            "created_at",
        ]
        read_only_fields = fields
