"""Admin registration for the audit trail (read-only)."""

from __future__ import annotations

from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action_name", "action", "entity_type", "entity_id", "performed_by",
                    "is_successful")
    list_filter = ("action", "entity_type", "is_successful")
    search_fields = ("entity_id", "action_name", "notes", "performed_by__email")
    date_hierarchy = "created_at"

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False
