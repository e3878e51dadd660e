"""Audit service.

Writing the audit trail must never break the business operation that
triggered it: failures are logged and reported as ``False``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import DatabaseError, transaction  # type: ignore

from .models import AuditLog

logger = logging.getLogger(__name__)

# Operation name prefixes mapped onto coarse audit actions.
_ACTION_PREFIXES = (
    ("Create", AuditLog.Action.CREATE),
    ("Block", AuditLog.Action.CREATE),
    ("Update", AuditLog.Action.UPDATE),
    ("Delete", AuditLog.Action.DELETE),
    ("ProcessPayment", AuditLog.Action.PAYMENT),
    ("Refund", AuditLog.Action.REFUND),
)


def action_for(action_name: str) -> str:
    for prefix, action in _ACTION_PREFIXES:
        if action_name.startswith(prefix):
            return action
    return AuditLog.Action.STATUS_CHANGE


def _json_safe(values: dict[str, Any] | None) -> dict[str, Any] | None:
    """Decimals, dates and UUIDs become strings, at any nesting depth."""
    if values is None:
        return None
    return json.loads(json.dumps(values, cls=DjangoJSONEncoder))


class AuditService:
    def log(
        self,
        action_name: str,
        entity_id,
        notes: str = "",
        performed_by=None,
        entity_type: str = "Booking",
    ) -> bool:
        """Record an operation such as ``CreateBooking`` on an entity."""
        return self.log_activity(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action_for(action_name),
            action_name=action_name,
            notes=notes,
            performed_by=performed_by,
        )

    def log_activity(
        self,
        entity_type: str,
        entity_id,
        action: str,
        notes: str = "",
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        performed_by=None,
        action_name: str = "",
        is_successful: bool = True,
    ) -> bool:
        try:
            # Savepoint: a failed insert must not poison the caller's transaction.
            with transaction.atomic():
                AuditLog.objects.create(
                    entity_type=entity_type,
                    entity_id=str(entity_id),
                    action=action,
                    action_name=action_name,
                    old_values=_json_safe(old_values),
                    new_values=_json_safe(new_values),
                    performed_by_id=performed_by,
                    notes=notes,
                    is_successful=is_successful,
                )
        except (DatabaseError, TypeError, ValueError) as e:
            logger.error(f"Failed to write audit log for {entity_type} {entity_id} ({action_name or action}): {e}",
                         exc_info=True)
            return False
        return True

    def get_audit_trail(
        self,
        entity_type: str | None = None,
        entity_id=None,
        performed_by=None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> list[AuditLog]:
        qs = AuditLog.objects.select_related("performed_by")
        if entity_type:
            qs = qs.filter(entity_type=entity_type)
        if entity_id is not None:
            qs = qs.filter(entity_id=str(entity_id))
        if performed_by is not None:
            qs = qs.filter(performed_by_id=performed_by)
        if from_date is not None:
            qs = qs.filter(created_at__gte=from_date)
        if to_date is not None:
            qs = qs.filter(created_at__lte=to_date)
        page = max(page, 1)
        offset = (page - 1) * page_size
        return list(qs.order_by("-created_at")[offset:offset + page_size])
