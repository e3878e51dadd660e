"""Notification service: store in-app notifications and queue their delivery."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from django.db import DatabaseError, transaction  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)


@dataclass
class NotificationRequest:
    user_id: UUID
    title: str
    message: str
    notification_type: str = Notification.Type.GENERAL
    data: dict[str, Any] = field(default_factory=dict)


def enqueue_delivery(notification_id) -> bool:
    """Hand the email to Celery; the in-app row stays if the broker is down."""
    from .tasks import deliver_notification_email

    try:
        deliver_notification_email.delay(notification_id)
    except Exception as e:
        logger.error(f"Failed to queue email delivery of notification {notification_id}: {e}", exc_info=True)
        return False
    return True


class NotificationService:
    """Creates notifications; delivery runs in Celery after commit.

    Notifying is best effort: a failure is logged and reported as
    ``False``, never raised into the business operation.
    """

    def send(self, request: NotificationRequest) -> bool:
        try:
            notification = Notification.objects.create(
                user_id=request.user_id,
                notification_type=request.notification_type,
                title=request.title,
                message=request.message,
                data=request.data,
            )
        except DatabaseError as e:
            logger.error(f"Failed to create notification for user {request.user_id}: {e}", exc_info=True)
            return False

        # Outside a transaction on_commit runs the callback immediately.
        transaction.on_commit(lambda: enqueue_delivery(notification.pk))
        logger.info(f"Notification {notification.pk} ({request.notification_type}) queued for user {request.user_id}")
        return True

    def notify_booking_parties(
        self,
        booking,
        notification_type: str,
        guest_title: str,
        guest_message: str,
        owner_title: str | None = None,
        owner_message: str | None = None,
    ) -> int:
        """Notify the guest and, when a message is given, the property owner."""
        data = {"booking_id": str(booking.pk), "unit_id": str(booking.unit_id), "status": booking.status}
        sent = 0
        if self.send(NotificationRequest(
            user_id=booking.user_id,
            title=guest_title,
            message=guest_message,
            notification_type=notification_type,
            data=data,
        )):
            sent += 1

        owner_id = booking.unit.property.owner_id
        if owner_title and owner_message and owner_id and owner_id != booking.user_id:
            if self.send(NotificationRequest(
                user_id=owner_id,
                title=owner_title,
                message=owner_message,
                notification_type=notification_type,
                data=data,
            )):
                sent += 1
        return sent
