"""Celery tasks for notification delivery."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)


@shared_task(name="notifications.deliver_notification_email")
def deliver_notification_email(notification_id: int) -> bool:
    """Email a stored notification to its recipient and stamp ``delivered_at``."""
    try:
        notification = Notification.objects.select_related("user").get(pk=notification_id)
    except Notification.DoesNotExist:
        logger.warning(f"Notification {notification_id} disappeared before delivery")
        return False

    if notification.delivered_at is not None:
        return True

    recipient = notification.user.email
    if not recipient:
        logger.warning(f"User {notification.user_id} has no email, notification {notification_id} stays in-app")
        return False

    try:
        send_mail(
            subject=notification.title,
            message=notification.message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to email notification {notification_id} to {recipient}: {e}", exc_info=True)
        return False

    notification.delivered_at = timezone.now()
    notification.save(update_fields=["delivered_at"])
    logger.info(f"Notification {notification_id} emailed to {recipient}")
    return True
