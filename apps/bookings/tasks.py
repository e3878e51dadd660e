"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .application.queries import upcoming_check_ins

logger = logging.getLogger(__name__)


def reminder_window(hours: int) -> tuple[date, date]:
    """Check-in days covered by a reminder sent ``hours`` ahead.

    Starts tomorrow; stays of today are already arriving. The last day is
    the local date ``hours`` from now, but never before tomorrow.
    """
    first_day = timezone.localdate() + timedelta(days=1)
    horizon = timezone.localtime(timezone.now() + timedelta(hours=hours)).date()
    return first_day, max(first_day, horizon)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.send_check_in_reminders")
def send_check_in_reminders(hours: int | None = None) -> dict[str, int]:
    """
    Remind guests of confirmed bookings that check in within the next
    ``BOOKING_CHECKIN_REMINDER_HOURS`` (tomorrow with the default 24).

    Runs hourly; a booking already reminded is skipped, so each guest
    gets a single reminder.

    Returns:
        dict: {"sent": number of reminders, "skipped": already reminded}
    """
    from apps.notifications.models import Notification
    from apps.notifications.services import NotificationRequest, NotificationService

    if hours is None:
        hours = settings.BOOKING_CHECKIN_REMINDER_HOURS
    first_day, last_day = reminder_window(hours)
    service = NotificationService()
    sent = skipped = 0

    for booking in upcoming_check_ins(first_day, last_day):
        already_reminded = Notification.objects.filter(
            user_id=booking.user_id,
            notification_type=Notification.Type.CHECK_IN_REMINDER,
            data__booking_id=str(booking.pk),
        ).exists()
        if already_reminded:
            skipped += 1
            continue

        delivered = service.send(NotificationRequest(
            user_id=booking.user_id,
            title="Upcoming check-in",
            message=(
                f"Reminder: your stay at {booking.unit.name}, {booking.unit.property.name} "
                f"starts on {booking.check_in}. Check-out is on {booking.check_out}."
            ),
            notification_type=Notification.Type.CHECK_IN_REMINDER,
            data={"booking_id": str(booking.pk), "unit_id": str(booking.unit_id)},
        ))
        if delivered:
            sent += 1

    logger.info(f"Check-in reminders for {first_day} - {last_day}: sent {sent}, skipped {skipped}")
    return {"sent": sent, "skipped": skipped}
