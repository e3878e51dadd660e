"""Notification model.

A message addressed to one user. Rows are created by
``NotificationService`` and delivered by email in the background; the
user reads them through the API and marks them as read.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    class Type(models.TextChoices):
        BOOKING_CREATED = "booking_created", _("Booking created")
        BOOKING_UPDATED = "booking_updated", _("Booking updated")
        BOOKING_CONFIRMED = "booking_confirmed", _("Booking confirmed")
        BOOKING_CHECKED_IN = "booking_checked_in", _("Checked in")
        BOOKING_CHECKED_OUT = "booking_checked_out", _("Checked out")
        BOOKING_COMPLETED = "booking_completed", _("Booking completed")
        BOOKING_CANCELLED = "booking_cancelled", _("Booking cancelled")
        CHECK_IN_REMINDER = "check_in_reminder", _("Check-in reminder")
        PAYMENT_PROCESSED = "payment_processed", _("Payment received")
        PAYMENT_REFUNDED = "payment_refunded", _("Payment refunded")
        PAYMENT_VOIDED = "payment_voided", _("Payment voided")
        GENERAL = "general", _("General")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    notification_type = models.CharField(max_length=40, choices=Type.choices, default=Type.GENERAL)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notification_user_read_idx"),
        ]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"

    def mark_read(self) -> None:
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at"])
