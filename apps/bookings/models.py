"""Booking domain models.

The Booking row is the aggregate root of the booking lifecycle::

    pending -> confirmed -> checked_in -> completed
    pending | confirmed -> cancelled

Transition methods check the source status, mutate the row in memory and
record a domain event; command handlers run every other guard, save the
row inside a unit of work and let it publish the events after commit.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.application.exceptions import BusinessRuleError
from shared.domain.base import EventRecorderMixin
from shared.domain.value_objects import DateRange, Money

from .domain import events


class BookingQuerySet(models.QuerySet):
    def active(self) -> "BookingQuerySet":
        """Not soft-deleted."""
        return self.filter(is_active=True)

    def blocking(self) -> "BookingQuerySet":
        """Bookings that hold their dates."""
        return self.active().exclude(status=Booking.Status.CANCELLED)

    def overlapping(self, check_in, check_out) -> "BookingQuerySet":
        # Half-open ranges: a check-out day may be the next check-in day.
        return self.filter(check_in__lt=check_out, check_out__gt=check_in)

    def visible_to(self, user) -> "BookingQuerySet":
        if not user.is_authenticated:
            return self.none()
        if user.is_superuser or user.is_admin():
            return self
        if user.is_owner() or user.is_property_staff():
            return self.filter(
                models.Q(unit__property__owner=user)
                | models.Q(unit__property__staff__user=user, unit__property__staff__is_active=True)
                | models.Q(user=user)
            ).distinct()
        return self.filter(user=user)


class Booking(EventRecorderMixin, models.Model):
    """Reservation of a unit for a date range."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CHECKED_IN = "checked_in", _("Checked in")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    unit = models.ForeignKey(
        "properties.Unit",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    check_in = models.DateField()
    check_out = models.DateField()
    guests_count = models.PositiveIntegerField(default=1)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="YER")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    services = models.ManyToManyField("properties.PropertyService", blank=True, related_name="bookings")
    booked_at = models.DateTimeField(default=timezone.now)
    actual_check_in = models.DateTimeField(null=True, blank=True)
    actual_check_out = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=500, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-booked_at"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                check=models.Q(guests_count__gte=1),
                name="booking_positive_guests",
            ),
        ]
        indexes = [
            models.Index(fields=["unit", "check_in", "check_out"], name="booking_unit_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.pk} ({self.get_status_display()}) {self.check_in} - {self.check_out}"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.check_in, self.check_out)

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    @property
    def price(self) -> Money:
        return Money(self.total_price, self.currency)

    def _event_payload(self, performed_by) -> dict:
        return {
            "booking_id": self.pk,
            "unit_id": self.unit_id,
            "user_id": self.user_id,
            "performed_by": performed_by,
        }

    def _require_status(self, *allowed: str) -> None:
        if self.status not in allowed:
            raise BusinessRuleError(
                "InvalidStatus",
                f"Booking is {self.status}, expected one of: {', '.join(allowed)}",
            )

    # --- State transitions ---------------------------------------------------
    def record_created(self, performed_by=None) -> None:
        self.add_event(events.BookingCreated(
            check_in=self.check_in,
            check_out=self.check_out,
            guests_count=self.guests_count,
            total_price=self.total_price,
            currency=self.currency,
            **self._event_payload(performed_by),
        ))

    def reschedule(self, check_in, check_out, guests_count: int, total_price: Decimal, performed_by=None) -> list[str]:
        """Apply new dates/guests/price and return the list of changes."""
        self._require_status(self.Status.PENDING, self.Status.CONFIRMED)
        changes: list[str] = []
        if check_in != self.check_in:
            changes.append(f"check_in: {self.check_in} -> {check_in}")
            self.check_in = check_in
        if check_out != self.check_out:
            changes.append(f"check_out: {self.check_out} -> {check_out}")
            self.check_out = check_out
        if guests_count != self.guests_count:
            changes.append(f"guests_count: {self.guests_count} -> {guests_count}")
            self.guests_count = guests_count
        if total_price != self.total_price:
            changes.append(f"total_price: {self.total_price} -> {total_price}")
            self.total_price = total_price
        self.updated_by_id = performed_by
        if changes:
            self.add_event(events.BookingUpdated(
                changes=changes,
                total_price=self.total_price,
                **self._event_payload(performed_by),
            ))
        return changes

    def confirm(self, performed_by=None) -> None:
        self._require_status(self.Status.PENDING)
        self.status = self.Status.CONFIRMED
        self.updated_by_id = performed_by
        self.add_event(events.BookingConfirmed(
            check_in=self.check_in,
            check_out=self.check_out,
            **self._event_payload(performed_by),
        ))

    def check_in_guest(self, performed_by=None, at: datetime | None = None) -> None:
        self._require_status(self.Status.CONFIRMED)
        self.status = self.Status.CHECKED_IN
        self.actual_check_in = at or timezone.now()
        self.updated_by_id = performed_by
        self.add_event(events.BookingCheckedIn(
            checked_in_at=self.actual_check_in,
            **self._event_payload(performed_by),
        ))

    def check_out_guest(self, performed_by=None, at: datetime | None = None) -> None:
        self._require_status(self.Status.CHECKED_IN)
        self.status = self.Status.COMPLETED
        self.actual_check_out = at or timezone.now()
        self.updated_by_id = performed_by
        self.add_event(events.BookingCheckedOut(
            checked_out_at=self.actual_check_out,
            **self._event_payload(performed_by),
        ))

    def complete(self, performed_by=None, at: datetime | None = None) -> None:
        self._require_status(self.Status.CONFIRMED, self.Status.CHECKED_IN)
        self.status = self.Status.COMPLETED
        self.actual_check_out = at or timezone.now()
        self.updated_by_id = performed_by
        self.add_event(events.BookingCompleted(
            completed_at=self.actual_check_out,
            **self._event_payload(performed_by),
        ))

    def cancel(self, reason: str, performed_by=None, at: datetime | None = None) -> None:
        self._require_status(self.Status.PENDING, self.Status.CONFIRMED)
        self.status = self.Status.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = at or timezone.now()
        self.updated_by_id = performed_by
        self.add_event(events.BookingCancelled(
            reason=reason,
            cancelled_at=self.cancelled_at,
            **self._event_payload(performed_by),
        ))
