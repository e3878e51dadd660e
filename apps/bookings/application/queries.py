"""Read-side helpers for bookings."""

from __future__ import annotations

from datetime import date

from ..models import Booking, BookingQuerySet


def bookings_visible_to(user) -> BookingQuerySet:
    """Admin: all; owner/staff: their properties and own; client: own."""
    return (
        Booking.objects.active()
        .visible_to(user)
        .select_related("user", "unit__property")
        .prefetch_related("services")
    )


def upcoming_check_ins(first_day: date, last_day: date | None = None) -> BookingQuerySet:
    """Confirmed bookings starting between ``first_day`` and ``last_day`` inclusive."""
    return (
        Booking.objects.active()
        .filter(status=Booking.Status.CONFIRMED, check_in__range=(first_day, last_day or first_day))
        .select_related("user", "unit__property")
    )
