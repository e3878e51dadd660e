"""Unit availability: date-range overlap checks, calendars and occupancy.

A unit is unavailable for ``[check_in, check_out)`` when a non-cancelled
booking overlaps the range or when a ``UnitAvailability`` row with a
status other than ``available`` does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable
from uuid import UUID

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.properties.models import Unit, UnitAvailability
from shared.domain.value_objects import DateRange

from ..models import Booking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityPeriod:
    start_date: date
    end_date: date
    is_available: bool

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "is_available": self.is_available,
        }


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""
    if not transaction.get_connection().in_atomic_block:
        return queryset
    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _merge_spans(spans: Iterable[tuple[date, date]]) -> list[tuple[date, date]]:
    merged: list[list[date]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])
    return [(start, end) for start, end in merged]


class AvailabilityService:
    """Availability queries and manual blocks for units."""

    def _blocking_bookings(self, unit_id, check_in: date, check_out: date, exclude_booking_id=None):
        qs = Booking.objects.blocking().filter(unit_id=unit_id).overlapping(check_in, check_out)
        if exclude_booking_id is not None:
            qs = qs.exclude(pk=exclude_booking_id)
        return qs

    def _blocking_periods(self, unit_id, check_in: date, check_out: date, exclude_booking_id=None):
        qs = (
            UnitAvailability.objects.filter(unit_id=unit_id, start_date__lt=check_out, end_date__gt=check_in)
            .exclude(status=UnitAvailability.AvailabilityStatus.AVAILABLE)
        )
        if exclude_booking_id is not None:
            qs = qs.exclude(booking_id=exclude_booking_id)
        return qs

    def check_availability(
        self,
        unit_id: UUID,
        check_in: date,
        check_out: date,
        exclude_booking_id: UUID | None = None,
    ) -> bool:
        """True when nothing blocks the unit in ``[check_in, check_out)``."""
        bookings = _lock_queryset_if_possible(
            self._blocking_bookings(unit_id, check_in, check_out, exclude_booking_id)
        )
        if bookings.exists():
            logger.debug(f"Unit {unit_id} has overlapping bookings for {check_in} - {check_out}")
            return False

        blocks = _lock_queryset_if_possible(
            self._blocking_periods(unit_id, check_in, check_out, exclude_booking_id)
        )
        if blocks.exists():
            logger.debug(f"Unit {unit_id} is blocked for {check_in} - {check_out}")
            return False
        return True

    def check_multiple_units(self, unit_ids: Iterable[UUID], check_in: date, check_out: date) -> dict[UUID, bool]:
        return {unit_id: self.check_availability(unit_id, check_in, check_out) for unit_id in unit_ids}

    def get_available_units_in_property(
        self,
        property_id: UUID,
        check_in: date,
        check_out: date,
        guests_count: int = 1,
    ) -> list[UUID]:
        unit_ids = Unit.objects.filter(
            property_id=property_id,
            is_active=True,
            max_capacity__gte=guests_count,
        ).values_list("id", flat=True)
        return [unit_id for unit_id in unit_ids if self.check_availability(unit_id, check_in, check_out)]

    def get_unit_availability_periods(self, unit_id: UUID, from_date: date, to_date: date) -> list[AvailabilityPeriod]:
        """Split ``[from_date, to_date)`` into alternating free and busy periods."""
        if from_date >= to_date:
            return []
        window = DateRange(from_date, to_date)

        spans = [
            (b.check_in, b.check_out)
            for b in self._blocking_bookings(unit_id, from_date, to_date)
        ]
        spans.extend(
            (p.start_date, p.end_date)
            for p in self._blocking_periods(unit_id, from_date, to_date)
        )

        periods: list[AvailabilityPeriod] = []
        current = from_date
        for start, end in _merge_spans(spans):
            busy = DateRange(start, end).intersection(window)
            if busy is None:
                continue
            if busy.start_date > current:
                periods.append(AvailabilityPeriod(current, busy.start_date, True))
            periods.append(AvailabilityPeriod(busy.start_date, busy.end_date, False))
            current = max(current, busy.end_date)
        if current < to_date:
            periods.append(AvailabilityPeriod(current, to_date, True))
        return periods

    def calculate_occupancy_rate(self, unit_id: UUID, from_date: date, to_date: date) -> float:
        """Percentage of days in the window covered by non-cancelled bookings."""
        total_days = (to_date - from_date).days
        if total_days <= 0:
            return 0.0
        window = DateRange(from_date, to_date)

        occupied: set[date] = set()
        for booking in self._blocking_bookings(unit_id, from_date, to_date):
            clipped = booking.dates.intersection(window)
            if clipped is not None:
                occupied.update(clipped.days())

        rate = Decimal(len(occupied)) * 100 / Decimal(total_days)
        return float(rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

    def calculate_property_occupancy_rate(self, property_id: UUID, from_date: date, to_date: date) -> float:
        unit_ids = list(Unit.objects.filter(property_id=property_id, is_active=True).values_list("id", flat=True))
        if not unit_ids:
            return 0.0
        rates = [self.calculate_occupancy_rate(unit_id, from_date, to_date) for unit_id in unit_ids]
        mean = Decimal(str(sum(rates))) / len(rates)
        return float(mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

    # --- Blocks ----------------------------------------------------------------
    def block_unit_period(
        self,
        unit_id: UUID,
        start_date: date,
        end_date: date,
        reason: str = "",
        status: str = UnitAvailability.AvailabilityStatus.BLOCKED,
        booking: Booking | None = None,
        created_by=None,
        notes: str = "",
    ) -> UnitAvailability:
        block = UnitAvailability.objects.create(
            unit_id=unit_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            reason=reason,
            notes=notes,
            booking=booking,
            created_by_id=created_by,
        )
        logger.info(f"Blocked unit {unit_id} for {start_date} - {end_date} ({status}, {reason or 'no reason'})")
        return block

    def unblock_unit_period(self, unit_id: UUID, start_date: date, end_date: date) -> int:
        """Delete the manual blocks of the unit that overlap the range."""
        deleted, _ = UnitAvailability.objects.filter(
            unit_id=unit_id,
            booking__isnull=True,
            start_date__lt=end_date,
            end_date__gt=start_date,
        ).delete()
        logger.info(f"Removed {deleted} block(s) of unit {unit_id} for {start_date} - {end_date}")
        return deleted

    def reserve_dates_for_booking(self, booking: Booking, created_by=None) -> UnitAvailability:
        return self.block_unit_period(
            booking.unit_id,
            booking.check_in,
            booking.check_out,
            reason=UnitAvailability.BOOKING_REASON,
            status=UnitAvailability.AvailabilityStatus.UNAVAILABLE,
            booking=booking,
            created_by=created_by,
            notes=f"Booking {booking.pk}",
        )

    def move_dates_for_booking(self, booking: Booking) -> int:
        return UnitAvailability.objects.filter(booking=booking).update(
            start_date=booking.check_in,
            end_date=booking.check_out,
        )

    def release_dates_for_booking(self, booking: Booking) -> int:
        deleted, _ = UnitAvailability.objects.filter(booking=booking).delete()
        return deleted
