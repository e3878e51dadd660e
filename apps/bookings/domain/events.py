"""
Booking Domain Events

Recorded on the Booking aggregate by its state transitions and published
through the message bus after the handler's transaction commits.
Notification subscribers live in ``apps.notifications.handlers``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingEvent(DomainEvent):
    booking_id: UUID
    unit_id: UUID
    user_id: UUID
    performed_by: Optional[UUID] = None


@dataclass(kw_only=True)
class BookingCreated(BookingEvent):
    """
    Event: A new booking was created (status Pending)

    Triggers:
    - Notify the guest that the booking was received
    """
    check_in: date
    check_out: date
    guests_count: int
    total_price: Decimal
    currency: str


@dataclass(kw_only=True)
class BookingUpdated(BookingEvent):
    """Event: Dates, guests or price of a booking changed"""
    changes: List[str] = field(default_factory=list)
    total_price: Optional[Decimal] = None


@dataclass(kw_only=True)
class BookingConfirmed(BookingEvent):
    """
    Event: Booking confirmed by the property (Pending -> Confirmed)

    Triggers:
    - Notify the guest
    - Notify the property owner
    """
    check_in: date
    check_out: date


@dataclass(kw_only=True)
class BookingCheckedIn(BookingEvent):
    """Event: Guest checked in (Confirmed -> CheckedIn)"""
    checked_in_at: datetime


@dataclass(kw_only=True)
class BookingCheckedOut(BookingEvent):
    """Event: Guest checked out (CheckedIn -> Completed)"""
    checked_out_at: datetime


@dataclass(kw_only=True)
class BookingCompleted(BookingEvent):
    """Event: Booking closed by the property (Confirmed/CheckedIn -> Completed)"""
    completed_at: datetime


@dataclass(kw_only=True)
class BookingCancelled(BookingEvent):
    """
    Event: Booking cancelled (Pending/Confirmed -> Cancelled)

    Triggers:
    - Notify the guest
    - Notify the property owner that the dates are free again
    """
    reason: str
    cancelled_at: datetime
