"""
Booking Commands

Plain data describing what the caller wants; handlers in
``command_handlers`` validate and execute them.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
from uuid import UUID


@dataclass
class CreateBookingCommand:
    user_id: UUID
    unit_id: UUID
    check_in: date
    check_out: date
    guests_count: int
    service_ids: List[int] = field(default_factory=list)


@dataclass
class UpdateBookingCommand:
    """Fields left as None keep their current value."""
    booking_id: UUID
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests_count: Optional[int] = None


@dataclass
class ConfirmBookingCommand:
    booking_id: UUID


@dataclass
class CheckInCommand:
    booking_id: UUID


@dataclass
class CheckOutCommand:
    booking_id: UUID


@dataclass
class CompleteBookingCommand:
    booking_id: UUID


@dataclass
class CancelBookingCommand:
    booking_id: UUID
    cancellation_reason: str
