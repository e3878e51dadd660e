"""Payment domain events."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class PaymentProcessed(DomainEvent):
    """Event: A payment for a booking succeeded"""
    payment_id: UUID
    booking_id: UUID
    amount: Decimal
    currency: str
    method: str
    performed_by: Optional[UUID] = None


@dataclass(kw_only=True)
class PaymentRefunded(DomainEvent):
    """Event: Part or all of a payment was refunded"""
    payment_id: UUID
    booking_id: UUID
    amount: Decimal
    currency: str
    reason: str
    performed_by: Optional[UUID] = None


@dataclass(kw_only=True)
class PaymentVoided(DomainEvent):
    """Event: A payment was voided before settlement or refund"""
    payment_id: UUID
    booking_id: UUID
    amount: Decimal
    currency: str
    method: str
    performed_by: Optional[UUID] = None
