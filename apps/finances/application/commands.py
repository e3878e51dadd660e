"""Payment commands."""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID


@dataclass
class ProcessPaymentCommand:
    booking_id: UUID
    amount: Decimal
    currency: str
    method: str
    transaction_id: str


@dataclass
class RefundPaymentCommand:
    payment_id: UUID
    amount: Decimal
    reason: str


@dataclass
class VoidPaymentCommand:
    payment_id: UUID
