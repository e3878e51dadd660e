"""Balance queries over the payments of a booking."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from django.db.models import F, Sum  # type: ignore

from .models import Payment

# Payments whose money is (at least partly) still held.
SETTLED_STATUSES = (
    Payment.Status.SUCCESSFUL,
    Payment.Status.PARTIALLY_REFUNDED,
    Payment.Status.REFUNDED,
)


class PaymentService:
    def get_total_paid(self, booking_id: UUID) -> Decimal:
        """Successful payments minus what has been refunded from them."""
        total = (
            Payment.objects.filter(booking_id=booking_id, status__in=SETTLED_STATUSES)
            .aggregate(net=Sum(F("amount") - F("refunded_amount")))["net"]
        )
        return total or Decimal("0.00")

    def get_remaining_balance(self, booking_id: UUID, total_price: Decimal) -> Decimal:
        return max(total_price - self.get_total_paid(booking_id), Decimal("0.00"))

    def get_payments(self, booking_id: UUID):
        return Payment.objects.filter(booking_id=booking_id).order_by("-created_at")

    def transaction_exists(self, transaction_id: str) -> bool:
        return Payment.objects.filter(transaction_id=transaction_id).exists()
