"""Financial domain models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorderMixin

from .domain import events


class Payment(EventRecorderMixin, models.Model):
    """Payment made towards a booking."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        SUCCESSFUL = "successful", _("Successful")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")
        PARTIALLY_REFUNDED = "partially_refunded", _("Partially refunded")
        VOIDED = "voided", _("Voided")

    class Method(models.TextChoices):
        CASH = "cash", _("Cash")
        CARD = "card", _("Card")
        WALLET = "wallet", _("Wallet")
        BANK_TRANSFER = "bank_transfer", _("Bank transfer")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="YER")
    method = models.CharField(max_length=20, choices=Method.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    transaction_id = models.CharField(max_length=100, unique=True)
    gateway_transaction_id = models.CharField(max_length=100, blank=True)
    refunded_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    refund_reason = models.CharField(max_length=500, blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_payments",
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking", "status"], name="payment_booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Payment {self.transaction_id} {self.amount} {self.currency} ({self.status})"

    @property
    def refundable_amount(self) -> Decimal:
        return self.amount - self.refunded_amount

    def mark_successful(self, gateway_transaction_id: str = "", performed_by=None) -> None:
        self.status = self.Status.SUCCESSFUL
        self.gateway_transaction_id = gateway_transaction_id
        self.paid_at = timezone.now()
        self.add_event(events.PaymentProcessed(
            payment_id=self.pk,
            booking_id=self.booking_id,
            amount=self.amount,
            currency=self.currency,
            method=self.method,
            performed_by=performed_by,
        ))

    def mark_failed(self) -> None:
        self.status = self.Status.FAILED

    def mark_voided(self, performed_by=None) -> None:
        self.status = self.Status.VOIDED
        self.add_event(events.PaymentVoided(
            payment_id=self.pk,
            booking_id=self.booking_id,
            amount=self.amount,
            currency=self.currency,
            method=self.method,
            performed_by=performed_by,
        ))

    def mark_refunded(self, amount: Decimal, reason: str, performed_by=None) -> None:
        self.refunded_amount += amount
        self.refund_reason = reason
        self.refunded_at = timezone.now()
        if self.refunded_amount >= self.amount:
            self.status = self.Status.REFUNDED
        else:
            self.status = self.Status.PARTIALLY_REFUNDED
        self.add_event(events.PaymentRefunded(
            payment_id=self.pk,
            booking_id=self.booking_id,
            amount=amount,
            currency=self.currency,
            reason=reason,
            performed_by=performed_by,
        ))


class PaymentTransaction(models.Model):
    """Log of requests and responses exchanged with the payment gateway."""

    class Operation(models.TextChoices):
        CHARGE = "charge", _("Charge")
        REFUND = "refund", _("Refund")
        VOID = "void", _("Void")

    payment = models.ForeignKey(
        Payment,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="transactions",
    )
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="payment_transactions",
    )
    operation = models.CharField(max_length=20, choices=Operation.choices)
    gateway = models.CharField(max_length=50)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    is_success = models.BooleanField(default=False)
    gateway_transaction_id = models.CharField(max_length=100, blank=True)
    error_message = models.TextField(blank=True)
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment transaction")
        verbose_name_plural = _("Payment transactions")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.operation} via {self.gateway}: {'ok' if self.is_success else 'failed'}"
