"""Serializers for payments."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from apps.bookings.models import Booking

from .models import Payment, PaymentTransaction


class PaymentTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentTransaction
        fields = [
            "id",
            "operation",
            "gateway",
            "amount",
            "is_success",
            "gateway_transaction_id",
            "error_message",
            "created_at",
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    booking_id = serializers.ReadOnlyField(source="booking.id")
    refundable_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    transactions = PaymentTransactionSerializer(many=True, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking_id",
            "amount",
            "currency",
            "method",
            "status",
            "transaction_id",
            "gateway_transaction_id",
            "refunded_amount",
            "refundable_amount",
            "refund_reason",
            "processed_by",
            "paid_at",
            "refunded_at",
            "transactions",
            "created_at",
        ]
        read_only_fields = fields


class ProcessPaymentSerializer(serializers.Serializer):
    booking = serializers.PrimaryKeyRelatedField(queryset=Booking.objects.active())
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    method = serializers.ChoiceField(choices=Payment.Method.choices)
    transaction_id = serializers.CharField(max_length=100)


class RefundPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    reason = serializers.CharField(max_length=500)
