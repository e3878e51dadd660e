"""Admin registration for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import Payment, PaymentTransaction


class PaymentTransactionInline(admin.TabularInline):
    model = PaymentTransaction
    extra = 0
    can_delete = False
    readonly_fields = ("operation", "gateway", "amount", "is_success", "gateway_transaction_id", "error_message",
                       "created_at")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "booking", "amount", "currency", "method", "status", "paid_at")
    list_filter = ("status", "method", "currency")
    search_fields = ("transaction_id", "gateway_transaction_id", "booking__id")
    raw_id_fields = ("booking", "processed_by")
    readonly_fields = ("paid_at", "refunded_at", "created_at", "updated_at")
    inlines = [PaymentTransactionInline]
