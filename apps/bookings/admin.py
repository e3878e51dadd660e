"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "unit",
        "user",
        "status",
        "check_in",
        "check_out",
        "guests_count",
        "total_price",
        "currency",
        "booked_at",
    )
    list_filter = ("status", "check_in", "check_out", "is_active")
    search_fields = ("id", "unit__name", "unit__property__name", "user__email")
    raw_id_fields = ("user", "unit", "created_by", "updated_by")
    readonly_fields = (
        "booked_at",
        "created_at",
        "updated_at",
        "total_price",
        "actual_check_in",
        "actual_check_out",
        "cancelled_at",
    )
