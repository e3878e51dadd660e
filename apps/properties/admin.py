"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Property, PropertyPolicy, PropertyService, PropertyStaff, Unit, UnitAvailability


class UnitInline(admin.TabularInline):
    model = Unit
    extra = 0
    fields = ("name", "pricing_method", "base_price", "max_capacity", "is_available", "is_active")


class PropertyPolicyInline(admin.StackedInline):
    model = PropertyPolicy
    extra = 0


class PropertyServiceInline(admin.TabularInline):
    model = PropertyService
    extra = 0
    fields = ("name", "price", "is_active")


class PropertyStaffInline(admin.TabularInline):
    model = PropertyStaff
    extra = 0
    raw_id_fields = ("user",)


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "owner", "currency", "is_approved", "is_active", "created_at")
    list_filter = ("is_approved", "is_active", "city")
    search_fields = ("name", "city", "address", "owner__email")
    raw_id_fields = ("owner",)
    inlines = [UnitInline, PropertyPolicyInline, PropertyServiceInline, PropertyStaffInline]


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ("name", "property", "pricing_method", "base_price", "max_capacity", "is_available", "is_active")
    list_filter = ("pricing_method", "is_available", "is_active")
    search_fields = ("name", "property__name")


@admin.register(UnitAvailability)
class UnitAvailabilityAdmin(admin.ModelAdmin):
    list_display = ("unit", "start_date", "end_date", "status", "reason", "booking")
    list_filter = ("status",)
    search_fields = ("unit__name", "reason")
    raw_id_fields = ("unit", "booking", "created_by")
