"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import (
    Property,
    PropertyPolicy,
    PropertyService,
    PropertyStaff,
    Unit,
    UnitAvailability,
)


class PropertyPolicySerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyPolicy
        fields = [
            "id",
            "policy_type",
            "description",
            "cancellation_window_days",
            "require_full_payment_before_confirmation",
            "minimum_deposit_percentage",
            "min_hours_before_check_in",
            "updated_at",
        ]
        read_only_fields = ["id", "updated_at"]


class PropertyServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyService
        fields = ["id", "name", "description", "price", "is_active"]
        read_only_fields = ["id"]


class PropertyStaffSerializer(serializers.ModelSerializer):
    user_email = serializers.ReadOnlyField(source="user.email")

    class Meta:
        model = PropertyStaff
        fields = ["id", "user", "user_email", "position", "is_active", "created_at"]
        read_only_fields = ["id", "user_email", "created_at"]


class PropertySerializer(serializers.ModelSerializer):
    """Full representation of a property with its policies."""

    owner_id = serializers.ReadOnlyField(source="owner.id")
    owner_email = serializers.ReadOnlyField(source="owner.email")
    units_count = serializers.SerializerMethodField()
    policies = PropertyPolicySerializer(many=True, read_only=True)

    class Meta:
        model = Property
        fields = [
            "id",
            "owner_id",
            "owner_email",
            "name",
            "description",
            "city",
            "address",
            "currency",
            "is_approved",
            "is_active",
            "units_count",
            "policies",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_units_count(self, obj: Property) -> int:
        return obj.units.filter(is_active=True).count()


class PropertyWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = ["id", "name", "description", "city", "address", "currency"]
        read_only_fields = ["id"]

    def validate_currency(self, value: str) -> str:
        return value.upper()


class UnitSerializer(serializers.ModelSerializer):
    property_name = serializers.ReadOnlyField(source="property.name")
    currency = serializers.ReadOnlyField()

    class Meta:
        model = Unit
        fields = [
            "id",
            "property",
            "property_name",
            "name",
            "description",
            "base_price",
            "pricing_method",
            "currency",
            "max_capacity",
            "is_available",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "property_name", "currency", "is_available", "created_at", "updated_at"]


class UnitAvailabilitySerializer(serializers.ModelSerializer):
    booking_id = serializers.ReadOnlyField(source="booking.id")

    class Meta:
        model = UnitAvailability
        fields = [
            "id",
            "unit",
            "start_date",
            "end_date",
            "status",
            "reason",
            "notes",
            "booking_id",
            "created_by",
            "created_at",
        ]
        read_only_fields = ["id", "booking_id", "created_by", "created_at"]

    def validate(self, attrs):  # type: ignore
        start_date = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end_date = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start_date and end_date and start_date >= end_date:
            raise serializers.ValidationError("End date must be after start date.")
        return attrs


class DateRangeQuerySerializer(serializers.Serializer):
    """``from``/``to`` query parameters of calendar endpoints."""

    date_from = serializers.DateField()
    date_to = serializers.DateField()

    def to_internal_value(self, data):  # type: ignore
        data = {
            "date_from": data.get("from") or data.get("date_from"),
            "date_to": data.get("to") or data.get("date_to"),
        }
        return super().to_internal_value(data)

    def validate(self, attrs):  # type: ignore
        if attrs["date_from"] >= attrs["date_to"]:
            raise serializers.ValidationError("'to' must be after 'from'.")
        return attrs


class StayQuerySerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(min_value=1, default=1)

    def validate(self, attrs):  # type: ignore
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError("Check-out date must be after check-in date.")
        return attrs
