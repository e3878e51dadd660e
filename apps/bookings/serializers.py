"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.properties.models import PropertyService, Unit

from .models import Booking


class BookingServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyService
        fields = ["id", "name", "price"]


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking."""

    user_id = serializers.ReadOnlyField(source="user.id")
    user_email = serializers.ReadOnlyField(source="user.email")
    unit_id = serializers.ReadOnlyField(source="unit.id")
    unit_name = serializers.ReadOnlyField(source="unit.name")
    property_id = serializers.ReadOnlyField(source="unit.property_id")
    property_name = serializers.ReadOnlyField(source="unit.property.name")
    nights = serializers.IntegerField(read_only=True)
    services = BookingServiceSerializer(many=True, read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "user_id",
            "user_email",
            "unit_id",
            "unit_name",
            "property_id",
            "property_name",
            "check_in",
            "check_out",
            "nights",
            "guests_count",
            "total_price",
            "currency",
            "status",
            "services",
            "booked_at",
            "actual_check_in",
            "actual_check_out",
            "cancellation_reason",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    """Input of CreateBooking; ``user`` defaults to the requester."""

    unit = serializers.PrimaryKeyRelatedField(queryset=Unit.objects.all())
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests_count = serializers.IntegerField(min_value=1, default=1)
    services = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    user = serializers.UUIDField(required=False)


class BookingUpdateSerializer(serializers.Serializer):
    check_in = serializers.DateField(required=False)
    check_out = serializers.DateField(required=False)
    guests_count = serializers.IntegerField(min_value=1, required=False)

    def validate(self, attrs):  # type: ignore
        if not attrs:
            raise serializers.ValidationError("Nothing to update.")
        return attrs


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)


class QuoteSerializer(serializers.Serializer):
    unit = serializers.PrimaryKeyRelatedField(queryset=Unit.objects.filter(is_active=True))
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests_count = serializers.IntegerField(min_value=1, default=1)
    services = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)

    def validate(self, attrs):  # type: ignore
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError("Check-out date must be after check-in date.")
        return attrs
