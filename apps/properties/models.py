"""Property domain models.

A property groups rentable units. Pricing is per unit and depends on the
unit's pricing method; policies are per property and per policy type.
"""

from __future__ import annotations

import builtins
import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def default_currency() -> str:
    return settings.BOOKING_DEFAULT_CURRENCY


class Property(models.Model):
    """Lodging establishment published by an owner."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="properties",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    city = models.CharField(max_length=100)
    address = models.CharField(max_length=255, blank=True)
    currency = models.CharField(max_length=3, default=default_currency)
    is_approved = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["city", "is_active"], name="property_city_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.city})"

    def get_policy(self, policy_type: str) -> "PropertyPolicy | None":
        return self.policies.filter(policy_type=policy_type).first()


class PropertyStaff(models.Model):
    """Staff membership: the user manages bookings of this property."""

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="staff")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="staff_memberships",
    )
    position = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Property staff member")
        verbose_name_plural = _("Property staff")
        constraints = [
            models.UniqueConstraint(fields=["property", "user"], name="unique_property_staff_member"),
        ]

    def __str__(self) -> str:
        return f"{self.user} @ {self.property.name}"


class PropertyPolicy(models.Model):
    """Booking rules of a property, one row per policy type."""

    class PolicyType(models.TextChoices):
        CANCELLATION = "cancellation", _("Cancellation")
        PAYMENT = "payment", _("Payment")
        MODIFICATION = "modification", _("Modification")

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="policies")
    policy_type = models.CharField(max_length=20, choices=PolicyType.choices)
    description = models.TextField(blank=True)
    cancellation_window_days = models.PositiveIntegerField(
        default=0,
        help_text=_("Minimum number of days before check-in for a cancellation."),
    )
    require_full_payment_before_confirmation = models.BooleanField(default=False)
    minimum_deposit_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text=_("Share of the total that must be paid before confirmation."),
    )
    min_hours_before_check_in = models.PositiveIntegerField(
        default=0,
        help_text=_("Modifications are refused closer than this to check-in."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property policy")
        verbose_name_plural = _("Property policies")
        constraints = [
            models.UniqueConstraint(fields=["property", "policy_type"], name="unique_policy_per_type"),
        ]

    def __str__(self) -> str:
        return f"{self.property.name}: {self.get_policy_type_display()}"


class PropertyService(models.Model):
    """Extra service sold together with a booking (breakfast, transfer...)."""

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="services")
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0"))])
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = _("Property service")
        verbose_name_plural = _("Property services")
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.price})"


class Unit(models.Model):
    """Rentable room or apartment of a property."""

    class PricingMethod(models.TextChoices):
        HOURLY = "hourly", _("Per hour")
        DAILY = "daily", _("Per night")
        WEEKLY = "weekly", _("Per week")
        MONTHLY = "monthly", _("Per month")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="units")
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    base_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    pricing_method = models.CharField(
        max_length=10,
        choices=PricingMethod.choices,
        default=PricingMethod.DAILY,
    )
    max_capacity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    is_available = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Unit")
        verbose_name_plural = _("Units")
        ordering = ["property", "name"]

    def __str__(self) -> str:
        return f"{self.property.name} / {self.name}"

    @builtins.property
    def currency(self) -> str:
        return self.property.currency


class UnitAvailability(models.Model):
    """Period during which a unit is (un)available.

    Rows with a status other than ``available`` block bookings. A row
    created for a booking points at it so that the block follows the
    booking on update and disappears on cancellation.
    """

    class AvailabilityStatus(models.TextChoices):
        AVAILABLE = "available", _("Available")
        UNAVAILABLE = "unavailable", _("Unavailable")
        MAINTENANCE = "maintenance", _("Maintenance")
        BLOCKED = "blocked", _("Blocked")

    BOOKING_REASON = "booking"

    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="availability_periods")
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=AvailabilityStatus.choices,
        default=AvailabilityStatus.BLOCKED,
    )
    reason = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="availability_blocks",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_availability_periods",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Unit availability period")
        verbose_name_plural = _("Unit availability periods")
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(end_date__gt=models.F("start_date")),
                name="unit_availability_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["unit", "start_date", "end_date"], name="unit_availability_range_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.unit}: {self.start_date} - {self.end_date} ({self.status})"

    @property
    def is_blocking(self) -> bool:
        return self.status != self.AvailabilityStatus.AVAILABLE
