import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import apps.properties.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Property",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("city", models.CharField(max_length=100)),
                ("address", models.CharField(blank=True, max_length=255)),
                ("currency", models.CharField(default=apps.properties.models.default_currency, max_length=3)),
                ("is_approved", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="properties",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Property",
                "verbose_name_plural": "Properties",
                "ordering": ["name"],
                "indexes": [models.Index(fields=["city", "is_active"], name="property_city_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="PropertyService",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                ("description", models.TextField(blank=True)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="services",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Property service",
                "verbose_name_plural": "Property services",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="PropertyPolicy",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "policy_type",
                    models.CharField(
                        choices=[
                            ("cancellation", "Cancellation"),
                            ("payment", "Payment"),
                            ("modification", "Modification"),
                        ],
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                (
                    "cancellation_window_days",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Minimum number of days before check-in for a cancellation.",
                    ),
                ),
                ("require_full_payment_before_confirmation", models.BooleanField(default=False)),
                (
                    "minimum_deposit_percentage",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Share of the total that must be paid before confirmation.",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                (
                    "min_hours_before_check_in",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Modifications are refused closer than this to check-in.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="policies",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Property policy",
                "verbose_name_plural": "Property policies",
                "constraints": [
                    models.UniqueConstraint(fields=("property", "policy_type"), name="unique_policy_per_type"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PropertyStaff",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.CharField(blank=True, max_length=100)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="staff",
                        to="properties.property",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="staff_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Property staff member",
                "verbose_name_plural": "Property staff",
                "constraints": [
                    models.UniqueConstraint(fields=("property", "user"), name="unique_property_staff_member"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Unit",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=150)),
                ("description", models.TextField(blank=True)),
                (
                    "base_price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "pricing_method",
                    models.CharField(
                        choices=[
                            ("hourly", "Per hour"),
                            ("daily", "Per night"),
                            ("weekly", "Per week"),
                            ("monthly", "Per month"),
                        ],
                        default="daily",
                        max_length=10,
                    ),
                ),
                (
                    "max_capacity",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("is_available", models.BooleanField(default=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="units",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Unit",
                "verbose_name_plural": "Units",
                "ordering": ["property", "name"],
            },
        ),
        migrations.CreateModel(
            name="UnitAvailability",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Available"),
                            ("unavailable", "Unavailable"),
                            ("maintenance", "Maintenance"),
                            ("blocked", "Blocked"),
                        ],
                        default="blocked",
                        max_length=20,
                    ),
                ),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_availability_periods",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "unit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability_periods",
                        to="properties.unit",
                    ),
                ),
            ],
            options={
                "verbose_name": "Unit availability period",
                "verbose_name_plural": "Unit availability periods",
                "ordering": ["start_date"],
                "indexes": [
                    models.Index(fields=["unit", "start_date", "end_date"], name="unit_availability_range_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        check=models.Q(end_date__gt=models.F("start_date")),
                        name="unit_availability_valid_date_range",
                    ),
                ],
            },
        ),
    ]
