import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "notification_type",
                    models.CharField(
                        choices=[
                            ("booking_created", "Booking created"),
                            ("booking_updated", "Booking updated"),
                            ("booking_confirmed", "Booking confirmed"),
                            ("booking_checked_in", "Checked in"),
                            ("booking_checked_out", "Checked out"),
                            ("booking_completed", "Booking completed"),
                            ("booking_cancelled", "Booking cancelled"),
                            ("check_in_reminder", "Check-in reminder"),
                            ("payment_processed", "Payment received"),
                            ("payment_refunded", "Payment refunded"),
                            ("payment_voided", "Payment voided"),
                            ("general", "General"),
                        ],
                        default="general",
                        max_length=40,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("message", models.TextField()),
                ("data", models.JSONField(blank=True, default=dict)),
                ("is_read", models.BooleanField(default=False)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "is_read"], name="notification_user_read_idx"),
                ],
            },
        ),
    ]
