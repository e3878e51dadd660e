"""Integration tests for booking API endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.notifications.models import Notification
from apps.users.models import User

from .factories import days_from_now, make_booking, make_property, make_staff, make_unit, make_user


class BookingAPITests(APITestCase):
    """Covers creating, listing, conflicts and the lifecycle actions."""

    def setUp(self) -> None:
        self.guest = make_user()
        self.owner = make_user(User.RoleChoices.OWNER)
        self.property = make_property(owner=self.owner)
        self.unit = make_unit(self.property, base_price=Decimal("20000.00"))
        self.client.force_authenticate(self.guest)
        self.list_url = reverse("booking-list")

    def _payload(self, check_in, check_out, **extra) -> dict:
        payload = {
            "unit": str(self.unit.id),
            "check_in": str(check_in),
            "check_out": str(check_out),
            "guests_count": 2,
        }
        payload.update(extra)
        return payload

    def test_guest_can_create_booking(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.post(self.list_url, self._payload(days_from_now(1), days_from_now(4)), format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        self.assertTrue(resp.data["success"])
        booking = Booking.objects.get(pk=resp.data["data"])
        self.assertEqual(booking.user, self.guest)
        self.assertEqual(booking.total_price, Decimal("60000.00"))
        self.assertEqual(resp.data["booking"]["status"], Booking.Status.PENDING)
        self.assertEqual(resp.data["booking"]["nights"], 3)
        self.assertTrue(Notification.objects.filter(user=self.owner).exists())

    def test_overlapping_booking_is_rejected(self) -> None:
        make_booking(self.unit, check_in=days_from_now(2), check_out=days_from_now(5))

        resp = self.client.post(self.list_url, self._payload(days_from_now(3), days_from_now(6)), format="json")

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT, resp.data)
        self.assertEqual(resp.data["error_code"], "unavailable")

    def test_invalid_dates_are_rejected(self) -> None:
        resp = self.client.post(self.list_url, self._payload(days_from_now(4), days_from_now(2)), format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["error_code"], "validation_error")

    def test_unknown_unit_is_a_serializer_error(self) -> None:
        payload = self._payload(days_from_now(1), days_from_now(2))
        payload["unit"] = "00000000-0000-0000-0000-000000000000"

        resp = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("unit", resp.data)

    def test_anonymous_request_is_rejected(self) -> None:
        self.client.force_authenticate(None)

        resp = self.client.get(self.list_url)

        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_shows_only_visible_bookings(self) -> None:
        own = make_booking(self.unit, self.guest, days_from_now(1), days_from_now(2))
        make_booking(self.unit, make_user(), days_from_now(3), days_from_now(4))

        resp = self.client.get(self.list_url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([item["id"] for item in resp.data["results"]], [str(own.pk)])

    def test_owner_sees_bookings_of_their_property(self) -> None:
        make_booking(self.unit, self.guest, days_from_now(1), days_from_now(2))
        make_booking(make_unit(), self.guest, days_from_now(5), days_from_now(6))
        self.client.force_authenticate(self.owner)

        resp = self.client.get(self.list_url)

        self.assertEqual(resp.data["count"], 1)

    def test_list_filters_by_status_and_range(self) -> None:
        make_booking(self.unit, self.guest, days_from_now(1), days_from_now(3), status=Booking.Status.CONFIRMED)
        make_booking(self.unit, self.guest, days_from_now(10), days_from_now(12))

        by_status = self.client.get(self.list_url, {"status": "confirmed"})
        by_range = self.client.get(self.list_url, {"from": str(days_from_now(9)), "to": str(days_from_now(20))})

        self.assertEqual(by_status.data["count"], 1)
        self.assertEqual(by_range.data["count"], 1)
        self.assertEqual(by_range.data["results"][0]["check_in"], str(days_from_now(10)))

    def test_retrieve_foreign_booking_is_not_found(self) -> None:
        foreign = make_booking(self.unit, make_user(), days_from_now(1), days_from_now(2))

        resp = self.client.get(reverse("booking-detail", args=[foreign.pk]))

        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_guest_can_change_dates(self) -> None:
        booking = make_booking(self.unit, self.guest, days_from_now(5), days_from_now(7))

        resp = self.client.patch(
            reverse("booking-detail", args=[booking.pk]),
            {"check_out": str(days_from_now(8))},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["booking"]["total_price"], "60000.00")

    def test_empty_update_is_rejected(self) -> None:
        booking = make_booking(self.unit, self.guest, days_from_now(5), days_from_now(7))

        resp = self.client.patch(reverse("booking-detail", args=[booking.pk]), {}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_owner_can_confirm(self) -> None:
        booking = make_booking(self.unit, self.guest, days_from_now(5), days_from_now(7))
        self.client.force_authenticate(self.owner)

        resp = self.client.post(reverse("booking-confirm", args=[booking.pk]))

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["booking"]["status"], Booking.Status.CONFIRMED)

    def test_guest_cannot_confirm(self) -> None:
        booking = make_booking(self.unit, self.guest, days_from_now(5), days_from_now(7))

        resp = self.client.post(reverse("booking-confirm", args=[booking.pk]))

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.PENDING)

    def test_confirming_twice_is_a_conflict(self) -> None:
        booking = make_booking(self.unit, self.guest, days_from_now(5), days_from_now(7),
                               status=Booking.Status.CONFIRMED)
        self.client.force_authenticate(self.owner)

        resp = self.client.post(reverse("booking-confirm", args=[booking.pk]))

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["error_code"], "invalid_state")

    def test_staff_runs_the_stay(self) -> None:
        staff = make_staff(self.property)
        booking = make_booking(self.unit, self.guest, days_from_now(0), days_from_now(1),
                               status=Booking.Status.CONFIRMED)
        self.client.force_authenticate(staff)

        check_in = self.client.post(reverse("booking-check-in", args=[booking.pk]))
        check_out = self.client.post(reverse("booking-check-out", args=[booking.pk]))

        self.assertEqual(check_in.status_code, status.HTTP_200_OK, check_in.data)
        self.assertEqual(check_out.status_code, status.HTTP_200_OK, check_out.data)
        self.assertEqual(check_out.data["booking"]["status"], Booking.Status.COMPLETED)

    def test_complete_before_check_out_date_is_rejected(self) -> None:
        booking = make_booking(self.unit, self.guest, days_from_now(0), days_from_now(2),
                               status=Booking.Status.CONFIRMED)
        self.client.force_authenticate(self.owner)

        resp = self.client.post(reverse("booking-complete", args=[booking.pk]))

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["error_code"], "business_rule")

    def test_guest_can_cancel(self) -> None:
        booking = make_booking(self.unit, self.guest, days_from_now(5), days_from_now(7))

        resp = self.client.post(reverse("booking-cancel", args=[booking.pk]), {"reason": "Plans changed"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)

    def test_cancel_requires_reason(self) -> None:
        booking = make_booking(self.unit, self.guest, days_from_now(5), days_from_now(7))

        resp = self.client.post(reverse("booking-cancel", args=[booking.pk]), {}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("reason", resp.data)

    def test_quote_returns_breakdown_and_availability(self) -> None:
        make_booking(self.unit, check_in=days_from_now(3), check_out=days_from_now(5))

        resp = self.client.post(
            reverse("booking-quote"),
            {
                "unit": str(self.unit.pk),
                "check_in": str(days_from_now(1)),
                "check_out": str(days_from_now(4)),
                "guests_count": 6,
            },
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["base_price"], "60000.00")
        self.assertEqual(resp.data["taxes"], "3000.00")
        self.assertEqual(resp.data["total"], "63000.00")
        self.assertFalse(resp.data["is_available"])
        self.assertFalse(resp.data["fits_capacity"])
