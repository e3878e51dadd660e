"""Integration tests for payment API endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.tests.factories import days_from_now, make_booking, make_payment, make_property, make_unit, make_user
from apps.finances.models import Payment
from apps.users.models import User


class PaymentAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = make_user(User.RoleChoices.OWNER)
        self.guest = make_user()
        self.booking = make_booking(make_unit(make_property(owner=self.owner)), self.guest,
                                    days_from_now(3), days_from_now(5))
        self.client.force_authenticate(self.guest)
        self.list_url = reverse("payment-list")

    def test_guest_pays_for_booking(self) -> None:
        resp = self.client.post(
            self.list_url,
            {"booking": str(self.booking.pk), "amount": "120.00", "method": "cash", "transaction_id": "desk-1"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        self.assertEqual(resp.data["payment"]["status"], Payment.Status.SUCCESSFUL)
        self.assertEqual(resp.data["payment"]["currency"], "YER")
        self.assertEqual(len(resp.data["payment"]["transactions"]), 1)

    def test_overpayment_is_rejected(self) -> None:
        resp = self.client.post(
            self.list_url,
            {"booking": str(self.booking.pk), "amount": "500.00", "method": "cash", "transaction_id": "desk-1"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["error_code"], "business_rule")

    def test_list_is_limited_to_visible_bookings(self) -> None:
        mine = make_payment(self.booking, Decimal("50.00"))
        make_payment(make_booking(), Decimal("70.00"))

        resp = self.client.get(self.list_url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([item["id"] for item in resp.data["results"]], [str(mine.pk)])

    def test_owner_refunds(self) -> None:
        payment = make_payment(self.booking, Decimal("200.00"))
        self.client.force_authenticate(self.owner)

        resp = self.client.post(
            reverse("payment-refund", args=[payment.pk]),
            {"amount": "200.00", "reason": "Property closed"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["payment"]["status"], Payment.Status.REFUNDED)

    def test_guest_cannot_refund(self) -> None:
        payment = make_payment(self.booking, Decimal("200.00"))

        resp = self.client.post(
            reverse("payment-refund", args=[payment.pk]),
            {"amount": "10.00", "reason": "Changed my mind"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_voids_payment(self) -> None:
        payment = make_payment(self.booking, Decimal("200.00"))
        self.client.force_authenticate(self.owner)

        resp = self.client.post(reverse("payment-void", args=[payment.pk]))

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["payment"]["status"], Payment.Status.VOIDED)

    def test_voiding_twice_is_rejected(self) -> None:
        payment = make_payment(self.booking, Decimal("200.00"), status=Payment.Status.VOIDED)
        self.client.force_authenticate(self.owner)

        resp = self.client.post(reverse("payment-void", args=[payment.pk]))

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["error_code"], "business_rule")
