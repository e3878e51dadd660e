"""Tests for properties, units and the unit calendar."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.tests.factories import (
    days_from_now,
    make_booking,
    make_property,
    make_staff,
    make_unit,
    make_user,
)
from apps.properties.models import Property, PropertyPolicy, Unit, UnitAvailability
from apps.users.models import User


class PropertyAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = make_user(User.RoleChoices.OWNER)
        self.client_user = make_user()
        self.admin = make_user(User.RoleChoices.ADMIN)
        self.property = make_property(owner=self.owner, name="Dar Al Salam", city="Aden")
        self.unit = make_unit(self.property, max_capacity=2)

    def test_owner_creates_unapproved_property(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.post(
            reverse("property-list"), {"name": "Bayt", "city": "Taiz", "currency": "usd"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        created = Property.objects.get(pk=response.data["id"])
        self.assertEqual(created.owner, self.owner)
        self.assertEqual(created.currency, "USD")
        self.assertFalse(created.is_approved)

    def test_client_cannot_create_property(self) -> None:
        self.client.force_authenticate(self.client_user)

        response = self.client.post(reverse("property-list"), {"name": "Bayt", "city": "Taiz"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_hides_unapproved_properties_of_others(self) -> None:
        make_property(is_approved=False)
        self.client.force_authenticate(self.client_user)

        response = self.client.get(reverse("property-list"), {"city": "Aden"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["units_count"], 1)

    def test_admin_approves(self) -> None:
        pending = make_property(is_approved=False)
        self.client.force_authenticate(self.admin)

        response = self.client.post(reverse("property-approve", args=[pending.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        pending.refresh_from_db()
        self.assertTrue(pending.is_approved)

    def test_owner_cannot_approve(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.post(reverse("property-approve", args=[self.property.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_is_soft(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.delete(reverse("property-detail", args=[self.property.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.property.refresh_from_db()
        self.assertFalse(self.property.is_active)

    def test_policy_upsert(self) -> None:
        self.client.force_authenticate(self.owner)
        url = reverse("property-policies", args=[self.property.pk])

        created = self.client.put(url, {"policy_type": "cancellation", "cancellation_window_days": 3}, format="json")
        updated = self.client.put(url, {"policy_type": "cancellation", "cancellation_window_days": 7}, format="json")

        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        self.assertEqual(updated.status_code, status.HTTP_200_OK, updated.data)
        policy = PropertyPolicy.objects.get(property=self.property)
        self.assertEqual(policy.cancellation_window_days, 7)

    def test_client_cannot_change_policies(self) -> None:
        self.client.force_authenticate(self.client_user)

        response = self.client.put(
            reverse("property-policies", args=[self.property.pk]),
            {"policy_type": "payment", "minimum_deposit_percentage": "20"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_adds_staff_and_services(self) -> None:
        staff_user = make_user(User.RoleChoices.STAFF)
        self.client.force_authenticate(self.owner)

        staff = self.client.post(
            reverse("property-staff", args=[self.property.pk]), {"user": str(staff_user.pk)}, format="json"
        )
        duplicate = self.client.post(
            reverse("property-staff", args=[self.property.pk]), {"user": str(staff_user.pk)}, format="json"
        )
        service = self.client.post(
            reverse("property-services", args=[self.property.pk]), {"name": "Breakfast", "price": "12.50"},
            format="json",
        )

        self.assertEqual(staff.status_code, status.HTTP_201_CREATED, staff.data)
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(service.status_code, status.HTTP_201_CREATED, service.data)

    def test_available_units_by_capacity_and_dates(self) -> None:
        big = make_unit(self.property, max_capacity=6)
        booked = make_unit(self.property, max_capacity=6)
        make_booking(booked, check_in=days_from_now(2), check_out=days_from_now(4))
        self.client.force_authenticate(self.client_user)

        response = self.client.get(
            reverse("property-available-units", args=[self.property.pk]),
            {"check_in": str(days_from_now(1)), "check_out": str(days_from_now(3)), "guests": 4},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([item["id"] for item in response.data], [str(big.pk)])

    def test_property_occupancy_for_staff(self) -> None:
        staff = make_staff(self.property)
        make_booking(self.unit, check_in=days_from_now(1), check_out=days_from_now(3))
        self.client.force_authenticate(staff)

        response = self.client.get(
            reverse("property-occupancy", args=[self.property.pk]),
            {"from": str(days_from_now(1)), "to": str(days_from_now(5))},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["occupancy_rate"], 50.0)

    def test_occupancy_hidden_from_clients(self) -> None:
        self.client.force_authenticate(self.client_user)

        response = self.client.get(
            reverse("property-occupancy", args=[self.property.pk]),
            {"from": str(days_from_now(1)), "to": str(days_from_now(5))},
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UnitAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = make_user(User.RoleChoices.OWNER)
        self.property = make_property(owner=self.owner)
        self.unit = make_unit(self.property)
        self.client.force_authenticate(self.owner)

    def test_owner_creates_unit(self) -> None:
        response = self.client.post(
            reverse("unit-list"),
            {
                "property": str(self.property.pk),
                "name": "Suite",
                "base_price": "250.00",
                "pricing_method": Unit.PricingMethod.WEEKLY,
                "max_capacity": 3,
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["currency"], "YER")

    def test_stranger_cannot_create_unit(self) -> None:
        self.client.force_authenticate(make_user(User.RoleChoices.OWNER))

        response = self.client.post(
            reverse("unit-list"),
            {"property": str(self.property.pk), "name": "Suite", "base_price": "250.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_availability_calendar(self) -> None:
        make_booking(self.unit, check_in=days_from_now(2), check_out=days_from_now(4))

        response = self.client.get(
            reverse("unit-availability", args=[self.unit.pk]),
            {"from": str(days_from_now(1)), "to": str(days_from_now(6))},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertFalse(response.data["is_available"])
        self.assertEqual(
            [(p["start_date"], p["is_available"]) for p in response.data["periods"]],
            [(str(days_from_now(1)), True), (str(days_from_now(2)), False), (str(days_from_now(4)), True)],
        )

    def test_calendar_requires_range(self) -> None:
        response = self.client.get(reverse("unit-availability", args=[self.unit.pk]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unit_occupancy(self) -> None:
        make_booking(self.unit, check_in=days_from_now(1), check_out=days_from_now(2))

        response = self.client.get(
            reverse("unit-occupancy", args=[self.unit.pk]),
            {"from": str(days_from_now(1)), "to": str(days_from_now(5))},
        )

        self.assertEqual(response.data["occupancy_rate"], 25.0)


class UnitAvailabilityAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = make_user(User.RoleChoices.OWNER)
        self.unit = make_unit(make_property(owner=self.owner))
        self.client.force_authenticate(self.owner)
        self.list_url = reverse("unit-availability-list")

    def _block(self, start, end, **extra):
        payload = {"unit": str(self.unit.pk), "start_date": str(start), "end_date": str(end), "reason": "Repairs"}
        payload.update(extra)
        return self.client.post(self.list_url, payload, format="json")

    def test_manual_block(self) -> None:
        response = self._block(days_from_now(1), days_from_now(3), status="maintenance")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        block = UnitAvailability.objects.get(pk=response.data["id"])
        self.assertEqual(block.created_by, self.owner)
        self.assertEqual(block.status, UnitAvailability.AvailabilityStatus.MAINTENANCE)

    def test_overlapping_block_is_rejected(self) -> None:
        self._block(days_from_now(1), days_from_now(3))

        response = self._block(days_from_now(2), days_from_now(5))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inverted_range_is_rejected(self) -> None:
        response = self._block(days_from_now(3), days_from_now(1))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_booking_block_cannot_be_deleted(self) -> None:
        booking = make_booking(self.unit, check_in=days_from_now(1), check_out=days_from_now(2))
        block = UnitAvailability.objects.create(
            unit=self.unit,
            start_date=booking.check_in,
            end_date=booking.check_out,
            status=UnitAvailability.AvailabilityStatus.UNAVAILABLE,
            reason=UnitAvailability.BOOKING_REASON,
            booking=booking,
        )

        response = self.client.delete(reverse("unit-availability-detail", args=[block.pk]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(UnitAvailability.objects.filter(pk=block.pk).exists())

    def test_manual_block_can_be_deleted(self) -> None:
        block_id = self._block(days_from_now(1), days_from_now(3)).data["id"]

        response = self.client.delete(reverse("unit-availability-detail", args=[block_id]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_price_is_not_negative(self) -> None:
        response = self.client.patch(
            reverse("unit-detail", args=[self.unit.pk]), {"base_price": "-1.00"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.unit.refresh_from_db()
        self.assertEqual(self.unit.base_price, Decimal("100.00"))
