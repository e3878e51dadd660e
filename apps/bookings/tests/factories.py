"""Object builders shared by the test suites of the domain apps."""

from __future__ import annotations

import itertools
from datetime import date, timedelta
from decimal import Decimal

from django.utils import timezone

from apps.bookings.models import Booking
from apps.finances.models import Payment
from apps.properties.models import Property, PropertyPolicy, PropertyStaff, Unit
from apps.users.models import User

_seq = itertools.count(1)


def today() -> date:
    return timezone.localdate()


def days_from_now(days: int) -> date:
    return today() + timedelta(days=days)


def make_user(role: str = User.RoleChoices.CLIENT, **kwargs) -> User:
    n = next(_seq)
    kwargs.setdefault("email", f"{role}{n}@example.com")
    kwargs.setdefault("full_name", f"{role.title()} {n}")
    return User.objects.create_user(password="Secret-pass-123", role=role, **kwargs)


def make_property(owner: User | None = None, **kwargs) -> Property:
    owner = owner or make_user(User.RoleChoices.OWNER)
    kwargs.setdefault("name", f"Hotel {next(_seq)}")
    kwargs.setdefault("city", "Sanaa")
    kwargs.setdefault("currency", "YER")
    kwargs.setdefault("is_approved", True)
    return Property.objects.create(owner=owner, **kwargs)


def make_unit(property_obj: Property | None = None, **kwargs) -> Unit:
    property_obj = property_obj or make_property()
    kwargs.setdefault("name", f"Room {next(_seq)}")
    kwargs.setdefault("base_price", Decimal("100.00"))
    kwargs.setdefault("pricing_method", Unit.PricingMethod.DAILY)
    kwargs.setdefault("max_capacity", 4)
    return Unit.objects.create(property=property_obj, **kwargs)


def make_staff(property_obj: Property, user: User | None = None) -> User:
    user = user or make_user(User.RoleChoices.STAFF)
    PropertyStaff.objects.create(property=property_obj, user=user, position="Reception")
    return user


def make_policy(property_obj: Property, policy_type: str, **kwargs) -> PropertyPolicy:
    return PropertyPolicy.objects.create(property=property_obj, policy_type=policy_type, **kwargs)


def make_booking(
    unit: Unit | None = None,
    user: User | None = None,
    check_in: date | None = None,
    check_out: date | None = None,
    status: str = Booking.Status.PENDING,
    **kwargs,
) -> Booking:
    """Insert a booking row directly, bypassing the command handlers."""
    unit = unit or make_unit()
    user = user or make_user()
    check_in = check_in or days_from_now(10)
    check_out = check_out or check_in + timedelta(days=2)
    kwargs.setdefault("total_price", unit.base_price * (check_out - check_in).days)
    kwargs.setdefault("currency", unit.currency)
    return Booking.objects.create(
        unit=unit,
        user=user,
        check_in=check_in,
        check_out=check_out,
        status=status,
        **kwargs,
    )


def make_payment(booking: Booking, amount: Decimal, status: str = Payment.Status.SUCCESSFUL, **kwargs) -> Payment:
    kwargs.setdefault("transaction_id", f"tx-{next(_seq)}")
    kwargs.setdefault("method", Payment.Method.CASH)
    return Payment.objects.create(
        booking=booking,
        amount=amount,
        currency=booking.currency,
        status=status,
        **kwargs,
    )
