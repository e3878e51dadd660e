"""Booking price calculation.

The base price of a stay depends on the unit's pricing method:

* hourly  - ``base_price * ceil(hours)``
* daily   - ``base_price * nights``
* weekly  - ``base_price * ceil(nights / 7)``
* monthly - ``base_price * months``, a started month counting as a full one
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable
from uuid import UUID

from django.conf import settings  # type: ignore

from apps.properties.models import PropertyService, Unit
from shared.application.exceptions import BusinessRuleError, NotFoundError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def months_between(check_in: date, check_out: date) -> int:
    months = (check_out.year - check_in.year) * 12 + check_out.month - check_in.month
    if check_out.day > check_in.day:
        months += 1
    return months


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: Decimal
    additional_fees: Decimal
    discounts: Decimal
    taxes: Decimal
    total: Decimal
    currency: str
    pricing_method: str
    units_charged: int

    def to_dict(self) -> dict:
        return {
            "base_price": str(self.base_price),
            "additional_fees": str(self.additional_fees),
            "discounts": str(self.discounts),
            "taxes": str(self.taxes),
            "total": str(self.total),
            "currency": self.currency,
            "pricing_method": self.pricing_method,
            "units_charged": self.units_charged,
        }


class PricingService:
    def __init__(self, tax_rate: Decimal | None = None):
        self.tax_rate = tax_rate if tax_rate is not None else Decimal(str(settings.BOOKING_TAX_RATE))

    def _get_unit(self, unit_id: UUID) -> Unit:
        try:
            return Unit.objects.select_related("property").get(pk=unit_id)
        except Unit.DoesNotExist:
            raise NotFoundError("Unit", unit_id)

    @staticmethod
    def charged_units(pricing_method: str, check_in: date, check_out: date) -> int:
        """Number of hours, nights, weeks or months billed for the stay."""
        nights = (check_out - check_in).days
        if pricing_method == Unit.PricingMethod.HOURLY:
            hours = (datetime.combine(check_out, time.min) - datetime.combine(check_in, time.min)).total_seconds() / 3600
            return math.ceil(hours)
        if pricing_method == Unit.PricingMethod.DAILY:
            return nights
        if pricing_method == Unit.PricingMethod.WEEKLY:
            return math.ceil(nights / 7)
        if pricing_method == Unit.PricingMethod.MONTHLY:
            return months_between(check_in, check_out)
        raise BusinessRuleError("UnknownPricingMethod", f"Unknown pricing method: {pricing_method}")

    def calculate_price(self, unit_id: UUID, check_in: date, check_out: date, guests_count: int = 1) -> Decimal:
        """Base price of the stay.

        ``guests_count`` is accepted for call-site symmetry; units are
        priced per stay, not per guest.
        """
        unit = self._get_unit(unit_id)
        quantity = self.charged_units(unit.pricing_method, check_in, check_out)
        price = _money(unit.base_price * quantity)
        logger.debug(f"Price for unit {unit_id} ({unit.pricing_method} x{quantity}): {price}")
        return price

    def calculate_base_price(self, unit_id: UUID, nights: int) -> Decimal:
        unit = self._get_unit(unit_id)
        return _money(unit.base_price * nights)

    def calculate_additional_fees(self, services: Iterable[PropertyService]) -> Decimal:
        return _money(sum((service.price for service in services), Decimal("0")))

    def calculate_taxes(self, amount: Decimal) -> Decimal:
        return _money(amount * self.tax_rate)

    def calculate_total(self, unit_id: UUID, check_in: date, check_out: date, guests_count: int = 1,
                        services: Iterable[PropertyService] = ()) -> Decimal:
        """Amount stored on the booking: stay price plus selected services."""
        return _money(
            self.calculate_price(unit_id, check_in, check_out, guests_count)
            + self.calculate_additional_fees(services)
        )

    def get_pricing_breakdown(
        self,
        unit_id: UUID,
        check_in: date,
        check_out: date,
        guests_count: int = 1,
        services: Iterable[PropertyService] = (),
    ) -> PriceBreakdown:
        unit = self._get_unit(unit_id)
        services = list(services)
        base_price = self.calculate_price(unit_id, check_in, check_out, guests_count)
        fees = self.calculate_additional_fees(services)
        discounts = Decimal("0.00")
        taxes = self.calculate_taxes(base_price + fees - discounts)
        return PriceBreakdown(
            base_price=base_price,
            additional_fees=fees,
            discounts=discounts,
            taxes=taxes,
            total=_money(base_price + fees - discounts + taxes),
            currency=unit.currency,
            pricing_method=unit.pricing_method,
            units_charged=self.charged_units(unit.pricing_method, check_in, check_out),
        )
