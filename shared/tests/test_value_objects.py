from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from shared.domain.value_objects import DateRange, Money


def test_money_arithmetic_keeps_currency():
    total = Money(Decimal("10.50"), "USD") + Money("4.50", "USD")

    assert total == Money(Decimal("15.00"), "USD")
    assert (total * 2).amount == Decimal("30.00")
    assert str(Money(Decimal("1234.5"), "YER")) == "1,234.50 YER"


def test_money_rejects_mixed_currencies_and_negatives():
    with pytest.raises(ValueError):
        Money(Decimal("1"), "USD") + Money(Decimal("1"), "YER")
    with pytest.raises(ValueError):
        Money(Decimal("-1"))
    with pytest.raises(ValueError):
        Money(Decimal("1"), "XXX")


def test_money_rounding():
    assert Money(Decimal("2.345")).rounded().amount == Decimal("2.35")


def test_adjacent_ranges_do_not_overlap():
    stay = DateRange(date(2030, 1, 25), date(2030, 1, 28))

    assert stay.overlaps_with(DateRange(date(2030, 1, 27), date(2030, 1, 30)))
    assert not stay.overlaps_with(DateRange(date(2030, 1, 28), date(2030, 1, 31)))
    assert not stay.contains(date(2030, 1, 28))
    assert len(stay) == 3


def test_range_intersection_and_days():
    stay = DateRange(date(2030, 1, 1), date(2030, 1, 10))
    window = DateRange(date(2030, 1, 8), date(2030, 1, 20))

    clipped = stay.intersection(window)

    assert clipped == DateRange(date(2030, 1, 8), date(2030, 1, 10))
    assert list(clipped.days()) == [date(2030, 1, 8), date(2030, 1, 9)]
    assert stay.intersection(DateRange(date(2030, 2, 1), date(2030, 2, 2))) is None


def test_empty_range_is_invalid():
    with pytest.raises(ValueError):
        DateRange(date(2030, 1, 1), date(2030, 1, 1))
