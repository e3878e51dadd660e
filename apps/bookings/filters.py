"""FilterSet for the bookings list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """``from``/``to`` select bookings overlapping the range."""

    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    unit = django_filters.UUIDFilter(field_name="unit_id")
    property = django_filters.UUIDFilter(field_name="unit__property_id")
    user = django_filters.UUIDFilter(field_name="user_id")
    date_from = django_filters.DateFilter(field_name="check_out", lookup_expr="gt", label="from")
    date_to = django_filters.DateFilter(field_name="check_in", lookup_expr="lt", label="to")

    class Meta:
        model = Booking
        fields = ["status", "unit", "property", "user"]

    def __init__(self, data=None, *args, **kwargs):
        # Accept ?from=&to= as well as the python-safe names.
        if data is not None:
            data = data.copy()
            for public, internal in (("from", "date_from"), ("to", "date_to")):
                if public in data and internal not in data:
                    data[internal] = data[public]
        super().__init__(data, *args, **kwargs)
