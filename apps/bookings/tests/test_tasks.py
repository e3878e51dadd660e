from __future__ import annotations

from datetime import timedelta
from unittest import mock

import pytest
from django.core import mail  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.tasks import reminder_window, send_check_in_reminders
from apps.notifications.models import Notification
from apps.notifications.tasks import deliver_notification_email

from .factories import days_from_now, make_booking, make_unit, make_user


@pytest.mark.django_db(transaction=True)
def test_reminds_confirmed_arrivals_of_tomorrow_once():
    unit = make_unit()
    guest = make_user()
    tomorrow = make_booking(unit, guest, days_from_now(1), days_from_now(3), status=Booking.Status.CONFIRMED)
    make_booking(unit, make_user(), days_from_now(4), days_from_now(5), status=Booking.Status.CONFIRMED)
    make_booking(make_unit(), make_user(), days_from_now(1), days_from_now(2))

    first = send_check_in_reminders()
    second = send_check_in_reminders()

    assert first == {"sent": 1, "skipped": 0}
    assert second == {"sent": 0, "skipped": 1}
    reminder = Notification.objects.get(notification_type=Notification.Type.CHECK_IN_REMINDER)
    assert reminder.user == guest
    assert reminder.data["booking_id"] == str(tomorrow.pk)
    assert [m.to for m in mail.outbox] == [[guest.email]]


@pytest.mark.django_db(transaction=True)
def test_reminder_window_follows_configured_hours(settings):
    settings.BOOKING_CHECKIN_REMINDER_HOURS = 72
    unit = make_unit()
    for days in (1, 2, 3):
        make_booking(unit, make_user(), days_from_now(days), days_from_now(days) + timedelta(days=1),
                     status=Booking.Status.CONFIRMED)
    make_booking(unit, make_user(), days_from_now(5), days_from_now(6), status=Booking.Status.CONFIRMED)

    assert send_check_in_reminders() == {"sent": 3, "skipped": 0}
    assert send_check_in_reminders(hours=24) == {"sent": 0, "skipped": 1}


def test_short_horizon_still_covers_tomorrow():
    first_day, last_day = reminder_window(1)

    assert first_day == last_day == days_from_now(1)


@pytest.mark.django_db(transaction=True)
def test_broker_outage_does_not_stop_reminders():
    make_booking(make_unit(), make_user(), days_from_now(1), days_from_now(2), status=Booking.Status.CONFIRMED)
    make_booking(make_unit(), make_user(), days_from_now(1), days_from_now(3), status=Booking.Status.CONFIRMED)

    with mock.patch.object(deliver_notification_email, "delay", side_effect=ConnectionError("broker down")):
        result = send_check_in_reminders()

    assert result == {"sent": 2, "skipped": 0}
    assert Notification.objects.filter(notification_type=Notification.Type.CHECK_IN_REMINDER).count() == 2
    assert mail.outbox == []
