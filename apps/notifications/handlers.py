"""
Domain event subscribers that notify guests and property owners.

Registered on the global message bus by ``NotificationsConfig.ready()``.
They run after the transaction that produced the event has committed.
"""

import logging

from apps.bookings.domain import events as booking_events
from apps.bookings.models import Booking
from apps.finances.domain import events as payment_events
from shared.application.message_bus import message_bus

from .models import Notification
from .services import NotificationRequest, NotificationService

logger = logging.getLogger(__name__)

notification_service = NotificationService()


def _load_booking(booking_id):
    try:
        return Booking.objects.select_related("unit__property").get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.warning(f"Booking {booking_id} not found while sending notifications")
        return None


def _describe(booking: Booking) -> str:
    return f"{booking.unit.name} at {booking.unit.property.name}, {booking.check_in} - {booking.check_out}"


def on_booking_created(event: booking_events.BookingCreated) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.notify_booking_parties(
        booking,
        Notification.Type.BOOKING_CREATED,
        guest_title="Booking received",
        guest_message=f"Your booking for {_describe(booking)} was created and awaits confirmation. "
                      f"Total: {event.total_price} {event.currency}.",
        owner_title="New booking request",
        owner_message=f"A new booking for {_describe(booking)} awaits your confirmation.",
    )


def on_booking_updated(event: booking_events.BookingUpdated) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.notify_booking_parties(
        booking,
        Notification.Type.BOOKING_UPDATED,
        guest_title="Booking updated",
        guest_message=f"Your booking was updated: {_describe(booking)}. New total: {booking.total_price} "
                      f"{booking.currency}.",
    )


def on_booking_confirmed(event: booking_events.BookingConfirmed) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.notify_booking_parties(
        booking,
        Notification.Type.BOOKING_CONFIRMED,
        guest_title="Booking confirmed",
        guest_message=f"Your booking for {_describe(booking)} is confirmed.",
        owner_title="Booking confirmed",
        owner_message=f"Booking {booking.pk} for {_describe(booking)} was confirmed.",
    )


def on_booking_checked_in(event: booking_events.BookingCheckedIn) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.notify_booking_parties(
        booking,
        Notification.Type.BOOKING_CHECKED_IN,
        guest_title="Welcome!",
        guest_message=f"You are checked in to {booking.unit.name}. Check-out is on {booking.check_out}.",
        owner_title="Guest checked in",
        owner_message=f"The guest of booking {booking.pk} checked in to {booking.unit.name}.",
    )


def on_booking_checked_out(event: booking_events.BookingCheckedOut) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.notify_booking_parties(
        booking,
        Notification.Type.BOOKING_CHECKED_OUT,
        guest_title="Thank you for staying with us",
        guest_message=f"You have checked out of {booking.unit.name}.",
        owner_title="Guest checked out",
        owner_message=f"The guest of booking {booking.pk} checked out of {booking.unit.name}.",
    )


def on_booking_completed(event: booking_events.BookingCompleted) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.notify_booking_parties(
        booking,
        Notification.Type.BOOKING_COMPLETED,
        guest_title="Booking completed",
        guest_message=f"Your stay at {_describe(booking)} is complete.",
        owner_title="Booking completed",
        owner_message=f"Booking {booking.pk} for {_describe(booking)} is complete.",
    )


def on_booking_cancelled(event: booking_events.BookingCancelled) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.notify_booking_parties(
        booking,
        Notification.Type.BOOKING_CANCELLED,
        guest_title="Booking cancelled",
        guest_message=f"Your booking for {_describe(booking)} was cancelled. Reason: {event.reason}",
        owner_title="Booking cancelled",
        owner_message=f"Booking {booking.pk} for {_describe(booking)} was cancelled; the dates are free again.",
    )


def on_payment_processed(event: payment_events.PaymentProcessed) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.send(NotificationRequest(
        user_id=booking.user_id,
        title="Payment received",
        message=f"We received {event.amount} {event.currency} for your booking at {_describe(booking)}.",
        notification_type=Notification.Type.PAYMENT_PROCESSED,
        data={"booking_id": str(booking.pk), "payment_id": str(event.payment_id)},
    ))


def on_payment_refunded(event: payment_events.PaymentRefunded) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.send(NotificationRequest(
        user_id=booking.user_id,
        title="Payment refunded",
        message=f"{event.amount} {event.currency} was refunded for your booking at {_describe(booking)}. "
                f"Reason: {event.reason}",
        notification_type=Notification.Type.PAYMENT_REFUNDED,
        data={"booking_id": str(booking.pk), "payment_id": str(event.payment_id)},
    ))


def on_payment_voided(event: payment_events.PaymentVoided) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    notification_service.send(NotificationRequest(
        user_id=booking.user_id,
        title="Payment voided",
        message=f"Your payment of {event.amount} {event.currency} for {_describe(booking)} has been voided.",
        notification_type=Notification.Type.PAYMENT_VOIDED,
        data={"booking_id": str(booking.pk), "payment_id": str(event.payment_id)},
    ))


SUBSCRIPTIONS = (
    (booking_events.BookingCreated, on_booking_created),
    (booking_events.BookingUpdated, on_booking_updated),
    (booking_events.BookingConfirmed, on_booking_confirmed),
    (booking_events.BookingCheckedIn, on_booking_checked_in),
    (booking_events.BookingCheckedOut, on_booking_checked_out),
    (booking_events.BookingCompleted, on_booking_completed),
    (booking_events.BookingCancelled, on_booking_cancelled),
    (payment_events.PaymentProcessed, on_payment_processed),
    (payment_events.PaymentRefunded, on_payment_refunded),
    (payment_events.PaymentVoided, on_payment_voided),
)


def register(bus=message_bus) -> None:
    for event_type, handler in SUBSCRIPTIONS:
        bus.register_event_handler(event_type, handler)
