"""
Booking Command Handlers

The use cases of the booking lifecycle. Every handler walks the same
pipeline and stops at the first failing stage:

    input -> existence -> authorization -> business rules -> state
          -> persist (one transaction) -> audit -> domain event

Expected failures come back as a failed ``ResultDto``; domain events are
published after commit and turned into notifications by the subscribers
of the notifications app.

Handlers:
- CreateBookingHandler: Reserve a unit (status Pending)
- UpdateBookingHandler: Change dates or guests of a Pending/Confirmed booking
- ConfirmBookingHandler: Pending -> Confirmed
- CheckInHandler: Confirmed -> CheckedIn
- CheckOutHandler: CheckedIn -> Completed (guest leaves)
- CompleteBookingHandler: Confirmed/CheckedIn -> Completed (closed by the property)
- CancelBookingHandler: Pending/Confirmed -> Cancelled
"""

from datetime import datetime, time
from decimal import Decimal
from typing import List, Optional
import logging

from django.utils import timezone  # type: ignore

from apps.audit.services import AuditService
from apps.finances.services import PaymentService
from apps.properties.models import PropertyPolicy, PropertyService, Unit
from apps.users.models import User
from shared.application.exceptions import BusinessRuleError, ForbiddenError, NotFoundError
from shared.application.handlers import CommandHandler
from shared.application.result import ErrorCode, ResultDto
from shared.application.uow import DjangoUnitOfWork

from ..models import Booking
from ..services import AvailabilityService, PricingService
from .commands import (
    CancelBookingCommand,
    CheckInCommand,
    CheckOutCommand,
    CompleteBookingCommand,
    ConfirmBookingCommand,
    CreateBookingCommand,
    UpdateBookingCommand,
)

logger = logging.getLogger(__name__)


def _today():
    return timezone.localdate()


def _load_booking(booking_id) -> Optional[Booking]:
    return (
        Booking.objects.active()
        .select_related("unit__property", "user")
        .filter(pk=booking_id)
        .first()
    )


def _not_found(entity: str, key) -> ResultDto:
    return ResultDto.failure(f"{entity} ({key}) was not found", ErrorCode.NOT_FOUND)


def _forbidden(message: str) -> ResultDto:
    return ResultDto.failure(message, ErrorCode.FORBIDDEN)


def _invalid_state(booking: Booking, expected: str) -> ResultDto:
    return ResultDto.failure(
        f"Booking is {booking.get_status_display().lower()}; only {expected} bookings can be processed",
        ErrorCode.INVALID_STATE,
    )


class BookingCommandHandler(CommandHandler):
    """Shared wiring: services are injected, defaults are the real ones."""

    def __init__(
        self,
        availability_service: Optional[AvailabilityService] = None,
        pricing_service: Optional[PricingService] = None,
        payment_service: Optional[PaymentService] = None,
        audit_service: Optional[AuditService] = None,
    ):
        self.availability = availability_service or AvailabilityService()
        self.pricing = pricing_service or PricingService()
        self.payments = payment_service or PaymentService()
        self.audit = audit_service or AuditService()

    @staticmethod
    def is_guest(booking: Booking, current_user) -> bool:
        return booking.user_id == current_user.user_id

    @staticmethod
    def is_manager(booking: Booking, current_user) -> bool:
        return current_user.is_admin or current_user.manages_property(booking.unit.property)


class CreateBookingHandler(BookingCommandHandler):
    """Reserve a unit for a date range; the booking starts as Pending."""

    def _validate(self, command: CreateBookingCommand) -> List[str]:
        errors = []
        if not command.user_id:
            errors.append("User id is required")
        if not command.unit_id:
            errors.append("Unit id is required")
        if command.check_in is None or command.check_out is None:
            errors.append("Check-in and check-out dates are required")
        else:
            if command.check_in >= command.check_out:
                errors.append("Check-out date must be after check-in date")
            if command.check_in < _today():
                errors.append("Check-in date cannot be in the past")
        if command.guests_count is None or command.guests_count <= 0:
            errors.append("Guests count must be greater than zero")
        return errors

    def _load_services(self, unit: Unit, service_ids) -> List[PropertyService]:
        if not service_ids:
            return []
        services = list(PropertyService.objects.filter(
            pk__in=service_ids,
            property_id=unit.property_id,
            is_active=True,
        ))
        if len(services) != len(set(service_ids)):
            raise BusinessRuleError("InvalidServices", "Some of the selected services are not offered by this property")
        return services

    def _handle(self, command: CreateBookingCommand, current_user) -> ResultDto:
        logger.info(
            f"Creating booking for unit {command.unit_id}, "
            f"user {command.user_id}, dates {command.check_in} - {command.check_out}"
        )

        # Input
        errors = self._validate(command)
        if errors:
            return ResultDto.failed(errors, "Invalid booking request")

        # Existence
        user = User.objects.filter(pk=command.user_id, is_active=True).first()
        if user is None:
            return _not_found("User", command.user_id)
        unit = Unit.objects.select_related("property").filter(pk=command.unit_id, is_active=True).first()
        if unit is None or not unit.property.is_active:
            return _not_found("Unit", command.unit_id)

        # Authorization: book for yourself, or on behalf of a guest as admin/manager
        if command.user_id != current_user.user_id and not (
            current_user.is_admin or current_user.manages_property(unit.property)
        ):
            return _forbidden("You can only create bookings for yourself")

        # Business rules
        if command.guests_count > unit.max_capacity:
            return ResultDto.failure(
                f"Guests count ({command.guests_count}) exceeds unit capacity ({unit.max_capacity})",
                ErrorCode.BUSINESS_RULE,
            )
        has_overlap = (
            Booking.objects.blocking()
            .filter(user_id=command.user_id)
            .overlapping(command.check_in, command.check_out)
            .exists()
        )
        if has_overlap:
            return ResultDto.failure(
                "The user already has a booking that overlaps these dates",
                ErrorCode.BUSINESS_RULE,
            )
        services = self._load_services(unit, command.service_ids)

        with DjangoUnitOfWork() as uow:
            if not self.availability.check_availability(unit.pk, command.check_in, command.check_out):
                return ResultDto.failure("Unit is not available for the selected dates", ErrorCode.UNAVAILABLE)

            total_price = self.pricing.calculate_total(
                unit.pk, command.check_in, command.check_out, command.guests_count, services
            )
            booking = Booking.objects.create(
                user=user,
                unit=unit,
                check_in=command.check_in,
                check_out=command.check_out,
                guests_count=command.guests_count,
                total_price=total_price,
                currency=unit.currency,
                status=Booking.Status.PENDING,
                created_by_id=current_user.user_id,
                updated_by_id=current_user.user_id,
            )
            if services:
                booking.services.set(services)

            block = self.availability.reserve_dates_for_booking(booking, created_by=current_user.user_id)
            self.audit.log(
                "BlockAvailability",
                block.pk,
                notes=f"Unit {unit.pk} blocked {booking.check_in} - {booking.check_out} for booking {booking.pk}",
                performed_by=current_user.user_id,
                entity_type="UnitAvailability",
            )
            self.audit.log(
                "CreateBooking",
                booking.pk,
                notes=f"Booking created for unit {unit.name}, total {total_price} {booking.currency}",
                performed_by=current_user.user_id,
            )

            booking.record_created(performed_by=current_user.user_id)
            uow.collect_events(booking)

        logger.info(f"Booking created successfully: {booking.pk}")
        return ResultDto.ok(booking.pk, "Booking created successfully")


class UpdateBookingHandler(BookingCommandHandler):
    """Change dates and/or guests of a Pending or Confirmed booking and reprice it."""

    def _handle(self, command: UpdateBookingCommand, current_user) -> ResultDto:
        logger.info(f"Updating booking {command.booking_id}")

        booking = _load_booking(command.booking_id)
        if booking is None:
            return _not_found("Booking", command.booking_id)

        if not (self.is_guest(booking, current_user) or self.is_manager(booking, current_user)):
            return _forbidden("You are not allowed to modify this booking")

        if booking.status not in (Booking.Status.PENDING, Booking.Status.CONFIRMED):
            return _invalid_state(booking, "pending or confirmed")

        check_in = command.check_in or booking.check_in
        check_out = command.check_out or booking.check_out
        guests_count = command.guests_count if command.guests_count is not None else booking.guests_count

        errors = []
        if check_in >= check_out:
            errors.append("Check-out date must be after check-in date")
        if command.check_in is not None and command.check_in != booking.check_in and check_in < _today():
            errors.append("Check-in date cannot be in the past")
        if guests_count <= 0:
            errors.append("Guests count must be greater than zero")
        if errors:
            return ResultDto.failed(errors, "Invalid booking update")

        unit = booking.unit
        if guests_count > unit.max_capacity:
            return ResultDto.failure(
                f"Guests count ({guests_count}) exceeds unit capacity ({unit.max_capacity})",
                ErrorCode.BUSINESS_RULE,
            )

        policy = unit.property.get_policy(PropertyPolicy.PolicyType.MODIFICATION)
        if policy and policy.min_hours_before_check_in:
            starts_at = timezone.make_aware(datetime.combine(booking.check_in, time.min))
            hours_left = (starts_at - timezone.now()).total_seconds() / 3600
            if hours_left < policy.min_hours_before_check_in:
                return ResultDto.failure(
                    f"Bookings can only be modified at least {policy.min_hours_before_check_in} hours before check-in",
                    ErrorCode.BUSINESS_RULE,
                )

        with DjangoUnitOfWork() as uow:
            dates_changed = (check_in, check_out) != (booking.check_in, booking.check_out)
            if dates_changed and not self.availability.check_availability(
                unit.pk, check_in, check_out, exclude_booking_id=booking.pk
            ):
                return ResultDto.failure("Unit is not available for the selected dates", ErrorCode.UNAVAILABLE)

            total_price = self.pricing.calculate_total(
                unit.pk, check_in, check_out, guests_count, booking.services.all()
            )
            changes = booking.reschedule(
                check_in, check_out, guests_count, total_price, performed_by=current_user.user_id
            )
            if not changes:
                return ResultDto.ok(True, "Nothing to update")
            booking.save()

            if dates_changed:
                self.availability.move_dates_for_booking(booking)
                self.audit.log(
                    "UpdateAvailability",
                    booking.pk,
                    notes=f"Unit {unit.pk} block moved to {check_in} - {check_out}",
                    performed_by=current_user.user_id,
                    entity_type="UnitAvailability",
                )
            self.audit.log(
                "UpdateBooking",
                booking.pk,
                notes="; ".join(changes),
                performed_by=current_user.user_id,
            )
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} updated: {', '.join(changes)}")
        return ResultDto.ok(True, "Booking updated successfully")


class ConfirmBookingHandler(BookingCommandHandler):
    """Confirm a Pending booking once the payment policy is satisfied."""

    def _check_payment_policy(self, booking: Booking) -> Optional[str]:
        policy = booking.unit.property.get_policy(PropertyPolicy.PolicyType.PAYMENT)
        if policy is None:
            return None
        total_paid = self.payments.get_total_paid(booking.pk)
        if policy.require_full_payment_before_confirmation and total_paid < booking.total_price:
            return f"Full payment is required before confirmation (paid {total_paid} of {booking.total_price})"
        if policy.minimum_deposit_percentage:
            required = (booking.total_price * policy.minimum_deposit_percentage / Decimal("100")).quantize(
                Decimal("0.01")
            )
            if total_paid < required:
                return (
                    f"A deposit of at least {policy.minimum_deposit_percentage}% ({required}) is required "
                    f"before confirmation (paid {total_paid})"
                )
        return None

    def _handle(self, command: ConfirmBookingCommand, current_user) -> ResultDto:
        logger.info(f"Confirming booking {command.booking_id}")

        booking = _load_booking(command.booking_id)
        if booking is None:
            return _not_found("Booking", command.booking_id)

        if not self.is_manager(booking, current_user):
            return _forbidden("Only administrators, property owners or staff can confirm bookings")

        if booking.status != Booking.Status.PENDING:
            return _invalid_state(booking, "pending")

        payment_error = self._check_payment_policy(booking)
        if payment_error:
            return ResultDto.failure(payment_error, ErrorCode.BUSINESS_RULE)
        if booking.check_in < _today():
            return ResultDto.failure("Cannot confirm a booking whose check-in date has passed", ErrorCode.BUSINESS_RULE)

        with DjangoUnitOfWork() as uow:
            if not self.availability.check_availability(
                booking.unit_id, booking.check_in, booking.check_out, exclude_booking_id=booking.pk
            ):
                return ResultDto.failure("Unit is no longer available for these dates", ErrorCode.UNAVAILABLE)

            booking.confirm(performed_by=current_user.user_id)
            booking.save(update_fields=["status", "updated_by", "updated_at"])
            self.audit.log(
                "ConfirmBooking",
                booking.pk,
                notes="Booking confirmed",
                performed_by=current_user.user_id,
            )
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} confirmed successfully")
        return ResultDto.ok(True, "Booking confirmed successfully")


class CheckInHandler(BookingCommandHandler):
    """Register the guest's arrival."""

    def _handle(self, command: CheckInCommand, current_user) -> ResultDto:
        logger.info(f"Checking in booking {command.booking_id}")

        if not command.booking_id:
            return ResultDto.failed(["Booking id is required"], "Invalid check-in request")

        booking = _load_booking(command.booking_id)
        if booking is None:
            return _not_found("Booking", command.booking_id)

        if not (self.is_manager(booking, current_user) or self.is_guest(booking, current_user)):
            return _forbidden("You are not allowed to check in this booking")

        if booking.status in (Booking.Status.CHECKED_IN, Booking.Status.COMPLETED):
            return ResultDto.failure("The guest has already checked in", ErrorCode.BUSINESS_RULE)
        if booking.check_in > _today():
            return ResultDto.failure(
                f"Check-in is not possible before the check-in date ({booking.check_in})",
                ErrorCode.BUSINESS_RULE,
            )

        if booking.status != Booking.Status.CONFIRMED:
            return _invalid_state(booking, "confirmed")

        with DjangoUnitOfWork() as uow:
            booking.check_in_guest(performed_by=current_user.user_id)
            booking.save(update_fields=["status", "actual_check_in", "updated_by", "updated_at"])
            self.audit.log(
                "CheckInBooking",
                booking.pk,
                notes=f"Guest checked in at {booking.actual_check_in.isoformat()}",
                performed_by=current_user.user_id,
            )
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} checked in successfully")
        return ResultDto.ok(True, "Check-in completed successfully")


class CheckOutHandler(BookingCommandHandler):
    """Register the guest's departure; the booking becomes Completed.

    Guards raise application errors; ``handle`` turns them into failed
    results.
    """

    def _handle(self, command: CheckOutCommand, current_user) -> ResultDto:
        logger.info(f"Checking out booking {command.booking_id}")

        booking = _load_booking(command.booking_id)
        if booking is None:
            raise NotFoundError("Booking", command.booking_id)

        if not (self.is_manager(booking, current_user) or self.is_guest(booking, current_user)):
            raise ForbiddenError("You are not allowed to check out this booking")

        if booking.status != Booking.Status.CHECKED_IN:
            raise BusinessRuleError("InvalidStatus", "Only checked-in bookings can be checked out")

        with DjangoUnitOfWork() as uow:
            booking.check_out_guest(performed_by=current_user.user_id)
            booking.save(update_fields=["status", "actual_check_out", "updated_by", "updated_at"])
            self.audit.log_activity(
                entity_type="Booking",
                entity_id=booking.pk,
                action="status_change",
                action_name="CheckOut",
                notes="Guest checked out",
                old_values={"status": Booking.Status.CHECKED_IN},
                new_values={"status": booking.status, "actual_check_out": booking.actual_check_out},
                performed_by=current_user.user_id,
            )
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} checked out successfully")
        return ResultDto.ok(True, "Check-out completed successfully")


class CompleteBookingHandler(BookingCommandHandler):
    """Close a stay from the property side once the check-out date is reached."""

    def _handle(self, command: CompleteBookingCommand, current_user) -> ResultDto:
        logger.info(f"Completing booking {command.booking_id}")

        booking = _load_booking(command.booking_id)
        if booking is None:
            return _not_found("Booking", command.booking_id)

        if not self.is_manager(booking, current_user):
            return _forbidden("Only administrators, property owners or staff can complete bookings")

        if booking.status not in (Booking.Status.CONFIRMED, Booking.Status.CHECKED_IN):
            return _invalid_state(booking, "confirmed or checked-in")

        if _today() < booking.check_out:
            return ResultDto.failure(
                f"The booking cannot be completed before the check-out date ({booking.check_out})",
                ErrorCode.BUSINESS_RULE,
            )
        if booking.actual_check_out is not None:
            return ResultDto.failure("The guest has already checked out", ErrorCode.BUSINESS_RULE)
        if booking.actual_check_in is None:
            return ResultDto.failure("The guest never checked in", ErrorCode.BUSINESS_RULE)

        with DjangoUnitOfWork() as uow:
            booking.complete(performed_by=current_user.user_id)
            booking.save(update_fields=["status", "actual_check_out", "updated_by", "updated_at"])
            self.audit.log(
                "CompleteBooking",
                booking.pk,
                notes="Booking completed",
                performed_by=current_user.user_id,
            )
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} completed successfully")
        return ResultDto.ok(True, "Booking completed successfully")


class CancelBookingHandler(BookingCommandHandler):
    """Cancel a Pending or Confirmed booking and free its dates."""

    def _handle(self, command: CancelBookingCommand, current_user) -> ResultDto:
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.cancellation_reason}")

        errors = []
        if not command.booking_id:
            errors.append("Booking id is required")
        if not (command.cancellation_reason or "").strip():
            errors.append("Cancellation reason is required")
        if errors:
            return ResultDto.failed(errors, "Invalid cancellation request")

        booking = _load_booking(command.booking_id)
        if booking is None:
            return _not_found("Booking", command.booking_id)

        property_obj = booking.unit.property
        if not (
            current_user.is_admin
            or current_user.owns_property(property_obj)
            or self.is_guest(booking, current_user)
        ):
            return _forbidden("You are not allowed to cancel this booking")

        if booking.status == Booking.Status.CANCELLED:
            return ResultDto.failure("The booking is already cancelled", ErrorCode.BUSINESS_RULE)
        if booking.check_out < _today():
            return ResultDto.failure("A past booking cannot be cancelled", ErrorCode.BUSINESS_RULE)
        total_paid = self.payments.get_total_paid(booking.pk)
        if total_paid > 0:
            return ResultDto.failure(
                f"The booking has payments ({total_paid} {booking.currency}); refund them before cancelling",
                ErrorCode.BUSINESS_RULE,
            )

        if booking.status not in (Booking.Status.PENDING, Booking.Status.CONFIRMED):
            return _invalid_state(booking, "pending or confirmed")

        policy = property_obj.get_policy(PropertyPolicy.PolicyType.CANCELLATION)
        if policy and policy.cancellation_window_days:
            # Whole calendar days: check-in is a date, so the day of cancelling counts as day zero.
            days_left = (booking.check_in - _today()).days
            if days_left < policy.cancellation_window_days:
                return ResultDto.failure(
                    f"Bookings can only be cancelled at least {policy.cancellation_window_days} days "
                    f"before check-in",
                    ErrorCode.BUSINESS_RULE,
                )

        reason = command.cancellation_reason.strip()
        with DjangoUnitOfWork() as uow:
            booking.cancel(reason, performed_by=current_user.user_id)
            booking.save(update_fields=["status", "cancellation_reason", "cancelled_at", "updated_by", "updated_at"])
            released = self.availability.release_dates_for_booking(booking)
            unit = booking.unit
            if not unit.is_available:
                unit.is_available = True
                unit.save(update_fields=["is_available", "updated_at"])
            self.audit.log(
                "CancelBooking",
                booking.pk,
                notes=f"Cancelled: {reason}; released {released} availability block(s)",
                performed_by=current_user.user_id,
            )
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} cancelled successfully")
        return ResultDto.ok(True, "Booking cancelled successfully")
