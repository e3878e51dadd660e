"""
Payment Command Handlers

- ProcessPaymentHandler: charge through the configured gateway and record
  a successful payment towards a booking
- RefundPaymentHandler: refund part or all of a successful payment
- VoidPaymentHandler: cancel a pending or not yet refunded payment

Every gateway call is logged as a ``PaymentTransaction`` whether it
succeeds or not.
"""

from decimal import Decimal
from typing import Optional
import logging

from django.utils import timezone  # type: ignore

from apps.audit.services import AuditService
from apps.bookings.models import Booking
from shared.application.exceptions import (
    BusinessRuleError,
    ForbiddenError,
    NotFoundError,
    UnavailableError,
    ValidationError,
)
from shared.application.handlers import CommandHandler
from shared.application.result import ErrorCode, ResultDto
from shared.application.uow import DjangoUnitOfWork

from ..gateways import PaymentGateway, PaymentGatewayError, get_payment_gateway
from ..models import Payment, PaymentTransaction
from ..services import PaymentService
from .commands import ProcessPaymentCommand, RefundPaymentCommand, VoidPaymentCommand

logger = logging.getLogger(__name__)


class PaymentCommandHandler(CommandHandler):
    def __init__(
        self,
        gateway: Optional[PaymentGateway] = None,
        payment_service: Optional[PaymentService] = None,
        audit_service: Optional[AuditService] = None,
    ):
        self._gateway = gateway
        self.payments = payment_service or PaymentService()
        self.audit = audit_service or AuditService()

    @property
    def gateway(self) -> PaymentGateway:
        if self._gateway is None:
            self._gateway = get_payment_gateway()
        return self._gateway

    def _log_transaction(self, booking_id, payment, operation, amount, is_success, gateway_transaction_id="",
                         error_message="", payload=None):
        PaymentTransaction.objects.create(
            booking_id=booking_id,
            payment=payment,
            operation=operation,
            gateway=self.gateway.name,
            amount=amount,
            is_success=is_success,
            gateway_transaction_id=gateway_transaction_id,
            error_message=error_message,
            payload=payload or {},
        )

    def _load_payment(self, payment_id) -> Payment:
        payment = (
            Payment.objects.select_related("booking__unit__property")
            .filter(pk=payment_id)
            .first()
        )
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        return payment

    @staticmethod
    def _require_owner_or_admin(payment, current_user, operation: str) -> None:
        if not (current_user.is_admin or current_user.owns_property(payment.booking.unit.property)):
            raise ForbiddenError(f"Only administrators or the property owner can {operation} payments")


class ProcessPaymentHandler(PaymentCommandHandler):

    def _validate(self, command: ProcessPaymentCommand) -> list:
        errors = []
        if not command.booking_id:
            errors.append("Booking id is required")
        if command.amount is None or command.amount <= 0:
            errors.append("Amount must be greater than zero")
        if command.method not in Payment.Method.values:
            errors.append(f"Unknown payment method: {command.method}")
        if not (command.transaction_id or "").strip():
            errors.append("Transaction id is required")
        return errors

    def _handle(self, command: ProcessPaymentCommand, current_user) -> ResultDto:
        logger.info(f"Processing payment of {command.amount} {command.currency} for booking {command.booking_id}")

        errors = self._validate(command)
        if errors:
            return ResultDto.failed(errors, "Invalid payment request")

        booking = (
            Booking.objects.active()
            .select_related("unit__property")
            .filter(pk=command.booking_id)
            .first()
        )
        if booking is None:
            return ResultDto.failure(f"Booking ({command.booking_id}) was not found", ErrorCode.NOT_FOUND)

        is_guest = booking.user_id == current_user.user_id
        if not (is_guest or current_user.is_admin or current_user.manages_property(booking.unit.property)):
            return ResultDto.failure("You are not allowed to pay for this booking", ErrorCode.FORBIDDEN)

        currency = (command.currency or booking.currency).upper()
        if currency != booking.currency:
            return ResultDto.failure(
                f"Payment currency {currency} does not match the booking currency {booking.currency}",
                ErrorCode.BUSINESS_RULE,
            )
        remaining = self.payments.get_remaining_balance(booking.pk, booking.total_price)
        if command.amount > remaining:
            return ResultDto.failure(
                f"Amount {command.amount} exceeds the remaining balance {remaining} {booking.currency}",
                ErrorCode.BUSINESS_RULE,
            )
        if self.payments.transaction_exists(command.transaction_id):
            return ResultDto.failure(
                f"Transaction {command.transaction_id} was already processed",
                ErrorCode.BUSINESS_RULE,
            )

        if booking.status not in (Booking.Status.PENDING, Booking.Status.CONFIRMED):
            return ResultDto.failure(
                f"Payments are only accepted for pending or confirmed bookings (booking is {booking.status})",
                ErrorCode.INVALID_STATE,
            )
        if booking.check_out < timezone.localdate():
            return ResultDto.failure("Cannot pay for a past booking", ErrorCode.INVALID_STATE)

        try:
            charge = self.gateway.charge(command.amount, currency, command.method, str(booking.pk))
        except PaymentGatewayError as e:
            self._log_transaction(booking.pk, None, PaymentTransaction.Operation.CHARGE, command.amount,
                                  is_success=False, error_message=str(e))
            return ResultDto.failure(str(e), ErrorCode.UNAVAILABLE)
        if not charge.is_success:
            self._log_transaction(booking.pk, None, PaymentTransaction.Operation.CHARGE, command.amount,
                                  is_success=False, error_message=charge.error_message, payload=charge.raw)
            return ResultDto.failure(f"Payment was declined: {charge.error_message}", ErrorCode.BUSINESS_RULE)

        with DjangoUnitOfWork() as uow:
            payment = Payment(
                booking=booking,
                amount=command.amount,
                currency=currency,
                method=command.method,
                transaction_id=command.transaction_id.strip(),
                processed_by_id=current_user.user_id,
            )
            payment.mark_successful(charge.transaction_id, performed_by=current_user.user_id)
            payment.save()
            self._log_transaction(booking.pk, payment, PaymentTransaction.Operation.CHARGE, command.amount,
                                  is_success=True, gateway_transaction_id=charge.transaction_id,
                                  payload=charge.raw)
            self.audit.log(
                "ProcessPayment",
                payment.pk,
                notes=f"{command.amount} {currency} ({command.method}) for booking {booking.pk}",
                performed_by=current_user.user_id,
                entity_type="Payment",
            )
            uow.collect_events(payment)

        logger.info(f"Payment {payment.pk} recorded for booking {booking.pk}")
        return ResultDto.ok(payment.pk, "Payment processed successfully")


class RefundPaymentHandler(PaymentCommandHandler):
    """Throw style: guards raise, ``handle`` converts."""

    def _handle(self, command: RefundPaymentCommand, current_user) -> ResultDto:
        logger.info(f"Refunding {command.amount} of payment {command.payment_id}")

        payment = self._load_payment(command.payment_id)
        self._require_owner_or_admin(payment, current_user, "refund")

        reason = (command.reason or "").strip()
        if not reason:
            raise ValidationError(["Refund reason is required"])
        if payment.status not in (Payment.Status.SUCCESSFUL, Payment.Status.PARTIALLY_REFUNDED):
            raise BusinessRuleError("InvalidPaymentStatus", f"A {payment.status} payment cannot be refunded")
        amount = Decimal(command.amount) if command.amount is not None else Decimal("0")
        if amount <= 0:
            raise ValidationError(["Refund amount must be greater than zero"])
        if amount > payment.refundable_amount:
            raise BusinessRuleError(
                "RefundExceedsPayment",
                f"Refund amount {amount} exceeds the refundable remainder {payment.refundable_amount}",
            )

        try:
            result = self.gateway.refund(payment.gateway_transaction_id or payment.transaction_id,
                                         amount, payment.currency)
        except PaymentGatewayError as e:
            self._log_refund(payment, amount, is_success=False, error_message=str(e))
            raise UnavailableError(str(e))
        if not result.is_success:
            self._log_refund(payment, amount, is_success=False, error_message=result.error_message,
                             payload=result.raw)
            raise BusinessRuleError("RefundDeclined", f"Refund was declined: {result.error_message}")

        with DjangoUnitOfWork() as uow:
            old_status = payment.status
            payment.mark_refunded(amount, reason, performed_by=current_user.user_id)
            payment.save(update_fields=["refunded_amount", "refund_reason", "refunded_at", "status", "updated_at"])
            self._log_refund(payment, amount, is_success=True, gateway_transaction_id=result.transaction_id,
                             payload=result.raw)
            self.audit.log_activity(
                entity_type="Payment",
                entity_id=payment.pk,
                action="refund",
                action_name="RefundPayment",
                notes=reason,
                old_values={"status": old_status},
                new_values={"status": payment.status, "refunded_amount": payment.refunded_amount},
                performed_by=current_user.user_id,
            )
            uow.collect_events(payment)

        logger.info(f"Payment {payment.pk} refunded {amount} {payment.currency}")
        return ResultDto.ok(True, "Payment refunded successfully")

    def _log_refund(self, payment, amount, is_success, **kwargs):
        self._log_transaction(payment.booking_id, payment, PaymentTransaction.Operation.REFUND, amount,
                              is_success=is_success, **kwargs)


class VoidPaymentHandler(PaymentCommandHandler):
    """Cancel a payment that was never refunded; the gateway is asked to
    void settled charges first."""

    def _handle(self, command: VoidPaymentCommand, current_user) -> ResultDto:
        logger.info(f"Voiding payment {command.payment_id}")

        if not command.payment_id:
            raise ValidationError(["Payment id is required"])

        payment = self._load_payment(command.payment_id)
        self._require_owner_or_admin(payment, current_user, "void")

        if payment.status == Payment.Status.VOIDED:
            raise BusinessRuleError("AlreadyVoided", "The payment has already been voided")
        if payment.status in (Payment.Status.REFUNDED, Payment.Status.PARTIALLY_REFUNDED):
            raise BusinessRuleError("PaymentRefunded", "A refunded payment cannot be voided")
        if payment.status not in (Payment.Status.PENDING, Payment.Status.SUCCESSFUL):
            raise BusinessRuleError("InvalidPaymentStatus", f"A {payment.status} payment cannot be voided")

        gateway_result = None
        if payment.status == Payment.Status.SUCCESSFUL:
            reference = payment.gateway_transaction_id or payment.transaction_id
            try:
                gateway_result = self.gateway.void(reference)
            except PaymentGatewayError as e:
                self._log_void(payment, is_success=False, error_message=str(e))
                raise UnavailableError(str(e))
            if not gateway_result.is_success:
                self._log_void(payment, is_success=False, error_message=gateway_result.error_message,
                               payload=gateway_result.raw)
                raise BusinessRuleError("VoidDeclined", f"Void was declined: {gateway_result.error_message}")

        with DjangoUnitOfWork() as uow:
            old_status = payment.status
            payment.mark_voided(performed_by=current_user.user_id)
            payment.save(update_fields=["status", "updated_at"])
            if gateway_result is not None:
                self._log_void(payment, is_success=True, gateway_transaction_id=gateway_result.transaction_id,
                               payload=gateway_result.raw)
            self.audit.log_activity(
                entity_type="Payment",
                entity_id=payment.pk,
                action="status_change",
                action_name="VoidPayment",
                notes=f"Payment voided for booking {payment.booking_id}",
                old_values={"status": old_status},
                new_values={"status": payment.status},
                performed_by=current_user.user_id,
            )
            uow.collect_events(payment)

        logger.info(f"Payment {payment.pk} voided")
        return ResultDto.ok(True, "Payment voided successfully")

    def _log_void(self, payment, is_success, **kwargs):
        self._log_transaction(payment.booking_id, payment, PaymentTransaction.Operation.VOID, payment.amount,
                              is_success=is_success, **kwargs)
