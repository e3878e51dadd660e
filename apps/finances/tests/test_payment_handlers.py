from decimal import Decimal

from django.test import TestCase  # type: ignore

from apps.audit.models import AuditLog
from apps.bookings.models import Booking
from apps.bookings.tests.factories import days_from_now, make_booking, make_payment, make_property, make_unit, make_user
from apps.finances.application.command_handlers import ProcessPaymentHandler, RefundPaymentHandler, VoidPaymentHandler
from apps.finances.application.commands import ProcessPaymentCommand, RefundPaymentCommand, VoidPaymentCommand
from apps.finances.gateways import GatewayResult, OfflinePaymentGateway, PaymentGateway, PaymentGatewayError
from apps.finances.models import Payment, PaymentTransaction
from apps.finances.services import PaymentService
from apps.notifications.models import Notification
from apps.users.context import CurrentUser
from apps.users.models import User
from shared.application.result import ErrorCode


class DecliningGateway(PaymentGateway):
    name = "declining"

    def charge(self, amount, currency, method, reference):
        return GatewayResult(is_success=False, error_message="Insufficient funds", raw={"code": 51})

    def refund(self, gateway_transaction_id, amount, currency):
        return GatewayResult(is_success=False, error_message="Too late", raw={})

    def void(self, gateway_transaction_id):
        return GatewayResult(is_success=False, error_message="Already settled", raw={})


class BrokenGateway(PaymentGateway):
    name = "broken"

    def charge(self, amount, currency, method, reference):
        raise PaymentGatewayError("Payment gateway unavailable: timeout")

    def refund(self, gateway_transaction_id, amount, currency):
        raise PaymentGatewayError("Payment gateway unavailable: timeout")

    def void(self, gateway_transaction_id):
        raise PaymentGatewayError("Payment gateway unavailable: timeout")


class PaymentHandlerTestCase(TestCase):
    def setUp(self):
        self.owner = make_user(User.RoleChoices.OWNER)
        self.guest = make_user()
        self.unit = make_unit(make_property(owner=self.owner))
        self.booking = make_booking(self.unit, self.guest, days_from_now(5), days_from_now(8))  # 300.00 YER

    def as_user(self, user):
        return CurrentUser.from_user(user)


class ProcessPaymentHandlerTests(PaymentHandlerTestCase):
    def pay(self, amount="100.00", user=None, gateway=None, **overrides):
        data = {
            "booking_id": self.booking.pk,
            "amount": Decimal(amount),
            "currency": "YER",
            "method": Payment.Method.CARD,
            "transaction_id": "tx-001",
        }
        data.update(overrides)
        handler = ProcessPaymentHandler(gateway=gateway or OfflinePaymentGateway())
        return handler.handle(ProcessPaymentCommand(**data), self.as_user(user or self.guest))

    def test_records_successful_payment(self):
        with self.captureOnCommitCallbacks(execute=True):
            result = self.pay()

        self.assertTrue(result.success, result.errors)
        payment = Payment.objects.get(pk=result.data)
        self.assertEqual(payment.status, Payment.Status.SUCCESSFUL)
        self.assertTrue(payment.gateway_transaction_id.startswith("offline_"))
        self.assertIsNotNone(payment.paid_at)
        self.assertEqual(payment.processed_by, self.guest)
        tx = PaymentTransaction.objects.get(payment=payment)
        self.assertTrue(tx.is_success)
        self.assertEqual(tx.gateway, "offline")
        self.assertTrue(AuditLog.objects.filter(action_name="ProcessPayment", entity_type="Payment").exists())
        self.assertTrue(
            Notification.objects.filter(user=self.guest, notification_type=Notification.Type.PAYMENT_PROCESSED).exists()
        )

    def test_amount_above_remaining_balance(self):
        make_payment(self.booking, Decimal("250.00"))

        result = self.pay("60.00")

        self.assertEqual(result.error_code, ErrorCode.BUSINESS_RULE)
        self.assertIn("50.00", result.message)

    def test_currency_must_match_booking(self):
        result = self.pay(currency="USD")

        self.assertEqual(result.error_code, ErrorCode.BUSINESS_RULE)

    def test_duplicate_transaction_id(self):
        make_payment(self.booking, Decimal("10.00"), transaction_id="tx-001")

        result = self.pay()

        self.assertEqual(result.error_code, ErrorCode.BUSINESS_RULE)

    def test_invalid_input(self):
        result = self.pay("0", method="crypto", transaction_id=" ")

        self.assertEqual(result.error_code, ErrorCode.VALIDATION)
        self.assertEqual(len(result.errors), 3)

    def test_stranger_cannot_pay(self):
        result = self.pay(user=make_user())

        self.assertEqual(result.error_code, ErrorCode.FORBIDDEN)

    def test_cancelled_booking_does_not_accept_payments(self):
        Booking.objects.filter(pk=self.booking.pk).update(status=Booking.Status.CANCELLED)

        result = self.pay()

        self.assertEqual(result.error_code, ErrorCode.INVALID_STATE)

    def test_declined_charge_is_logged_but_not_stored(self):
        result = self.pay(gateway=DecliningGateway())

        self.assertEqual(result.error_code, ErrorCode.BUSINESS_RULE)
        self.assertFalse(Payment.objects.exists())
        tx = PaymentTransaction.objects.get()
        self.assertFalse(tx.is_success)
        self.assertIsNone(tx.payment)
        self.assertEqual(tx.error_message, "Insufficient funds")

        retry = self.pay()
        self.assertTrue(retry.success, retry.errors)

    def test_unreachable_gateway(self):
        result = self.pay(gateway=BrokenGateway())

        self.assertEqual(result.error_code, ErrorCode.UNAVAILABLE)
        self.assertFalse(Payment.objects.exists())


class RefundPaymentHandlerTests(PaymentHandlerTestCase):
    def setUp(self):
        super().setUp()
        self.payment = make_payment(self.booking, Decimal("200.00"), gateway_transaction_id="gw-1")

    def refund(self, amount="50.00", user=None, reason="Early departure", gateway=None):
        handler = RefundPaymentHandler(gateway=gateway or OfflinePaymentGateway())
        command = RefundPaymentCommand(self.payment.pk, Decimal(amount), reason)
        return handler.handle(command, self.as_user(user or self.owner))

    def test_partial_then_full_refund(self):
        with self.captureOnCommitCallbacks(execute=True):
            first = self.refund("50.00")

        self.assertTrue(first.success, first.errors)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.PARTIALLY_REFUNDED)
        self.assertEqual(self.payment.refundable_amount, Decimal("150.00"))
        self.assertTrue(
            Notification.objects.filter(user=self.guest, notification_type=Notification.Type.PAYMENT_REFUNDED).exists()
        )

        second = self.refund("150.00")

        self.assertTrue(second.success, second.errors)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.REFUNDED)
        self.assertEqual(
            PaymentTransaction.objects.filter(payment=self.payment, operation="refund", is_success=True).count(), 2
        )
        self.assertTrue(
            AuditLog.objects.filter(action_name="RefundPayment", new_values__status=Payment.Status.REFUNDED).exists()
        )

    def test_refund_above_remainder(self):
        result = self.refund("250.00")

        self.assertFalse(result.success)
        self.assertEqual(result.error_code, ErrorCode.BUSINESS_RULE)

    def test_guest_cannot_refund(self):
        result = self.refund(user=self.guest)

        self.assertEqual(result.error_code, ErrorCode.FORBIDDEN)

    def test_reason_required(self):
        result = self.refund(reason="")

        self.assertEqual(result.error_code, ErrorCode.VALIDATION)

    def test_failed_payment_cannot_be_refunded(self):
        Payment.objects.filter(pk=self.payment.pk).update(status=Payment.Status.FAILED)

        result = self.refund()

        self.assertEqual(result.error_code, ErrorCode.BUSINESS_RULE)

    def test_declined_refund_keeps_payment(self):
        result = self.refund(gateway=DecliningGateway())

        self.assertFalse(result.success)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.SUCCESSFUL)
        self.assertTrue(PaymentTransaction.objects.filter(payment=self.payment, is_success=False).exists())

    def test_unreachable_gateway_is_unavailable(self):
        result = self.refund(gateway=BrokenGateway())

        self.assertFalse(result.success)
        self.assertEqual(result.error_code, ErrorCode.UNAVAILABLE)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.refunded_amount, Decimal("0.00"))
        self.assertTrue(
            PaymentTransaction.objects.filter(payment=self.payment, operation="refund", is_success=False).exists()
        )

    def test_missing_payment(self):
        handler = RefundPaymentHandler(gateway=OfflinePaymentGateway())
        command = RefundPaymentCommand("00000000-0000-0000-0000-000000000000", Decimal("1.00"), "x")

        result = handler.handle(command, self.as_user(self.owner))

        self.assertEqual(result.error_code, ErrorCode.NOT_FOUND)


class VoidPaymentHandlerTests(PaymentHandlerTestCase):
    def setUp(self):
        super().setUp()
        self.payment = make_payment(self.booking, Decimal("200.00"), gateway_transaction_id="gw-1")

    def void(self, user=None, gateway=None, payment=None):
        handler = VoidPaymentHandler(gateway=gateway or OfflinePaymentGateway())
        command = VoidPaymentCommand((payment or self.payment).pk)
        return handler.handle(command, self.as_user(user or self.owner))

    def test_owner_voids_successful_payment(self):
        with self.captureOnCommitCallbacks(execute=True):
            result = self.void()

        self.assertTrue(result.success, result.errors)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.VOIDED)
        self.assertTrue(
            PaymentTransaction.objects.filter(payment=self.payment, operation="void", is_success=True).exists()
        )
        self.assertTrue(
            AuditLog.objects.filter(action_name="VoidPayment", entity_id=str(self.payment.pk)).exists()
        )
        self.assertTrue(
            Notification.objects.filter(user=self.guest, notification_type=Notification.Type.PAYMENT_VOIDED).exists()
        )
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)

    def test_pending_payment_is_voided_without_gateway(self):
        pending = make_payment(self.booking, Decimal("50.00"), status=Payment.Status.PENDING)

        result = self.void(payment=pending, gateway=BrokenGateway())

        self.assertTrue(result.success, result.errors)
        pending.refresh_from_db()
        self.assertEqual(pending.status, Payment.Status.VOIDED)
        self.assertFalse(PaymentTransaction.objects.filter(payment=pending).exists())

    def test_already_voided(self):
        Payment.objects.filter(pk=self.payment.pk).update(status=Payment.Status.VOIDED)

        result = self.void()

        self.assertEqual(result.error_code, ErrorCode.BUSINESS_RULE)
        self.assertIn("already been voided", result.message)

    def test_refunded_payment_cannot_be_voided(self):
        for status in (Payment.Status.REFUNDED, Payment.Status.PARTIALLY_REFUNDED):
            Payment.objects.filter(pk=self.payment.pk).update(status=status)

            result = self.void()

            self.assertEqual(result.error_code, ErrorCode.BUSINESS_RULE, status)

    def test_failed_payment_cannot_be_voided(self):
        Payment.objects.filter(pk=self.payment.pk).update(status=Payment.Status.FAILED)

        self.assertEqual(self.void().error_code, ErrorCode.BUSINESS_RULE)

    def test_guest_cannot_void(self):
        self.assertEqual(self.void(user=self.guest).error_code, ErrorCode.FORBIDDEN)

    def test_declined_void_keeps_payment(self):
        result = self.void(gateway=DecliningGateway())

        self.assertEqual(result.error_code, ErrorCode.BUSINESS_RULE)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.SUCCESSFUL)

    def test_unreachable_gateway_is_unavailable(self):
        result = self.void(gateway=BrokenGateway())

        self.assertEqual(result.error_code, ErrorCode.UNAVAILABLE)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.SUCCESSFUL)

    def test_voided_payment_no_longer_counts_as_paid(self):
        self.void()

        self.assertEqual(PaymentService().get_total_paid(self.booking.pk), Decimal("0.00"))
