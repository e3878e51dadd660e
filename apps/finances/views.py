"""API views for payments.

Listing is limited to payments of bookings the requester can see.
Charging, refunding and voiding go through the payment command handlers.
"""

from __future__ import annotations

import django_filters  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore

from apps.bookings.models import Booking
from apps.users.context import CurrentUser
from shared.api import result_response

from .application.command_handlers import ProcessPaymentHandler, RefundPaymentHandler, VoidPaymentHandler
from .application.commands import ProcessPaymentCommand, RefundPaymentCommand, VoidPaymentCommand
from .models import Payment
from .serializers import PaymentSerializer, ProcessPaymentSerializer, RefundPaymentSerializer


class PaymentFilterSet(django_filters.FilterSet):
    booking = django_filters.UUIDFilter(field_name="booking_id")

    class Meta:
        model = Payment
        fields = ["booking", "status", "method"]


class PaymentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Payments of visible bookings; ``POST`` charges, ``refund`` gives money back, ``void`` cancels."""

    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_class = PaymentFilterSet
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def get_queryset(self):  # type: ignore
        visible = Booking.objects.visible_to(self.request.user).values("pk")
        return (
            Payment.objects.filter(booking_id__in=visible)
            .select_related("booking")
            .prefetch_related("transactions")
        )

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ProcessPaymentSerializer
        if self.action == "refund":
            return RefundPaymentSerializer
        return PaymentSerializer

    def _payment_response(self, result, payment_id, success_status=status.HTTP_200_OK):
        response = result_response(result, success_status)
        if result.success:
            payment = self.get_queryset().filter(pk=payment_id).first()
            if payment is not None:
                response.data["payment"] = PaymentSerializer(payment, context=self.get_serializer_context()).data
        return response

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        command = ProcessPaymentCommand(
            booking_id=data["booking"].pk,
            amount=data["amount"],
            currency=data.get("currency") or data["booking"].currency,
            method=data["method"],
            transaction_id=data["transaction_id"],
        )
        result = ProcessPaymentHandler().handle(command, CurrentUser.from_user(request.user))
        return self._payment_response(result, result.data, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def refund(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        command = RefundPaymentCommand(payment_id=pk, **serializer.validated_data)
        result = RefundPaymentHandler().handle(command, CurrentUser.from_user(request.user))
        return self._payment_response(result, pk)

    @action(detail=True, methods=["post"])
    def void(self, request, pk=None):  # type: ignore
        result = VoidPaymentHandler().handle(VoidPaymentCommand(payment_id=pk), CurrentUser.from_user(request.user))
        return self._payment_response(result, pk)
