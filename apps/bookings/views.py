"""API views for the booking domain.

Reads go through the ORM; every state change is delegated to a command
handler and its ``ResultDto`` is returned as the response body.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.properties.models import PropertyService
from apps.users.context import CurrentUser
from shared.api import result_response

from .application.command_handlers import (
    CancelBookingHandler,
    CheckInHandler,
    CheckOutHandler,
    CompleteBookingHandler,
    ConfirmBookingHandler,
    CreateBookingHandler,
    UpdateBookingHandler,
)
from .application.commands import (
    CancelBookingCommand,
    CheckInCommand,
    CheckOutCommand,
    CompleteBookingCommand,
    ConfirmBookingCommand,
    CreateBookingCommand,
    UpdateBookingCommand,
)
from .application.queries import bookings_visible_to
from .filters import BookingFilterSet
from .serializers import (
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
    QuoteSerializer,
)
from .services import AvailabilityService, PricingService


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Bookings visible to the requester plus the lifecycle actions."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def get_queryset(self):  # type: ignore
        return bookings_visible_to(self.request.user)

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action in ("update", "partial_update"):
            return BookingUpdateSerializer
        if self.action == "cancel":
            return BookingCancelSerializer
        if self.action == "quote":
            return QuoteSerializer
        return BookingSerializer

    def current_user(self) -> CurrentUser:
        return CurrentUser.from_user(self.request.user)

    def _booking_response(self, result, success_status=status.HTTP_200_OK) -> Response:
        response = result_response(result, success_status)
        if result.success:
            booking = self.get_queryset().filter(pk=self.kwargs.get("pk") or result.data).first()
            if booking is not None:
                response.data["booking"] = BookingSerializer(booking, context=self.get_serializer_context()).data
        return response

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        command = CreateBookingCommand(
            user_id=data.get("user") or request.user.pk,
            unit_id=data["unit"].pk,
            check_in=data["check_in"],
            check_out=data["check_out"],
            guests_count=data["guests_count"],
            service_ids=data.get("services", []),
        )
        result = CreateBookingHandler().handle(command, self.current_user())
        return self._booking_response(result, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        command = UpdateBookingCommand(booking_id=kwargs["pk"], **serializer.validated_data)
        result = UpdateBookingHandler().handle(command, self.current_user())
        return self._booking_response(result)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        return self.update(request, *args, **kwargs)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        result = ConfirmBookingHandler().handle(ConfirmBookingCommand(booking_id=pk), self.current_user())
        return self._booking_response(result)

    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, pk=None):  # type: ignore
        result = CheckInHandler().handle(CheckInCommand(booking_id=pk), self.current_user())
        return self._booking_response(result)

    @action(detail=True, methods=["post"], url_path="check-out")
    def check_out(self, request, pk=None):  # type: ignore
        result = CheckOutHandler().handle(CheckOutCommand(booking_id=pk), self.current_user())
        return self._booking_response(result)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        result = CompleteBookingHandler().handle(CompleteBookingCommand(booking_id=pk), self.current_user())
        return self._booking_response(result)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        command = CancelBookingCommand(booking_id=pk, cancellation_reason=serializer.validated_data["reason"])
        result = CancelBookingHandler().handle(command, self.current_user())
        return self._booking_response(result)

    @action(detail=False, methods=["post"])
    def quote(self, request):  # type: ignore
        """Price breakdown and availability for a prospective stay."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        unit = data["unit"]
        services = PropertyService.objects.filter(
            pk__in=data.get("services", []),
            property_id=unit.property_id,
            is_active=True,
        )
        breakdown = PricingService().get_pricing_breakdown(
            unit.pk, data["check_in"], data["check_out"], data["guests_count"], services
        )
        is_available = AvailabilityService().check_availability(unit.pk, data["check_in"], data["check_out"])
        payload = breakdown.to_dict()
        payload.update({
            "unit_id": str(unit.pk),
            "check_in": data["check_in"].isoformat(),
            "check_out": data["check_out"].isoformat(),
            "is_available": is_available,
            "fits_capacity": data["guests_count"] <= unit.max_capacity,
        })
        return Response(payload)
