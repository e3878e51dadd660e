"""Property API views."""

from __future__ import annotations

from django.db import models  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.services import AvailabilityService
from apps.users.permissions import is_platform_admin

from .models import Property, PropertyStaff, Unit, UnitAvailability
from .serializers import (
    DateRangeQuerySerializer,
    PropertyPolicySerializer,
    PropertySerializer,
    PropertyServiceSerializer,
    PropertyStaffSerializer,
    PropertyWriteSerializer,
    StayQuerySerializer,
    UnitAvailabilitySerializer,
    UnitSerializer,
)


def can_manage_property(user, property_obj: Property) -> bool:
    """Administrators, the owner and active staff members."""
    if is_platform_admin(user):
        return True
    if property_obj.owner_id == user.id:
        return True
    return property_obj.staff.filter(user=user, is_active=True).exists()


def can_edit_property(user, property_obj: Property) -> bool:
    return is_platform_admin(user) or property_obj.owner_id == user.id


class IsPropertyOwnerOrAdmin(permissions.BasePermission):
    """Owner or platform admin may write; any authenticated user may read."""

    def has_permission(self, request, view):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        if getattr(view, "action", None) == "create":
            return is_platform_admin(user) or user.is_owner()
        return True

    def has_object_permission(self, request, view, obj: Property):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return can_edit_property(request.user, obj)


def _visible_properties(user):
    qs = Property.objects.select_related("owner").prefetch_related("policies")
    if is_platform_admin(user):
        return qs
    return qs.filter(
        models.Q(is_active=True, is_approved=True)
        | models.Q(owner=user)
        | models.Q(staff__user=user, staff__is_active=True)
    ).distinct()


class PropertyViewSet(viewsets.ModelViewSet):
    """Properties plus their policies, staff, services and calendar queries."""

    permission_classes = [IsPropertyOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ["city", "is_active", "is_approved", "owner"]
    ordering_fields = ["name", "city", "created_at"]
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def get_queryset(self):  # type: ignore
        return _visible_properties(self.request.user)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer

    def perform_create(self, serializer):  # type: ignore
        serializer.save(owner=self.request.user)

    def perform_destroy(self, instance: Property):  # type: ignore
        # Units and bookings keep referring to the property.
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])

    def _require_manager(self, property_obj: Property) -> None:
        if not can_manage_property(self.request.user, property_obj):
            self.permission_denied(self.request, message="You do not manage this property.")

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated])
    def approve(self, request, pk=None):  # type: ignore
        if not is_platform_admin(request.user):
            return Response({"detail": "Only administrators can approve properties."},
                            status=status.HTTP_403_FORBIDDEN)
        property_obj = self.get_object()
        property_obj.is_approved = True
        property_obj.save(update_fields=["is_approved", "updated_at"])
        return Response(PropertySerializer(property_obj, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["get", "put"], serializer_class=PropertyPolicySerializer)
    def policies(self, request, pk=None):  # type: ignore
        """List policies or upsert one policy by ``policy_type``."""
        property_obj = self.get_object()
        if request.method == "GET":
            serializer = PropertyPolicySerializer(property_obj.policies.all(), many=True)
            return Response(serializer.data)

        self._require_manager(property_obj)
        instance = property_obj.policies.filter(policy_type=request.data.get("policy_type")).first()
        serializer = PropertyPolicySerializer(instance, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(property=property_obj)
        return Response(serializer.data, status=status.HTTP_200_OK if instance else status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "post"], serializer_class=PropertyStaffSerializer)
    def staff(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        if request.method == "GET":
            self._require_manager(property_obj)
            serializer = PropertyStaffSerializer(property_obj.staff.select_related("user"), many=True)
            return Response(serializer.data)

        if not can_edit_property(request.user, property_obj):
            self.permission_denied(request, message="Only the owner can manage staff.")
        serializer = PropertyStaffSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if PropertyStaff.objects.filter(property=property_obj, user=serializer.validated_data["user"]).exists():
            raise serializers.ValidationError({"user": "This user is already a staff member of the property."})
        serializer.save(property=property_obj)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "post"], serializer_class=PropertyServiceSerializer)
    def services(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        if request.method == "GET":
            serializer = PropertyServiceSerializer(property_obj.services.filter(is_active=True), many=True)
            return Response(serializer.data)

        self._require_manager(property_obj)
        serializer = PropertyServiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(property=property_obj)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="available-units")
    def available_units(self, request, pk=None):  # type: ignore
        """Units of the property free for ``check_in``..``check_out`` and ``guests``."""
        property_obj = self.get_object()
        query = StayQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        unit_ids = AvailabilityService().get_available_units_in_property(
            property_obj.pk,
            query.validated_data["check_in"],
            query.validated_data["check_out"],
            query.validated_data["guests"],
        )
        units = Unit.objects.filter(pk__in=unit_ids).select_related("property")
        return Response(UnitSerializer(units, many=True, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["get"])
    def occupancy(self, request, pk=None):  # type: ignore
        property_obj = self.get_object()
        self._require_manager(property_obj)
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        rate = AvailabilityService().calculate_property_occupancy_rate(
            property_obj.pk, query.validated_data["date_from"], query.validated_data["date_to"]
        )
        return Response({
            "property_id": str(property_obj.pk),
            "from": query.validated_data["date_from"],
            "to": query.validated_data["date_to"],
            "occupancy_rate": rate,
        })


class UnitViewSet(viewsets.ModelViewSet):
    """Units; writes are limited to managers of the unit's property."""

    serializer_class = UnitSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ["property", "pricing_method", "is_active"]
    ordering_fields = ["name", "base_price", "max_capacity"]
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def get_queryset(self):  # type: ignore
        visible = _visible_properties(self.request.user).values("pk")
        return Unit.objects.filter(property_id__in=visible).select_related("property")

    def _check_manage(self, property_obj: Property) -> None:
        if not can_manage_property(self.request.user, property_obj):
            self.permission_denied(self.request, message="You do not manage this property.")

    def perform_create(self, serializer):  # type: ignore
        self._check_manage(serializer.validated_data["property"])
        serializer.save()

    def perform_update(self, serializer):  # type: ignore
        self._check_manage(serializer.instance.property)
        if "property" in serializer.validated_data:
            self._check_manage(serializer.validated_data["property"])
        serializer.save()

    def perform_destroy(self, instance: Unit):  # type: ignore
        self._check_manage(instance.property)
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):  # type: ignore
        """Whether the unit is free for the range, plus free/busy periods."""
        unit = self.get_object()
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        date_from = query.validated_data["date_from"]
        date_to = query.validated_data["date_to"]
        service = AvailabilityService()
        return Response({
            "unit_id": str(unit.pk),
            "from": date_from,
            "to": date_to,
            "is_available": service.check_availability(unit.pk, date_from, date_to),
            "periods": [period.to_dict() for period in service.get_unit_availability_periods(
                unit.pk, date_from, date_to
            )],
        })

    @action(detail=True, methods=["get"])
    def occupancy(self, request, pk=None):  # type: ignore
        unit = self.get_object()
        self._check_manage(unit.property)
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        rate = AvailabilityService().calculate_occupancy_rate(
            unit.pk, query.validated_data["date_from"], query.validated_data["date_to"]
        )
        return Response({
            "unit_id": str(unit.pk),
            "from": query.validated_data["date_from"],
            "to": query.validated_data["date_to"],
            "occupancy_rate": rate,
        })


class UnitAvailabilityViewSet(viewsets.ModelViewSet):
    """Manual blocks and maintenance windows of units.

    Blocks created for bookings follow their booking and cannot be edited
    or deleted here.
    """

    serializer_class = UnitAvailabilitySerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["unit", "status"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = UnitAvailability.objects.select_related("unit__property", "booking")
        if not is_platform_admin(user):
            qs = qs.filter(
                models.Q(unit__property__owner=user)
                | models.Q(unit__property__staff__user=user, unit__property__staff__is_active=True)
            ).distinct()
        start = self.request.query_params.get("start")
        end = self.request.query_params.get("end")
        if start:
            qs = qs.filter(end_date__gt=start)
        if end:
            qs = qs.filter(start_date__lt=end)
        return qs.order_by("start_date")

    def _validate_overlap(self, unit: Unit, start_date, end_date, exclude_id: int | None = None) -> None:
        qs = UnitAvailability.objects.filter(
            unit=unit,
            start_date__lt=end_date,
            end_date__gt=start_date,
        ).exclude(status=UnitAvailability.AvailabilityStatus.AVAILABLE)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if qs.exists():
            raise serializers.ValidationError("The selected dates overlap an existing block.")

    def perform_create(self, serializer):  # type: ignore
        unit = serializer.validated_data["unit"]
        if not can_manage_property(self.request.user, unit.property):
            self.permission_denied(self.request, message="You do not manage this property.")
        data = serializer.validated_data
        self._validate_overlap(unit, data["start_date"], data["end_date"])
        serializer.instance = AvailabilityService().block_unit_period(
            unit.pk,
            data["start_date"],
            data["end_date"],
            reason=data.get("reason", ""),
            status=data.get("status", UnitAvailability.AvailabilityStatus.BLOCKED),
            created_by=self.request.user.pk,
            notes=data.get("notes", ""),
        )

    def perform_update(self, serializer):  # type: ignore
        instance: UnitAvailability = serializer.instance
        if instance.booking_id is not None:
            raise serializers.ValidationError("Booking blocks follow their booking and cannot be edited.")
        unit = serializer.validated_data.get("unit", instance.unit)
        if not can_manage_property(self.request.user, unit.property):
            self.permission_denied(self.request, message="You do not manage this property.")
        start_date = serializer.validated_data.get("start_date", instance.start_date)
        end_date = serializer.validated_data.get("end_date", instance.end_date)
        self._validate_overlap(unit, start_date, end_date, exclude_id=instance.id)
        serializer.save()

    def destroy(self, request, *args, **kwargs):  # type: ignore
        instance: UnitAvailability = self.get_object()
        if instance.booking_id is not None:
            return Response(
                {"detail": "Booking blocks are released by cancelling the booking."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().destroy(request, *args, **kwargs)
