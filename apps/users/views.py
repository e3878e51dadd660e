"""User API views."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import User
from .permissions import IsPlatformAdmin
from .serializers import UserSerializer


class UserViewSet(viewsets.ReadOnlyModelViewSet):
    """User directory for administrators, plus ``me`` for everyone."""

    serializer_class = UserSerializer
    queryset = User.objects.all()
    permission_classes = [IsPlatformAdmin]
    filterset_fields = ["role", "is_active"]

    @action(detail=False, methods=["get", "patch"], permission_classes=[permissions.IsAuthenticated])
    def me(self, request):
        if request.method == "PATCH":
            serializer = UserSerializer(request.user, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            serializer.save()
            return Response(serializer.data)
        return Response(UserSerializer(request.user).data)
