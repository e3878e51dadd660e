"""The acting user as seen by command handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from .models import User


@dataclass(frozen=True)
class CurrentUser:
    """Identity, role and staff memberships of the requesting user.

    Handlers take a ``CurrentUser`` instead of a request so they can be
    driven from views, Celery tasks and tests alike.
    """

    user_id: UUID
    role: str
    staff_property_ids: frozenset = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        from apps.properties.models import PropertyStaff

        role = User.RoleChoices.ADMIN if user.is_superuser else user.role
        staff_ids = PropertyStaff.objects.filter(user=user, is_active=True).values_list("property_id", flat=True)
        return cls(user_id=user.pk, role=role, staff_property_ids=frozenset(staff_ids))

    @property
    def is_admin(self) -> bool:
        return self.role == User.RoleChoices.ADMIN

    @property
    def is_owner(self) -> bool:
        return self.role == User.RoleChoices.OWNER

    def is_staff_in_property(self, property_id) -> bool:
        return property_id in self.staff_property_ids

    def owns_property(self, property_obj) -> bool:
        return property_obj.owner_id == self.user_id

    def manages_property(self, property_obj) -> bool:
        """Owner of the property or an active staff member of it."""
        return self.owns_property(property_obj) or self.is_staff_in_property(property_obj.pk)
