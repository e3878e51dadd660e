"""
Base Domain Classes

Building blocks shared by the domain apps:
- ValueObject: Immutable objects compared by value
- DomainEvent: Something that happened, published after commit
- EventRecorderMixin: Lets a Django model act as an aggregate root and
  record domain events until the unit of work collects them
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from django.utils import timezone  # type: ignore


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass(kw_only=True)
class DomainEvent:
    """
    Base class for domain events

    Base fields are keyword-only so subclasses can declare required
    payload fields of their own.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=timezone.now)
    aggregate_id: Optional[UUID] = None

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.event_type,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }


class EventRecorderMixin:
    """
    Aggregate-root behaviour for Django models

    Models record events while a command handler mutates them; the
    unit of work drains them with ``events`` / ``clear_events`` and
    publishes them once the transaction commits.
    """

    def _pending_events(self) -> List[DomainEvent]:
        if not hasattr(self, '_recorded_events'):
            self._recorded_events: List[DomainEvent] = []
        return self._recorded_events

    def add_event(self, event: DomainEvent) -> None:
        """Add a domain event to be published"""
        if event.aggregate_id is None:
            event.aggregate_id = getattr(self, 'pk', None)
        self._pending_events().append(event)

    def clear_events(self) -> None:
        """Clear all collected events (called after publishing)"""
        self._pending_events().clear()

    @property
    def events(self) -> List[DomainEvent]:
        """Get copy of collected events"""
        return list(self._pending_events())
