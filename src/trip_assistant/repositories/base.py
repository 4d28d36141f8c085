"""Base repository interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..domain.models import Message, MessageRole, Trip, TripStatus, TripUpdate


class TripEventKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    MESSAGE_ADDED = "message_added"
    CURRENT_CHANGED = "current_changed"


@dataclass(frozen=True)
class TripEvent:
    """Change notification delivered to repository subscribers."""

    kind: TripEventKind
    trip_id: Optional[str]


Listener = Callable[[TripEvent], None]
Unsubscribe = Callable[[], None]


class TripRepository(ABC):
    """Abstract base class for trip repositories."""

    @property
    @abstractmethod
    def trips(self) -> List[Trip]:
        """Snapshot of all trips in creation order."""
        pass

    @property
    @abstractmethod
    def current_trip(self) -> Optional[Trip]:
        """The selected trip, if any."""
        pass

    @abstractmethod
    def get_trip(self, trip_id: str) -> Optional[Trip]:
        """Retrieve a trip by ID."""
        pass

    @abstractmethod
    def create_trip(self) -> Trip:
        """Create a new trip and make it current."""
        pass

    @abstractmethod
    def insert_trip(self, trip: Trip) -> Trip:
        """Register a fully built trip without touching the selection."""
        pass

    @abstractmethod
    def update_trip(
        self, trip_id: str, update: Optional[TripUpdate] = None, **fields
    ) -> Optional[Trip]:
        """Merge the given fields into a trip."""
        pass

    @abstractmethod
    def delete_trip(self, trip_id: str) -> None:
        """Remove a trip."""
        pass

    @abstractmethod
    def set_current_trip(self, trip: Optional[Trip]) -> None:
        """Select a trip, or clear the selection with None."""
        pass

    @abstractmethod
    def add_message(self, trip_id: str, role: MessageRole, content: str) -> Optional[Message]:
        """Append a message to a trip's conversation."""
        pass

    @abstractmethod
    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register a change listener; returns a callable that removes it."""
        pass

    def list_trips(self, status: Optional[TripStatus] = None) -> List[Trip]:
        """List trips, optionally restricted to one status."""
        trips = self.trips
        if status is None:
            return trips
        return [t for t in trips if t.status == TripStatus(status)]

    def trips_by_status(self) -> Dict[TripStatus, List[Trip]]:
        """Group trips by status, keeping collection order inside each group."""
        groups: Dict[TripStatus, List[Trip]] = {status: [] for status in TripStatus}
        for trip in self.trips:
            groups[trip.status].append(trip)
        return groups
