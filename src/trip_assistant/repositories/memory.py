"""In-memory repository implementation."""

from threading import RLock
from typing import Dict, List, Optional
from uuid import uuid4

import pydantic
import structlog

from .. import metrics
from ..config.settings import Settings, get_settings
from ..data.demo import seed_demo_trips
from ..domain.errors import NotFoundError, ValidationError
from ..domain.models import Message, MessageRole, Trip, TripUpdate, utcnow
from .base import Listener, TripEvent, TripEventKind, TripRepository, Unsubscribe

logger = structlog.get_logger()


def new_trip_id() -> str:
    return f"trip-{uuid4().hex}"


def new_message_id() -> str:
    return f"msg-{uuid4().hex}"


class InMemoryTripRepository(TripRepository):
    """Thread-safe in-memory repository implementation.

    Every mutation runs inside one critical section and replaces the stored
    ``Trip`` with a new snapshot, so readers never observe a half-applied
    change. Listeners are notified after the lock is released.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._lock = RLock()
        self._trips: Dict[str, Trip] = {}
        self._current: Optional[Trip] = None
        self._listeners: List[Listener] = []
        logger.info("repository_initialized", validation_mode=self._settings.validation_mode.value)

    @property
    def trips(self) -> List[Trip]:
        with self._lock:
            return list(self._trips.values())

    @property
    def current_trip(self) -> Optional[Trip]:
        with self._lock:
            return self._current

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        """Retrieve a trip by ID."""
        with self._lock:
            return self._trips.get(trip_id)

    def create_trip(self) -> Trip:
        """Create a new trip, register it and make it current."""
        trip = Trip(id=new_trip_id(), title=self._settings.default_trip_title)
        with self._lock:
            self._trips[trip.id] = trip
            self._current = trip
        metrics.TRIPS_CREATED.inc()
        logger.info("trip_created", trip_id=trip.id)
        self._notify(TripEvent(TripEventKind.CREATED, trip.id))
        self._notify(TripEvent(TripEventKind.CURRENT_CHANGED, trip.id))
        return trip

    def insert_trip(self, trip: Trip) -> Trip:
        """Register a fully built trip (e.g. seed data) without selecting it."""
        with self._lock:
            if trip.id in self._trips:
                raise ValidationError(f"Trip {trip.id} already exists")
            self._trips[trip.id] = trip
        logger.info("trip_inserted", trip_id=trip.id, messages=len(trip.messages))
        self._notify(TripEvent(TripEventKind.CREATED, trip.id))
        return trip

    def update_trip(
        self, trip_id: str, update: Optional[TripUpdate] = None, **fields
    ) -> Optional[Trip]:
        """Merge the provided fields into a trip; fields not given keep their values."""
        if update is None:
            try:
                update = TripUpdate(**fields)
            except pydantic.ValidationError as e:
                raise ValidationError(str(e)) from e
        elif fields:
            raise TypeError("Pass either a TripUpdate or keyword fields, not both")

        changes = update.changes()
        with self._lock:
            trip = self._resolve(trip_id)
            if trip is None:
                return self._missing(trip_id, "update_trip")

            start = changes.get("start_date", trip.start_date)
            end = changes.get("end_date", trip.end_date)
            if start is not None and end is not None and end < start:
                if self._settings.strict:
                    logger.warning("date_range_rejected", trip_id=trip_id, start=str(start), end=str(end))
                    raise ValidationError(f"End date {end} is before start date {start}")
                logger.warning("date_range_inverted", trip_id=trip_id, start=str(start), end=str(end))

            updated = trip.model_copy(update=changes)
            self._store(updated)

        logger.info("trip_updated", trip_id=trip_id, fields=sorted(changes))
        self._notify(TripEvent(TripEventKind.UPDATED, trip_id))
        return updated

    def delete_trip(self, trip_id: str) -> None:
        """Remove a trip, clearing the selection if it was current."""
        with self._lock:
            if self._resolve(trip_id) is None:
                self._missing(trip_id, "delete_trip")
                return
            self._trips.pop(trip_id, None)
            was_current = self._current is not None and self._current.id == trip_id
            if was_current:
                self._current = None

        metrics.TRIPS_DELETED.inc()
        logger.info("trip_deleted", trip_id=trip_id, was_current=was_current)
        self._notify(TripEvent(TripEventKind.DELETED, trip_id))
        if was_current:
            self._notify(TripEvent(TripEventKind.CURRENT_CHANGED, None))

    def set_current_trip(self, trip: Optional[Trip]) -> None:
        """Select a trip, or clear the selection with None.

        A trip that belongs to the collection is selected in its latest stored
        form. Lenient mode also accepts trips outside the collection.
        """
        with self._lock:
            if trip is not None:
                stored = self._trips.get(trip.id)
                if stored is None and self._settings.strict:
                    logger.warning("trip_not_found", trip_id=trip.id, operation="set_current_trip")
                    raise NotFoundError(trip.id)
                trip = stored or trip
            self._current = trip

        trip_id = trip.id if trip is not None else None
        logger.info("current_trip_changed", trip_id=trip_id)
        self._notify(TripEvent(TripEventKind.CURRENT_CHANGED, trip_id))

    def add_message(self, trip_id: str, role: MessageRole, content: str) -> Optional[Message]:
        """Append a message to a trip as a single atomic step."""
        if not content or not content.strip():
            raise ValidationError("Message content must not be empty")
        try:
            role = MessageRole(role)
        except ValueError as e:
            raise ValidationError(f"Unknown message role: {role}") from e

        with self._lock:
            trip = self._resolve(trip_id)
            if trip is None:
                return self._missing(trip_id, "add_message")

            timestamp = utcnow()
            if trip.messages and trip.messages[-1].timestamp > timestamp:
                timestamp = trip.messages[-1].timestamp

            message = Message(id=new_message_id(), role=role, content=content, timestamp=timestamp)
            self._store(trip.model_copy(update={"messages": trip.messages + (message,)}))

        metrics.MESSAGES_ADDED.labels(role=role.value).inc()
        logger.info("message_added", trip_id=trip_id, message_role=role.value)
        self._notify(TripEvent(TripEventKind.MESSAGE_ADDED, trip_id))
        return message

    def subscribe(self, listener: Listener) -> Unsubscribe:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _resolve(self, trip_id: str) -> Optional[Trip]:
        # Caller holds the lock. A previewed current trip counts as addressable.
        trip = self._trips.get(trip_id)
        if trip is None and self._current is not None and self._current.id == trip_id:
            trip = self._current
        return trip

    def _store(self, trip: Trip) -> None:
        # Caller holds the lock
        if trip.id in self._trips:
            self._trips[trip.id] = trip
        if self._current is not None and self._current.id == trip.id:
            self._current = trip

    def _missing(self, trip_id: str, operation: str) -> None:
        logger.warning("trip_not_found", trip_id=trip_id, operation=operation)
        if self._settings.strict:
            raise NotFoundError(trip_id)
        return None

    def _notify(self, event: TripEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(
                    "listener_error",
                    event_kind=event.kind.value,
                    trip_id=event.trip_id,
                    error=str(e),
                )


def build_repository(settings: Optional[Settings] = None) -> InMemoryTripRepository:
    """Create a repository, seeded with the demo trips when configured."""
    settings = settings or get_settings()
    repository = InMemoryTripRepository(settings)
    if settings.seed_demo_trips:
        seed_demo_trips(repository)
    return repository
