"""Projection of the date picker selection onto the current trip."""

from typing import Optional

import structlog

from ..domain.models import DateRange, Trip
from ..repositories.base import TripEvent, TripEventKind, TripRepository

logger = structlog.get_logger()


def initial_selection(trip: Optional[Trip]) -> Optional[DateRange]:
    """Selection shown when a trip becomes current; needs both dates."""
    if trip is None or trip.start_date is None or trip.end_date is None:
        return None
    return DateRange(start=trip.start_date, end=trip.end_date)


class DateSync:
    """Keeps the current trip's start/end in step with the picker selection."""

    def __init__(self, repository: TripRepository):
        self.repository = repository
        self.selection: Optional[DateRange] = initial_selection(repository.current_trip)
        self._unsubscribe = repository.subscribe(self._on_event)

    def select(self, selection: Optional[DateRange]) -> Optional[Trip]:
        """Apply a new picker selection; returns the updated trip, if any."""
        trip = self.repository.current_trip
        updated = None
        if trip is not None and selection is not None:
            updated = self.repository.update_trip(
                trip.id, start_date=selection.start, end_date=selection.end
            )
            logger.debug("date_selection_synced", trip_id=trip.id,
                         start=str(selection.start), end=str(selection.end))
        self.selection = selection
        return updated

    def close(self) -> None:
        self._unsubscribe()

    def _on_event(self, event: TripEvent) -> None:
        if event.kind == TripEventKind.CURRENT_CHANGED:
            self.selection = initial_selection(self.repository.current_trip)
