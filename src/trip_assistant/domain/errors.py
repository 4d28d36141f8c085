"""Exceptions raised by the trip assistant core."""


class TripAssistantError(Exception):
    """Base class for all trip assistant errors."""
    pass


class NotFoundError(TripAssistantError):
    """Raised in strict mode when an operation references an unknown trip."""

    def __init__(self, trip_id: str):
        super().__init__(f"Trip {trip_id} not found")
        self.trip_id = trip_id


class ValidationError(TripAssistantError):
    """Raised when a change would break a trip or message invariant."""
    pass


class TurnQueueClosed(TripAssistantError):
    """Raised to callers whose queued turn was abandoned by a stopped processor."""
    pass
