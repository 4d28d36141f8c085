"""Domain models for the trip assistant."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TRIP_TITLE = "New Trip"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_short(day: date) -> str:
    """Format a date as ``Feb 14``."""
    return f"{day:%b} {day.day}"


def format_short_year(day: date) -> str:
    """Format a date as ``Feb 14, 2026``."""
    return f"{day:%b} {day.day}, {day.year}"


def format_long(day: date) -> str:
    """Format a date as ``February 14, 2026``."""
    return f"{day:%B} {day.day}, {day.year}"


class TripStatus(str, Enum):
    """Lifecycle status of a trip."""

    PLANNING = "planning"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"


class MessageRole(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """Message model."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: MessageRole
    content: str = Field(min_length=1)
    timestamp: datetime = Field(default_factory=utcnow)


class DateRange(BaseModel):
    """A date selection as produced by a date picker; either end may be open."""

    model_config = ConfigDict(frozen=True)

    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def duration_days(self) -> Optional[int]:
        """Whole days between start and end, or None for an open range."""
        if not self.is_complete:
            return None
        return (self.end - self.start).days


class Trip(BaseModel):
    """Trip model.

    Instances are immutable snapshots: every repository mutation produces a
    new ``Trip`` and the message sequence is only ever extended.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = DEFAULT_TRIP_TITLE
    description: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    messages: Tuple[Message, ...] = ()
    created_at: datetime = Field(default_factory=utcnow)
    status: TripStatus = TripStatus.PLANNING

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start_date, end=self.end_date)

    @property
    def last_updated(self) -> Optional[datetime]:
        """Timestamp of the latest message, if the trip has any."""
        if not self.messages:
            return None
        return self.messages[-1].timestamp

    def user_message_count(self) -> int:
        return sum(1 for m in self.messages if m.role == MessageRole.USER)

    def date_label(self) -> str:
        if self.start_date is None:
            return "No dates set"
        label = format_short(self.start_date)
        if self.end_date is not None:
            label += f" - {format_short_year(self.end_date)}"
        return label

    def message_count_label(self) -> str:
        count = len(self.messages)
        return f"{count} message{'' if count == 1 else 's'}"


class TripUpdate(BaseModel):
    """Partial patch applied by ``update_trip``; only set fields are merged."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[TripStatus] = None

    def changes(self) -> dict:
        # Only the dates may be cleared with an explicit None
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in ("start_date", "end_date")
        }


class Identity(BaseModel):
    """Signed-in user as supplied by the authentication stub."""

    id: str
    name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        return self.name or "User"

    @property
    def initial(self) -> str:
        return self.name[:1].upper() or "U"
