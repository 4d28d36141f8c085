"""Sample trips used to populate a fresh session."""

from datetime import date, datetime, timezone
from typing import List

import structlog

from ..domain.models import Message, MessageRole, Trip, TripStatus
from ..repositories.base import TripRepository

logger = structlog.get_logger()


def demo_trips() -> List[Trip]:
    return [
        Trip(
            id="demo-1",
            title="Weekend in Paris",
            description="A romantic getaway to the city of lights",
            start_date=date(2026, 2, 14),
            end_date=date(2026, 2, 16),
            messages=(
                Message(
                    id="m1",
                    role=MessageRole.USER,
                    content="I want to plan a romantic weekend in Paris for Valentine's Day",
                    timestamp=datetime(2026, 1, 10, tzinfo=timezone.utc),
                ),
                Message(
                    id="m2",
                    role=MessageRole.ASSISTANT,
                    content=(
                        "Paris is perfect for Valentine's Day! I'd recommend staying in the "
                        "Marais district. Would you like suggestions for romantic restaurants "
                        "and activities?"
                    ),
                    timestamp=datetime(2026, 1, 10, tzinfo=timezone.utc),
                ),
            ),
            created_at=datetime(2026, 1, 10, tzinfo=timezone.utc),
            status=TripStatus.CONFIRMED,
        ),
        Trip(
            id="demo-2",
            title="Tokyo Adventure",
            description="Exploring Japanese culture and cuisine",
            start_date=date(2026, 4, 1),
            end_date=date(2026, 4, 10),
            created_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
            status=TripStatus.PLANNING,
        ),
    ]


def seed_demo_trips(repository: TripRepository) -> List[Trip]:
    """Insert the demo trips that are not already present."""
    seeded = []
    for trip in demo_trips():
        if repository.get_trip(trip.id) is None:
            seeded.append(repository.insert_trip(trip))
    logger.info("demo_trips_seeded", count=len(seeded))
    return seeded
