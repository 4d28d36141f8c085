"""
Trip Assistant Application Module

Wires the in-process core consumed by a presentation layer: the trip
repository, the conversation controller and the date sync. Every call
returns with the new state already visible; a presentation layer re-renders
from ``subscribe`` notifications instead of reaching into internal state.
"""

from dataclasses import dataclass, field
from typing import Optional

from structlog import get_logger

from .config.log import configure_logging
from .config.settings import Settings, get_settings
from .domain.models import DateRange, Identity, Trip
from .repositories.base import Listener, TripRepository, Unsubscribe
from .repositories.memory import build_repository
from .services.conversation import ConversationController, Turn
from .services.date_sync import DateSync
from .services.responder import ResponseGenerator

logger = get_logger()


@dataclass
class TripAssistant:
    """Facade over the core services for one user session."""

    repository: TripRepository
    conversation: ConversationController
    date_sync: DateSync
    settings: Settings
    identity: Optional[Identity] = field(default=None)

    def greeting(self) -> str:
        name = self.identity.display_name if self.identity else "User"
        return f"Welcome back, {name}!"

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self.repository.subscribe(listener)

    def new_trip(self) -> Trip:
        return self.repository.create_trip()

    def open_trip(self, trip: Optional[Trip]) -> None:
        self.repository.set_current_trip(trip)

    def select_dates(self, selection: Optional[DateRange]) -> Optional[Trip]:
        return self.date_sync.select(selection)

    async def send(self, text: str) -> Optional[Turn]:
        """Send an utterance to the current trip, using the picker selection as date context.

        An empty picker means no date clause, even if the trip has stored dates.
        """
        trip = self.repository.current_trip
        if trip is None:
            return None
        selection = self.date_sync.selection
        if selection is None:
            selection = DateRange()
        return await self.conversation.send_message(trip.id, text, selection)

    async def shutdown(self) -> None:
        self.date_sync.close()
        await self.conversation.close()
        logger.info("application_shutdown_complete")


def create_app(
    settings: Optional[Settings] = None,
    identity: Optional[Identity] = None,
    generator: Optional[ResponseGenerator] = None,
) -> TripAssistant:
    """Build a fully wired session from settings"""
    settings = settings or get_settings()
    configure_logging(settings)
    repository = build_repository(settings)
    assistant = TripAssistant(
        repository=repository,
        conversation=ConversationController(repository, generator, settings),
        date_sync=DateSync(repository),
        settings=settings,
        identity=identity,
    )
    logger.info("application_startup_complete", validation_mode=settings.validation_mode.value)
    return assistant
