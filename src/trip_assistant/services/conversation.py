"""
Conversation Controller Module

Turns one user utterance into a committed pair of messages on a trip:

1. validate the utterance and the selection,
2. commit the user message,
3. wait out the simulated "thinking" delay,
4. generate and commit the assistant reply,
5. derive the trip title and description on the first turn.

Each trip is either idle or awaiting the assistant. Concurrent sends for the
same trip are not rejected; message appends are atomic so no turn loses a
message, and ``serialize_turns`` makes whole turns run one after another.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import structlog

from .. import metrics
from ..config.settings import Settings, get_settings
from ..domain.models import DateRange, Message, MessageRole, Trip
from ..repositories.base import TripRepository
from .responder import ResponseGenerator
from .turn_queue import TurnQueue

logger = structlog.get_logger()


class TurnState(str, Enum):
    IDLE = "idle"
    AWAITING_ASSISTANT = "awaiting_assistant"


@dataclass(frozen=True)
class Turn:
    """Outcome of a completed turn."""

    trip_id: str
    user_message: Message
    assistant_message: Message
    first_turn: bool


def derive_title(utterance: str, max_length: int = 30, ellipsis: str = "...") -> str:
    """Short trip title from an utterance: truncated with an ellipsis when too long."""
    if len(utterance) > max_length:
        return utterance[:max_length] + ellipsis
    return utterance


class ConversationController:
    """Runs conversation turns against a trip repository."""

    def __init__(
        self,
        repository: TripRepository,
        generator: Optional[ResponseGenerator] = None,
        settings: Optional[Settings] = None,
        turn_queue: Optional[TurnQueue] = None,
    ):
        self.repository = repository
        self.generator = generator or ResponseGenerator()
        self.settings = settings or get_settings()
        self.turn_queue = turn_queue or TurnQueue()
        self._in_flight: Dict[str, int] = {}

    def state(self, trip_id: str) -> TurnState:
        if self._in_flight.get(trip_id):
            return TurnState.AWAITING_ASSISTANT
        return TurnState.IDLE

    def is_awaiting(self, trip_id: str) -> bool:
        """True while a turn for the trip waits on the assistant"""
        return self.state(trip_id) == TurnState.AWAITING_ASSISTANT

    async def send_message(
        self,
        trip_id: str,
        text: str,
        date_context: Optional[DateRange] = None,
    ) -> Optional[Turn]:
        """
        Run one turn for the trip.
        Blank input or a missing selection is silently ignored and yields None.
        """
        utterance = (text or "").strip()
        if not utterance:
            metrics.SENDS_IGNORED.labels(reason="blank").inc()
            logger.debug("send_ignored", trip_id=trip_id, reason="blank")
            return None
        if self.repository.current_trip is None:
            metrics.SENDS_IGNORED.labels(reason="no_current_trip").inc()
            logger.debug("send_ignored", trip_id=trip_id, reason="no_current_trip")
            return None

        if self.settings.serialize_turns:
            return await self.turn_queue.enqueue(
                trip_id, self._run_turn, trip_id, utterance, date_context
            )
        return await self._run_turn(trip_id, utterance, date_context)

    async def close(self) -> None:
        await self.turn_queue.cleanup()

    async def _run_turn(
        self, trip_id: str, utterance: str, date_context: Optional[DateRange]
    ) -> Optional[Turn]:
        self._in_flight[trip_id] = self._in_flight.get(trip_id, 0) + 1
        try:
            with metrics.TURN_DURATION.time():
                return await self._exchange(trip_id, utterance, date_context)
        finally:
            self._in_flight[trip_id] -= 1
            if not self._in_flight[trip_id]:
                del self._in_flight[trip_id]

    async def _exchange(
        self, trip_id: str, utterance: str, date_context: Optional[DateRange]
    ) -> Optional[Turn]:
        user_message = self.repository.add_message(trip_id, MessageRole.USER, utterance)
        if user_message is None:
            metrics.SENDS_IGNORED.labels(reason="unknown_trip").inc()
            return None

        trip = self._lookup(trip_id)
        first_turn = bool(trip and trip.messages and trip.messages[0].id == user_message.id)

        logger.debug("assistant_thinking", trip_id=trip_id, delay=self.settings.thinking_delay)
        await asyncio.sleep(self.settings.thinking_delay)

        if date_context is None:
            trip = self._lookup(trip_id)
            date_context = trip.date_range if trip else DateRange()
        reply = self.generator.generate(utterance, date_context)

        assistant_message = self.repository.add_message(trip_id, MessageRole.ASSISTANT, reply)
        if assistant_message is None:
            logger.warning("turn_target_vanished", trip_id=trip_id)
            return None

        if first_turn:
            title = derive_title(
                utterance, self.settings.title_max_length, self.settings.title_ellipsis
            )
            self.repository.update_trip(trip_id, title=title, description=utterance)
            logger.info("trip_metadata_derived", trip_id=trip_id, title=title)

        metrics.TURNS_COMPLETED.inc()
        logger.info(
            "message_processed",
            trip_id=trip_id,
            user_message_length=len(utterance),
            ai_response_length=len(reply),
            first_turn=first_turn,
        )
        return Turn(
            trip_id=trip_id,
            user_message=user_message,
            assistant_message=assistant_message,
            first_turn=first_turn,
        )

    def _lookup(self, trip_id: str) -> Optional[Trip]:
        trip = self.repository.get_trip(trip_id)
        current = self.repository.current_trip
        if trip is None and current is not None and current.id == trip_id:
            trip = current
        return trip
