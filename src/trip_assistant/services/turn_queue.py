"""Per-trip FIFO queue that runs conversation turns one at a time."""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Set

import structlog

from ..domain.errors import TurnQueueClosed

logger = structlog.get_logger()


@dataclass
class QueuedTurn:
    """Represents a queued turn with its context."""

    trip_id: str
    task: Callable[..., Awaitable[Any]]
    args: tuple
    kwargs: dict
    future: asyncio.Future
    sequence_number: int


class TurnQueue:
    """Serializes turns per trip; turns for different trips run concurrently.

    A trip's queue and processor exist only while it has turns waiting or
    running. Queue bookkeeping never awaits, so creating, draining and
    dropping a queue cannot interleave with another coroutine.
    """

    def __init__(self) -> None:
        self.queues: Dict[str, asyncio.Queue] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._sequence_counters: Dict[str, int] = {}

    def _get_queue(self, trip_id: str) -> asyncio.Queue:
        """Get or create the queue for a trip, starting its processor."""
        if trip_id not in self.queues:
            self.queues[trip_id] = asyncio.Queue()
            self._sequence_counters[trip_id] = 0
            task = asyncio.create_task(self._process_queue(trip_id))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return self.queues[trip_id]

    async def _process_queue(self, trip_id: str) -> None:
        """Run queued turns for a trip in arrival order, then drop the queue."""
        queue = self.queues[trip_id]
        turn: Optional[QueuedTurn] = None
        try:
            while True:
                try:
                    turn = queue.get_nowait()
                except asyncio.QueueEmpty:
                    break
                try:
                    result = await turn.task(*turn.args, **turn.kwargs)
                    if not turn.future.done():
                        turn.future.set_result(result)
                except Exception as e:
                    if not turn.future.done():
                        turn.future.set_exception(e)
                    logger.error(
                        "turn_processing_error",
                        trip_id=trip_id,
                        sequence=turn.sequence_number,
                        error=str(e),
                    )
                finally:
                    queue.task_done()
                turn = None
        except asyncio.CancelledError:
            logger.info("turn_queue_processor_cancelled", trip_id=trip_id)
            self._fail_pending(trip_id, queue, turn)
            raise
        finally:
            if self.queues.get(trip_id) is queue:
                del self.queues[trip_id]
                del self._sequence_counters[trip_id]
            logger.debug("turn_queue_drained", trip_id=trip_id)

    def _fail_pending(
        self, trip_id: str, queue: asyncio.Queue, running: Optional[QueuedTurn]
    ) -> None:
        """Resolve every waiting future so no caller hangs on a stopped processor."""
        pending = [running] if running is not None else []
        while True:
            try:
                pending.append(queue.get_nowait())
            except asyncio.QueueEmpty:
                break
        for turn in pending:
            if not turn.future.done():
                turn.future.set_exception(
                    TurnQueueClosed(f"Turn {turn.sequence_number} for trip {trip_id} was abandoned")
                )

    async def enqueue(
        self,
        trip_id: str,
        task: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any
    ) -> Any:
        """Enqueue a turn and wait for its result."""
        queue = self._get_queue(trip_id)
        sequence_number = self._sequence_counters[trip_id]
        self._sequence_counters[trip_id] += 1

        future = asyncio.get_running_loop().create_future()
        queue.put_nowait(QueuedTurn(
            trip_id=trip_id,
            task=task,
            args=args,
            kwargs=kwargs,
            future=future,
            sequence_number=sequence_number,
        ))
        logger.debug("turn_enqueued", trip_id=trip_id, sequence=sequence_number)
        return await future

    async def cleanup(self) -> None:
        """Wait for every queued and running turn to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        logger.info("turn_queue_cleaned_up")
