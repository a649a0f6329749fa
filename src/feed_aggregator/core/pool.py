"""
Bounded concurrency pool for async tasks.

The pool owns a fixed number of slots. A task is admitted only into a free
slot, and a finished task frees exactly the slot it was admitted into, so the
number of in-flight tasks never exceeds the bound.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from feed_aggregator.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class TaskOutcome(Generic[T, R]):
    """Settled outcome of one pool task."""

    index: int
    item: T
    result: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ConcurrencyPool:
    """Runs one async task per item with at most ``limit`` in flight."""

    def __init__(self, limit: int):
        """Initialize the pool.

        Args:
            limit: Maximum number of concurrently running tasks (>= 1)
        """
        if limit < 1:
            raise ValueError(f"Concurrency limit must be >= 1, got {limit}")
        self.limit = limit
        self.peak_in_flight = 0

    async def run(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[R]],
    ) -> list[TaskOutcome[T, R]]:
        """Run ``worker`` over every item and wait until all have settled.

        A failing task is recorded in its outcome and does not cancel the others.

        Args:
            items: Items to process, admitted in order
            worker: Coroutine function called once per item

        Returns:
            One TaskOutcome per item, in item order
        """
        outcomes: list[Optional[TaskOutcome[T, R]]] = [None] * len(items)
        slots: list[Optional[asyncio.Task]] = [None] * self.limit
        # task -> (slot, item index)
        running: dict[asyncio.Task, tuple[int, int]] = {}
        next_index = 0

        try:
            while next_index < len(items) or running:
                for slot, occupant in enumerate(slots):
                    if occupant is not None or next_index >= len(items):
                        continue
                    task = asyncio.ensure_future(worker(items[next_index]))
                    slots[slot] = task
                    running[task] = (slot, next_index)
                    next_index += 1

                self.peak_in_flight = max(self.peak_in_flight, len(running))

                done, _ = await asyncio.wait(running.keys(), return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    slot, index = running.pop(task)
                    slots[slot] = None
                    outcomes[index] = self._settle(task, index, items[index])
        finally:
            # Only reached with tasks left when the caller itself was cancelled
            for task in running:
                task.cancel()

        return outcomes

    @staticmethod
    def _settle(task: asyncio.Task, index: int, item: Any) -> TaskOutcome:
        if task.cancelled():
            logger.warning(f"Pool task {index} was cancelled")
            return TaskOutcome(index=index, item=item, error=asyncio.CancelledError())

        error = task.exception()
        if error is not None:
            logger.error(f"Pool task {index} failed: {type(error).__name__}: {error}")
            return TaskOutcome(index=index, item=item, error=error)

        return TaskOutcome(index=index, item=item, result=task.result())
