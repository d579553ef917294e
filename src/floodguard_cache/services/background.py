"""Detached background tasks.

Background cache refreshes and background sync runs are fire-and-forget:
nobody awaits them and their failures must never reach a caller. Each task's
failure is captured into a ``BackgroundOutcome`` that is then discarded,
which keeps the swallowing explicit.
"""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackgroundOutcome:
    """Result of a detached task.

    Attributes:
        name: Task name
        error: The exception the task ended with, None on success
    """

    name: str
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TaskTracker:
    """Spawns detached tasks and keeps them alive until they finish.

    asyncio only holds weak references to tasks, so the tracker keeps a strong
    reference to each running task. ``drain()`` waits for everything still in
    flight, which lets shutdown finish pending cache writes.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[BackgroundOutcome]] = set()

    def spawn(self, work: Awaitable[object], name: str) -> asyncio.Task[BackgroundOutcome]:
        """Start ``work`` without waiting for it.

        Args:
            work: Coroutine to run
            name: Task name, used in logs

        Returns:
            The task; awaiting it yields a BackgroundOutcome and never raises
            (except on cancellation)
        """
        task = asyncio.create_task(self._run(work, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, work: Awaitable[object], name: str) -> BackgroundOutcome:
        try:
            await work
        except Exception as e:
            logger.debug("Background task %s failed (ignored): %r", name, e)
            return BackgroundOutcome(name=name, error=e)
        return BackgroundOutcome(name=name)

    async def drain(self) -> list[BackgroundOutcome]:
        """Wait until no tracked task is running.

        Returns:
            Outcomes of the tasks that were waited on
        """
        outcomes: list[BackgroundOutcome] = []
        while self._tasks:
            results = await asyncio.gather(*list(self._tasks), return_exceptions=True)
            outcomes.extend(r for r in results if isinstance(r, BackgroundOutcome))
        return outcomes

    @property
    def pending(self) -> int:
        """Number of tasks still running."""
        return len(self._tasks)
