"""Bounded-concurrency task queue with an idle barrier.

Tasks are zero-argument coroutine factories. Any task may add more tasks to
the queue it runs on (pagination resubmits itself this way), and
``on_idle()`` only returns once nothing is queued or running.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Set

logger = logging.getLogger(__name__)

TaskFactory = Callable[[], Awaitable[object]]


@dataclass
class TaskFailure:
    label: str
    error: BaseException

    def to_dict(self) -> dict:
        return {"task": self.label, "error": f"{type(self.error).__name__}: {self.error}"}


class TaskQueue:
    def __init__(self, concurrency: int) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.concurrency = concurrency
        self._semaphore = asyncio.Semaphore(concurrency)
        self._tasks: Set[asyncio.Task] = set()
        self._idle = asyncio.Event()
        self._idle.set()
        self._waiting = 0
        self._running = 0
        self.completed = 0
        self.failures: List[TaskFailure] = []

    @property
    def pending(self) -> int:
        return self._waiting

    @property
    def in_flight(self) -> int:
        return self._running

    def __len__(self) -> int:
        return len(self._tasks)

    def add(self, factory: TaskFactory, *, label: Optional[str] = None) -> asyncio.Task:
        """Schedule ``factory()``; must be called from inside the running loop."""

        self._idle.clear()
        self._waiting += 1
        task = asyncio.get_running_loop().create_task(self._run(factory, label or repr(factory)))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def _run(self, factory: TaskFactory, label: str) -> None:
        async with self._semaphore:
            self._waiting -= 1
            self._running += 1
            try:
                await factory()
            except Exception as exc:
                logger.error("Task failed (%s): %s", label, exc)
                logger.debug("Task failure detail", exc_info=exc)
                self.failures.append(TaskFailure(label, exc))
            else:
                self.completed += 1
            finally:
                self._running -= 1

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not self._tasks:
            self._idle.set()

    async def on_idle(self) -> None:
        """Wait until no task is pending or in flight."""

        while self._tasks:
            await self._idle.wait()
