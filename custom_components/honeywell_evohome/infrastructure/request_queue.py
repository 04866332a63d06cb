# request_queue.py
"""Serial request queue for the Honeywell Evohome API.

This module provides the RequestQueue class that guarantees:
- At most one submitted task runs at any time
- Tasks run (and settle) strictly in submission order
- A failing task only delays the tasks behind it, it never blocks them
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[Any]]


class RequestQueue:
    """FIFO task channel consumed by a single worker.

    Callers submit a factory returning an awaitable; the factory is only
    invoked once every previously submitted task has settled. The queue is
    unbounded: submissions are never rejected.

    Attributes:
        name: Name used in log messages and for the worker task
    """

    def __init__(self, name: str = "requests"):
        """Initialize the RequestQueue.

        Args:
            name: Name used in log messages and for the worker task
        """
        self.name = name
        self._queue: asyncio.Queue[tuple[TaskFactory, asyncio.Future]] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self._active = False

    @property
    def pending(self) -> int:
        """Number of tasks waiting to start."""
        return self._queue.qsize()

    @property
    def active(self) -> bool:
        """True while a task body is executing."""
        return self._active

    async def submit(self, task_factory: Callable[[], Awaitable[T]]) -> T:
        """Queue a task and wait for its outcome.

        Args:
            task_factory: Callable returning the awaitable to run

        Returns:
            Result of the awaitable.

        Raises:
            Whatever the awaitable raised.
        """
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((task_factory, future))
        _LOGGER.debug("Queue %s: task scheduled (%d pending)", self.name, self._queue.qsize())
        self._ensure_worker()
        return await future

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(
                self._async_worker(), name=f"honeywell_evohome_queue_{self.name}"
            )

    async def _async_worker(self) -> None:
        while True:
            task_factory, future = await self._queue.get()
            self._active = True
            try:
                # A caller that stopped waiting does not cancel the side effect
                result = await task_factory()
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as err:  # noqa: BLE001 - forwarded to the submitter
                _LOGGER.debug("Queue %s: task failed: %s", self.name, err)
                if not future.done():
                    future.set_exception(err)
            else:
                if not future.done():
                    future.set_result(result)
            finally:
                self._active = False
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every submitted task has settled."""
        await self._queue.join()

    async def async_shutdown(self) -> None:
        """Stop the worker and cancel tasks that have not started yet."""
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None

        while not self._queue.empty():
            _, future = self._queue.get_nowait()
            if not future.done():
                future.cancel()
            self._queue.task_done()
        _LOGGER.debug("Queue %s shut down", self.name)
