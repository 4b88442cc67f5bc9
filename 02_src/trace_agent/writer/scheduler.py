"""Flush scheduling for the trace writer."""

import asyncio
from typing import Callable

from ..logging_config import get_logger

logger = get_logger(__name__)


FlushCallback = Callable[[], object]


class FlushScheduler:
    """Drives periodic and size-triggered flushes on the event loop.

    The periodic timer is an asyncio task, so it never keeps the process
    alive on its own: asyncio.run() cancels it when the main coroutine ends.
    """

    def __init__(self, flush: FlushCallback, flush_delay_seconds: float):
        self._flush = flush
        self._delay = flush_delay_seconds
        self._loop: asyncio.AbstractEventLoop | None = None
        self._timer_task: asyncio.Task | None = None
        self._soon_handle: asyncio.Handle | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Flush now and every flush_delay_seconds after. Needs a running loop."""
        if self._running:
            return

        self._loop = asyncio.get_running_loop()
        self._running = True
        logger.info("Performing periodic flush")
        self._run_flush()
        self._timer_task = self._loop.create_task(self._periodic_flush())

    def stop(self) -> None:
        """Cancel the timer and any pending size-triggered flush."""
        self._running = False

        if self._timer_task:
            self._timer_task.cancel()
            self._timer_task = None

        if self._soon_handle:
            self._soon_handle.cancel()
            self._soon_handle = None

    def request_flush(self) -> None:
        """Schedule a flush on the next loop iteration, never inline."""
        if not self._running or self._loop is None:
            return
        if self._soon_handle is not None:
            return  # one already pending
        self._soon_handle = self._loop.call_soon(self._run_requested_flush)

    def _run_requested_flush(self) -> None:
        self._soon_handle = None
        if self._running:
            self._run_flush()

    def _run_flush(self) -> None:
        try:
            self._flush()
        except Exception as e:
            logger.error("Flush failed: %s", e, exc_info=True)

    async def _periodic_flush(self) -> None:
        """Background timer for flushing the buffer."""
        while self._running:
            try:
                await asyncio.sleep(self._delay)
            except asyncio.CancelledError:
                break

            if not self._running:
                break
            logger.info("Performing periodic flush")
            self._run_flush()
