"""Uncaught exception integration."""

import asyncio
import os
import sys
import threading
from typing import Callable

from ..config import UncaughtExceptionPolicy
from ..logging_config import get_logger

logger = get_logger(__name__)

# Time allowed for an in-flight publish to leave the process before exiting
EXIT_GRACE_SECONDS = 2.0

ExitFlush = Callable[[float], object]


class UncaughtExceptionHook:
    """Flushes traces when the process hits an uncaught exception.

    Chains sys.excepthook and threading.excepthook on install(), and an event
    loop's exception handler on attach_loop(). Previous handlers always run.
    On the loop, only exceptions from a task or callback count as uncaught.
    Installed for the lifetime of the process.
    """

    def __init__(
        self,
        policy: UncaughtExceptionPolicy,
        flush: ExitFlush,
        grace_seconds: float = EXIT_GRACE_SECONDS,
        exit_func: Callable[[int], object] = os._exit,
    ):
        self._policy = policy
        self._flush = flush
        self._grace_seconds = grace_seconds
        self._exit_func = exit_func
        self._previous_excepthook = None
        self._previous_threading_excepthook = None
        self._previous_loop_handler = None
        self._installed = False
        self._exit_scheduled = False

    @property
    def policy(self) -> UncaughtExceptionPolicy:
        return self._policy

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        """Chain the interpreter-level exception hooks."""
        if self._installed or self._policy == UncaughtExceptionPolicy.IGNORE:
            return

        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._excepthook
        self._previous_threading_excepthook = threading.excepthook
        threading.excepthook = self._threading_excepthook
        self._installed = True

    def attach_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Chain the loop's handler for exceptions nobody retrieved."""
        if self._policy == UncaughtExceptionPolicy.IGNORE:
            return
        self._previous_loop_handler = loop.get_exception_handler()
        loop.set_exception_handler(self._loop_exception_handler)

    def _excepthook(self, exc_type, exc, tb) -> None:
        if self._previous_excepthook is not None:
            self._previous_excepthook(exc_type, exc, tb)
        self._handle_blocking()

    def _threading_excepthook(self, args) -> None:
        if self._previous_threading_excepthook is not None:
            self._previous_threading_excepthook(args)
        self._handle_blocking()

    def _handle_blocking(self) -> None:
        """No event loop is running here: publish synchronously, then maybe exit."""
        logger.error("Uncaught exception, flushing traces")
        self._flush(self._grace_seconds)
        if self._policy == UncaughtExceptionPolicy.FLUSH_AND_EXIT:
            self._exit_func(1)

    def _loop_exception_handler(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        if self._previous_loop_handler is not None:
            self._previous_loop_handler(loop, context)
        else:
            loop.default_exception_handler(context)

        # Only failed tasks and callbacks; transport and close-time noise passes through
        if "exception" not in context:
            return
        if "future" not in context and "handle" not in context:
            return

        logger.error("Uncaught exception in event loop, flushing traces")
        self._flush(self._grace_seconds)
        if self._policy == UncaughtExceptionPolicy.FLUSH_AND_EXIT and not self._exit_scheduled:
            self._exit_scheduled = True
            loop.call_later(self._grace_seconds, self._exit_func, 1)
