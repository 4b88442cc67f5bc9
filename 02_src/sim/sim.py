"""SIM implementation - hardcoded span scenario for exercising a trace writer."""

import asyncio
import random
import uuid
from typing import Protocol

from trace_agent.logging_config import get_logger
from trace_agent.models import Span, SpanKind, Trace, utc_timestamp
from trace_agent.writer import ITraceWriter

logger = get_logger(__name__)


class ISim(Protocol):
    """Generate test traces. Hardcoded scenario."""

    async def start(self) -> None:
        """Start hardcoded scenario."""
        ...

    async def stop(self) -> None:
        """Stop scenario."""
        ...


def make_request_trace(path: str, backend: str | None = None) -> Trace:
    """Build a trace for one served request, optionally with an outgoing call."""
    trace_id = uuid.uuid4().hex
    root = Span(
        span_id=str(random.getrandbits(63)),
        name=path,
        kind=SpanKind.RPC_SERVER,
        start_time=utc_timestamp(),
        labels={"/http/method": "GET", "/http/url": path},
    )
    spans = [root]
    if backend:
        spans.append(
            Span(
                span_id=str(random.getrandbits(63)),
                name=backend,
                kind=SpanKind.RPC_CLIENT,
                start_time=utc_timestamp(),
                end_time=utc_timestamp(),
                labels={"/http/host": backend},
            )
        )
    return Trace(trace_id=trace_id, spans=spans)


class Sim:
    """SIM with hardcoded scenario for testing."""

    def __init__(
        self,
        writer: ITraceWriter,
        rounds: int = 3,
        min_delay: float = 0.1,
        max_delay: float = 0.5,
    ):
        self._writer = writer
        self._rounds = rounds
        self._min_delay = min_delay
        self._max_delay = max_delay
        self._running = False
        self._task: asyncio.Task | None = None
        self.written = 0

    async def start(self) -> None:
        """Start hardcoded scenario."""
        if self._running:
            return

        self._running = True

        # Start background task
        self._task = asyncio.create_task(self._run_scenario())

    async def stop(self) -> None:
        """Stop scenario."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def wait(self) -> None:
        """Wait for the scenario to finish."""
        if self._task:
            await self._task

    async def _run_scenario(self) -> None:
        """Run hardcoded scenario."""
        requests = [
            ("/", None),
            ("/api/users", "users-db"),
            ("/api/orders", "orders-service"),
        ]

        try:
            for _ in range(self._rounds):
                if not self._running:
                    break

                for path, backend in requests:
                    if not self._running:
                        break

                    self._writer.write_span(make_request_trace(path, backend))
                    self.written += 1
                    logger.info("SIM: wrote trace for %s", path)

                    await asyncio.sleep(random.uniform(self._min_delay, self._max_delay))

        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("SIM scenario error: %s", e)
        finally:
            self._running = False
            logger.info("SIM: scenario finished after %d traces", self.written)
