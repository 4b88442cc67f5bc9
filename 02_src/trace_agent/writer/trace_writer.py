"""TraceWriter implementation."""

import asyncio
from collections.abc import Mapping, Sequence
from enum import Enum
from types import MappingProxyType
from typing import Callable, Protocol

from ..config import TraceWriterConfig
from ..errors import ConfigInvalid
from ..identity import IdentityResolver
from ..labels import build_default_labels
from ..logging_config import get_logger
from ..metadata import IMetadataClient, MetadataClient
from ..models import SpanKind, Trace, utc_timestamp
from .buffer import TraceBuffer
from .exception_hook import UncaughtExceptionHook
from .publisher import HttpxTransport, ICredentialProvider, ITransport, Publisher
from .scheduler import FlushScheduler

logger = get_logger(__name__)


InitCallback = Callable[[Exception | None], object]


class WriterState(str, Enum):
    """Lifecycle states of a TraceWriter."""

    INITIALIZING = "initializing"
    ACTIVE = "active"
    INERT = "inert"  # identity resolution failed, writes are dropped
    STOPPED = "stopped"


class ITraceWriter(Protocol):
    """Buffers traces and publishes them in the background."""

    async def initialize(self, callback: InitCallback | None = None) -> None:
        """Resolve identity and default labels, then start flushing."""
        ...

    def write_span(self, trace: Trace) -> None:
        """Close open spans and queue the trace for publishing."""
        ...

    def stop(self) -> None:
        """Stop scheduled flushing and drop later writes. In-flight publishes are not awaited."""
        ...


class TraceWriter:
    """Accumulates traces and publishes them to the trace API.

    Construct one instance per process and pass it to whatever emits spans.
    Traces written before initialize() completes are held and queued once
    the project ID and default labels are known.
    """

    def __init__(
        self,
        config: TraceWriterConfig,
        metadata: IMetadataClient | None = None,
        transport: ITransport | None = None,
        credentials: ICredentialProvider | None = None,
    ):
        try:
            config.validate()
        except ConfigInvalid as e:
            logger.error("Invalid trace writer configuration: %s", e)
            raise

        self._config = config
        self._metadata = metadata or MetadataClient()
        self._resolver = IdentityResolver(self._metadata, config.project_id)
        self._publisher = Publisher(
            transport or HttpxTransport(),
            credentials=credentials,
            api_base_url=config.api_base_url,
        )
        self._buffer = TraceBuffer()
        self._scheduler = FlushScheduler(self.flush_buffer, config.flush_delay_seconds)

        self._default_labels: Mapping[str, str] = MappingProxyType({})
        self._pending: list[Trace] = []
        self._publish_tasks: set[asyncio.Task] = set()
        self._state = WriterState.INITIALIZING
        self._initialize_started = False
        self._ready = False
        self._drop_logged = False

        self._exception_hook = UncaughtExceptionHook(
            config.uncaught_exception_policy, self.flush_for_exit
        )
        self._exception_hook.install()

    @property
    def config(self) -> TraceWriterConfig:
        return self._config

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def project_id(self) -> str | None:
        """Resolved project ID, or None until known."""
        return self._resolver.project_id

    @property
    def default_labels(self) -> Mapping[str, str]:
        """Read-only labels merged into server spans."""
        return self._default_labels

    @property
    def buffer_size(self) -> int:
        """Number of traces waiting for the next flush."""
        return len(self._buffer)

    async def initialize(self, callback: InitCallback | None = None) -> None:
        """
        Resolve the project ID and default labels concurrently, then start
        periodic flushing.

        Args:
            callback: Called with None on success or with the error when the
                project ID cannot be determined. Without a callback the error
                is raised instead.
        """
        if self._initialize_started:
            raise RuntimeError("TraceWriter already initialized")
        self._initialize_started = True

        self._exception_hook.attach_loop(asyncio.get_running_loop())

        identity_task = asyncio.create_task(self._resolver.resolve_project_id())
        labels_task = asyncio.create_task(
            build_default_labels(self._config, self._metadata)
        )
        project_id, default_labels = await asyncio.gather(
            identity_task, labels_task, return_exceptions=True
        )

        if isinstance(default_labels, BaseException):
            logger.error("Unable to build default labels: %s", default_labels)
        else:
            self._default_labels = default_labels

        if isinstance(project_id, BaseException):
            logger.error(
                "Unable to acquire the project ID automatically from the GCP "
                "metadata service. Please provide a valid project ID as "
                "environment variable GCLOUD_PROJECT, or as config.project_id, "
                "and check network access to the metadata service. "
                "Original error: %s",
                project_id,
            )
            self._become_inert()
            if callback is not None:
                callback(project_id)
                return
            raise project_id

        logger.info("Trace writer initialized for project %s", project_id)
        self._ready = True
        pending, self._pending = self._pending, []
        for trace in pending:
            self._queue_trace(trace)

        # The first periodic flush runs immediately, publishing held traces
        if self._state == WriterState.INITIALIZING:
            self._state = WriterState.ACTIVE
            self._scheduler.start()

        if callback is not None:
            callback(None)

    def write_span(self, trace: Trace) -> None:
        """Ensure every span is closed, then queue the trace for publishing."""
        for span in trace.spans:
            if not span.end_time:
                span.end_time = utc_timestamp()

        if self._state == WriterState.INERT:
            self._log_drop_once()
            return

        if self._state == WriterState.STOPPED:
            logger.debug("Trace writer stopped, dropping trace %s", trace.trace_id)
            return

        if not self._ready:
            self._pending.append(trace)
            return

        self._queue_trace(trace)

    def _queue_trace(self, trace: Trace) -> None:
        limit = self._config.label_value_limit
        for span in trace.spans:
            if span.kind == SpanKind.RPC_SERVER:
                for key, value in self._default_labels.items():
                    span.labels.setdefault(key, value)
            span.labels = {key: str(value)[:limit] for key, value in span.labels.items()}

        trace.project_id = self._resolver.project_id or ""
        size = self._buffer.append(trace.to_json())
        logger.debug("Buffered trace %s, buffer size = %d", trace.trace_id, size)

        # Publish soon if the buffer is getting big
        if size >= self._config.buffer_size:
            logger.info("Trace buffer full, flushing")
            self._scheduler.request_flush()

    def flush_buffer(self) -> asyncio.Task | None:
        """Drain the buffer and publish it in the background.

        Returns the publish task, or None when there was nothing to send.
        """
        if not len(self._buffer):
            return None

        loop = asyncio.get_running_loop()
        batch = self._buffer.drain()
        logger.debug("Flushing %d traces", len(batch))
        return self._spawn_publish(loop, batch)

    def flush_for_exit(self, timeout: float) -> None:
        """Flush on an uncaught exception.

        With a running loop in this thread the publish goes to the background;
        otherwise it runs to completion here, bounded by timeout.
        """
        if not len(self._buffer):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        batch = self._buffer.drain()
        if loop is not None:
            self._spawn_publish(loop, batch)
            return

        try:
            asyncio.run(
                asyncio.wait_for(
                    self._publisher.publish(self.project_id or "", batch), timeout
                )
            )
        except asyncio.TimeoutError:
            logger.error("Timed out publishing %d traces on exit", len(batch))

    def stop(self) -> None:
        """Stop scheduled flushing and drop later writes. In-flight publishes run to completion."""
        self._scheduler.stop()
        if self._state != WriterState.INERT:
            self._state = WriterState.STOPPED
        logger.info("Trace writer stopped")

    def _spawn_publish(
        self, loop: asyncio.AbstractEventLoop, batch: Sequence[str]
    ) -> asyncio.Task:
        task = loop.create_task(self._publisher.publish(self.project_id or "", batch))
        # Keep a reference until done; the outcome is only logged
        self._publish_tasks.add(task)
        task.add_done_callback(self._publish_tasks.discard)
        return task

    def _become_inert(self) -> None:
        self._state = WriterState.INERT
        self._scheduler.stop()
        if self._pending:
            self._pending.clear()
            self._log_drop_once()

    def _log_drop_once(self) -> None:
        if self._drop_logged:
            return
        self._drop_logged = True
        logger.info("No project ID, dropping traces")
