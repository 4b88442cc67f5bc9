"""Writer module."""

from .buffer import TraceBuffer
from .exception_hook import UncaughtExceptionHook
from .publisher import (
    HttpxTransport,
    ICredentialProvider,
    ITransport,
    NoCredentials,
    PublishOutcome,
    PublishRequest,
    Publisher,
    StaticTokenCredentials,
    build_payload,
)
from .scheduler import FlushScheduler
from .trace_writer import ITraceWriter, TraceWriter, WriterState

__all__ = [
    "FlushScheduler",
    "HttpxTransport",
    "ICredentialProvider",
    "ITraceWriter",
    "ITransport",
    "NoCredentials",
    "PublishOutcome",
    "PublishRequest",
    "Publisher",
    "StaticTokenCredentials",
    "TraceBuffer",
    "TraceWriter",
    "UncaughtExceptionHook",
    "WriterState",
    "build_payload",
]
