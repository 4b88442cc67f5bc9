"""Trace agent: buffers spans and publishes them to the trace API."""

from .config import (
    AGENT_VERSION,
    ServiceContext,
    TraceWriterConfig,
    UncaughtExceptionPolicy,
)
from .errors import (
    ConfigInvalid,
    IdentityUnavailable,
    MetadataPartial,
    PublishFailed,
    TraceAgentError,
)
from .identity import IdentityResolver
from .labels import build_default_labels
from .metadata import IMetadataClient, MetadataClient
from .models import Span, SpanKind, Trace, TraceLabels
from .writer import (
    HttpxTransport,
    ICredentialProvider,
    ITraceWriter,
    ITransport,
    PublishOutcome,
    PublishRequest,
    Publisher,
    StaticTokenCredentials,
    TraceWriter,
    WriterState,
)

__version__ = AGENT_VERSION

__all__ = [
    # Config
    "ServiceContext",
    "TraceWriterConfig",
    "UncaughtExceptionPolicy",
    # Errors
    "TraceAgentError",
    "ConfigInvalid",
    "IdentityUnavailable",
    "MetadataPartial",
    "PublishFailed",
    # Models
    "Span",
    "SpanKind",
    "Trace",
    "TraceLabels",
    # Components
    "IMetadataClient",
    "MetadataClient",
    "IdentityResolver",
    "build_default_labels",
    "ITransport",
    "HttpxTransport",
    "ICredentialProvider",
    "StaticTokenCredentials",
    "PublishRequest",
    "PublishOutcome",
    "Publisher",
    "ITraceWriter",
    "TraceWriter",
    "WriterState",
]
