"""Core data models for the trace agent."""

from .labels import TraceLabels
from .tracing import Span, SpanKind, Trace, utc_timestamp

__all__ = [
    # Tracing
    "Span",
    "SpanKind",
    "Trace",
    "utc_timestamp",
    # Labels
    "TraceLabels",
]
