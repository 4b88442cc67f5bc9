"""Trace and span data models."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class SpanKind(str, Enum):
    """Span kinds understood by the trace API."""

    UNSPECIFIED = "SPAN_KIND_UNSPECIFIED"
    RPC_SERVER = "RPC_SERVER"
    RPC_CLIENT = "RPC_CLIENT"


def utc_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


@dataclass
class Span:
    """A timed segment of work."""

    span_id: str
    name: str
    kind: SpanKind = SpanKind.UNSPECIFIED
    start_time: str = ""
    end_time: str = ""  # empty until closed
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Wire representation."""
        return {
            "spanId": self.span_id,
            "name": self.name,
            "kind": SpanKind(self.kind).value,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "labels": dict(self.labels),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Span":
        return cls(
            span_id=data.get("spanId", ""),
            name=data.get("name", ""),
            kind=SpanKind(data.get("kind", SpanKind.UNSPECIFIED.value)),
            start_time=data.get("startTime", ""),
            end_time=data.get("endTime", ""),
            labels=dict(data.get("labels") or {}),
        )


@dataclass
class Trace:
    """A set of related spans sharing a trace ID."""

    trace_id: str
    spans: list[Span] = field(default_factory=list)
    project_id: str = ""  # stamped when the trace is buffered

    def to_dict(self) -> dict:
        """Wire representation."""
        return {
            "projectId": self.project_id,
            "traceId": self.trace_id,
            "spans": [span.to_dict() for span in self.spans],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict) -> "Trace":
        return cls(
            trace_id=data.get("traceId", ""),
            spans=[Span.from_dict(span) for span in data.get("spans", [])],
            project_id=data.get("projectId", ""),
        )
