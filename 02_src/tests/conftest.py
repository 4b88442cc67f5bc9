"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from trace_agent.config import TraceWriterConfig  # noqa: E402
from trace_agent.models import Span, SpanKind, Trace  # noqa: E402

DEFAULT_CONFIG = TraceWriterConfig(
    on_uncaught_exception="ignore",
    buffer_size=1_000_000,
    flush_delay_seconds=3600,
    stack_trace_limit=10,
    maximum_label_value_size=1 << 16,
)


def create_dummy_trace(kind: SpanKind = SpanKind.RPC_SERVER, **labels) -> Trace:
    """Trace with a single open span."""
    return Trace(
        trace_id="",
        spans=[
            Span(
                span_id="",
                name="",
                kind=kind,
                start_time="",
                end_time="",
                labels=dict(labels),
            )
        ],
    )


@pytest.fixture
def default_config():
    """Config that never flushes on its own."""
    return DEFAULT_CONFIG


@pytest.fixture
def metadata():
    """Create mock metadata client (not running on GCE)."""
    md = Mock()
    md.get_hostname = AsyncMock(return_value="test-host")
    md.get_instance_id = AsyncMock(return_value=None)
    md.get_project_id = AsyncMock(return_value="0")
    return md


@pytest.fixture
def transport():
    """Create mock transport answering 200."""
    tr = Mock()
    tr.request = AsyncMock(return_value=200)
    return tr


@pytest_asyncio.fixture
async def make_writer(metadata, transport):
    """Factory for TraceWriters that are stopped after the test."""
    from trace_agent.writer import TraceWriter

    writers = []

    def factory(config: TraceWriterConfig = DEFAULT_CONFIG, **kwargs):
        kwargs.setdefault("metadata", metadata)
        kwargs.setdefault("transport", transport)
        writer = TraceWriter(config, **kwargs)
        writers.append(writer)
        return writer

    yield factory

    for writer in writers:
        writer.stop()


def published_traces(transport, call_index: int = -1) -> list[dict]:
    """Decode the traces sent in one captured publish call."""
    import json

    request = transport.request.call_args_list[call_index].args[0]
    return json.loads(request.body)["traces"]
