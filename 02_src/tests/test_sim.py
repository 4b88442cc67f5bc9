"""Tests for the SIM scenario."""

from unittest.mock import Mock

import pytest

from sim import Sim, make_request_trace
from trace_agent.models import SpanKind


class TestMakeRequestTrace:
    """Tests for make_request_trace()."""

    def test_server_span_only(self):
        trace = make_request_trace("/")

        assert len(trace.spans) == 1
        assert trace.spans[0].kind == SpanKind.RPC_SERVER
        assert trace.spans[0].end_time == ""

    def test_backend_adds_closed_client_span(self):
        """Test that an outgoing call becomes a finished client span."""
        trace = make_request_trace("/api/users", "users-db")

        client = trace.spans[1]
        assert client.kind == SpanKind.RPC_CLIENT
        assert client.end_time
        assert client.labels["/http/host"] == "users-db"


class TestSim:
    """Tests for Sim."""

    @pytest.mark.asyncio
    async def test_writes_every_request(self):
        """Test that each round writes one trace per request."""
        writer = Mock()
        sim = Sim(writer, rounds=2, min_delay=0, max_delay=0)

        await sim.start()
        await sim.wait()

        assert sim.written == 6
        assert writer.write_span.call_count == 6

    @pytest.mark.asyncio
    async def test_stop_ends_scenario(self):
        writer = Mock()
        sim = Sim(writer, rounds=100, min_delay=1, max_delay=1)

        await sim.start()
        await sim.stop()

        assert sim.written <= 1
