"""Main entry point: run the SIM scenario through a trace writer."""

import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv

from sim import Sim
from trace_agent import StaticTokenCredentials, TraceWriter, TraceWriterConfig
from trace_agent.logging_config import get_logger, level_from_numeric, setup_logging

logger = get_logger(__name__)


def load_config() -> TraceWriterConfig:
    """Writer config with demo-friendly flush settings."""
    return TraceWriterConfig.from_env(
        buffer_size=int(os.getenv("TRACE_BUFFER_SIZE", "5")),
        flush_delay_seconds=float(os.getenv("TRACE_FLUSH_DELAY_SECONDS", "2")),
    )


async def run(config: TraceWriterConfig) -> None:
    """Initialize a writer, run the scenario, then flush and stop."""
    # Get credentials from environment
    access_token = os.getenv("TRACE_ACCESS_TOKEN")
    credentials = StaticTokenCredentials(access_token) if access_token else None

    writer = TraceWriter(config, credentials=credentials)
    await writer.initialize()

    sim = Sim(writer)
    await sim.start()
    await sim.wait()

    writer.flush_buffer()
    writer.stop()

    # Give in-flight publishes a moment to leave the process
    await asyncio.sleep(1)


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    config = load_config()
    setup_logging(os.getenv("TRACE_AGENT_LOG_LEVEL") or level_from_numeric(config.log_level))
    asyncio.run(run(config))


if __name__ == "__main__":
    main()
