"""Trace writer configuration and environment helpers."""

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Union

from dotenv import load_dotenv

from .errors import ConfigInvalid

AGENT_NAME = "trace-agent"
AGENT_VERSION = "0.1.0"

TRACE_API_BASE_URL = "https://cloudtrace.googleapis.com/v1"
TRACE_AGENT_REQUEST_HEADER = "x-cloud-trace-agent-request"

# Upper bound accepted by the trace API for a single label value.
MAX_LABEL_VALUE_SIZE = 16383

PathLike = Union[str, Path]


class UncaughtExceptionPolicy(str, Enum):
    """What the writer does when the process hits an uncaught exception."""

    IGNORE = "ignore"
    FLUSH = "flush"
    FLUSH_AND_EXIT = "flushAndExit"


@dataclass(frozen=True)
class ServiceContext:
    """Service identity attached to server spans."""

    service: str | None = None
    version: str | None = None
    minor_version: str | None = None


@dataclass(frozen=True)
class TraceWriterConfig:
    """Immutable settings for one TraceWriter instance."""

    project_id: str | None = None
    buffer_size: int = 1000
    flush_delay_seconds: float = 30
    on_uncaught_exception: str = UncaughtExceptionPolicy.IGNORE.value
    service_context: ServiceContext = field(default_factory=ServiceContext)
    stack_trace_limit: int = 10
    maximum_label_value_size: int = 512
    log_level: int = 1
    api_base_url: str = TRACE_API_BASE_URL

    @property
    def uncaught_exception_policy(self) -> UncaughtExceptionPolicy:
        """Parsed on_uncaught_exception value."""
        return UncaughtExceptionPolicy(self.on_uncaught_exception)

    @property
    def label_value_limit(self) -> int:
        """Label value size clamped to what the API accepts."""
        return min(self.maximum_label_value_size, MAX_LABEL_VALUE_SIZE)

    def validate(self) -> None:
        """Raise ConfigInvalid for settings the writer cannot run with."""
        allowed = [policy.value for policy in UncaughtExceptionPolicy]
        if self.on_uncaught_exception not in allowed:
            raise ConfigInvalid(
                f"Invalid value for on_uncaught_exception "
                f"[{self.on_uncaught_exception}], should be one of "
                f"[{', '.join(allowed)}]"
            )
        if self.buffer_size < 1:
            raise ConfigInvalid(f"buffer_size must be positive, got {self.buffer_size}")
        if self.flush_delay_seconds <= 0:
            raise ConfigInvalid(
                f"flush_delay_seconds must be positive, got {self.flush_delay_seconds}"
            )

    @classmethod
    def from_env(
        cls, env_file: PathLike | None = None, **overrides
    ) -> "TraceWriterConfig":
        """
        Build a config from the environment.

        Loads a .env file first (no-op if missing). GCLOUD_PROJECT takes
        precedence over an explicit project_id override, mirroring how the
        agent is deployed on GCP.

        Args:
            env_file: Optional path to a .env file.
            **overrides: Field values applied on top of the defaults.
        """
        load_dotenv(env_file)

        config = replace(cls(), **overrides)

        project_id = resolve_project_id(os.getenv("GCLOUD_PROJECT"), config.project_id)
        log_level = os.getenv("GCLOUD_TRACE_LOGLEVEL")

        service_context = ServiceContext(
            service=os.getenv("GAE_SERVICE")
            or os.getenv("GAE_MODULE_NAME")
            or config.service_context.service,
            version=os.getenv("GAE_VERSION")
            or os.getenv("GAE_MODULE_VERSION")
            or config.service_context.version,
            minor_version=os.getenv("GAE_MINOR_VERSION")
            or config.service_context.minor_version,
        )

        return replace(
            config,
            project_id=project_id,
            log_level=int(log_level) if log_level else config.log_level,
            service_context=service_context,
        )


def resolve_project_id(env_value: str | None, configured: str | None = None) -> str | None:
    """Pick the project ID: environment first, then configuration."""
    if env_value:
        return env_value
    return configured or None
