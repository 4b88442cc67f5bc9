"""Error types raised by the trace agent."""


class TraceAgentError(Exception):
    """Base class for trace agent errors."""


class ConfigInvalid(TraceAgentError, ValueError):
    """Writer configuration cannot be used. Raised at construction."""


class IdentityUnavailable(TraceAgentError):
    """The project ID could not be determined."""


class MetadataPartial(TraceAgentError):
    """A single metadata lookup failed; callers fall back to local values."""

    def __init__(self, message: str, not_found: bool = False):
        super().__init__(message)
        # True when the metadata server is unreachable (not running on GCE)
        self.not_found = not_found


class PublishFailed(TraceAgentError):
    """The trace API rejected a publish request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
