"""Publishing of trace batches to the trace API."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from ..config import TRACE_AGENT_REQUEST_HEADER, TRACE_API_BASE_URL
from ..errors import PublishFailed
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PublishRequest:
    """Description of one outbound publish call."""

    method: str
    uri: str
    body: str
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PublishOutcome:
    """Result of a publish attempt."""

    success: bool
    status_code: int | None = None
    error: str | None = None
    trace_count: int = 0


class ITransport(Protocol):
    """Network transport for publish calls."""

    async def request(self, request: PublishRequest) -> int:
        """Send the request and return the HTTP status code. Raises on network errors."""
        ...


class ICredentialProvider(Protocol):
    """Supplies authorization headers for publish calls."""

    async def get_headers(self) -> dict[str, str]:
        """Return headers to add to the request. Raises if credentials are unavailable."""
        ...


class NoCredentials:
    """Sends requests without authorization headers."""

    async def get_headers(self) -> dict[str, str]:
        return {}


class StaticTokenCredentials:
    """Bearer token credentials from a fixed access token."""

    def __init__(self, access_token: str):
        if not access_token:
            raise ValueError("access_token must not be empty")
        self._access_token = access_token

    async def get_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token}"}


class HttpxTransport:
    """Transport backed by httpx.AsyncClient."""

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._transport = transport

    async def request(self, request: PublishRequest) -> int:
        # A fresh client per call keeps the transport usable from any event loop
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            response = await client.request(
                request.method,
                request.uri,
                content=request.body,
                headers=request.headers,
            )
            return response.status_code


def build_payload(batch: Sequence[str]) -> str:
    """Join serialized traces into the {"traces": [...]} wire payload."""
    return '{"traces":[' + ",".join(batch) + "]}"


class Publisher:
    """Sends one batch per call. Never retries; failures are only logged."""

    def __init__(
        self,
        transport: ITransport,
        credentials: ICredentialProvider | None = None,
        api_base_url: str = TRACE_API_BASE_URL,
    ):
        self._transport = transport
        self._credentials = credentials or NoCredentials()
        self._api_base_url = api_base_url.rstrip("/")

    def traces_uri(self, project_id: str) -> str:
        return f"{self._api_base_url}/projects/{project_id}/traces"

    async def publish(self, project_id: str, batch: Sequence[str]) -> PublishOutcome:
        """Publish a batch of serialized traces and log the outcome."""
        uri = self.traces_uri(project_id)
        status_code: int | None = None
        logger.info("Publishing %d traces to %s", len(batch), uri)

        try:
            headers = {
                "Content-Type": "application/json",
                TRACE_AGENT_REQUEST_HEADER: "1",
            }
            headers.update(await self._credentials.get_headers())

            request = PublishRequest(
                method="PATCH",
                uri=uri,
                body=build_payload(batch),
                headers=headers,
            )
            status_code = await self._transport.request(request)
            if not 200 <= status_code < 300:
                raise PublishFailed(
                    f"trace API responded with status {status_code}",
                    status_code=status_code,
                )

        except Exception as e:
            logger.error(
                "Publish failed with status code %s, dropping %d traces. Original error: %s",
                status_code if status_code is not None else "unknown",
                len(batch),
                e,
                extra={"context": {"project_id": project_id, "status_code": status_code}},
            )
            return PublishOutcome(
                success=False,
                status_code=status_code,
                error=str(e),
                trace_count=len(batch),
            )

        logger.info(
            "Published traces with status code %s",
            status_code,
            extra={"context": {"project_id": project_id, "trace_count": len(batch)}},
        )
        return PublishOutcome(success=True, status_code=status_code, trace_count=len(batch))
