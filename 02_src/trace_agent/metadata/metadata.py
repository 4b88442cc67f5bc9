"""GCE metadata service client."""

import os
import socket
from typing import Protocol

import httpx

from ..config import TRACE_AGENT_REQUEST_HEADER
from ..errors import MetadataPartial
from ..logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_METADATA_HOST = "metadata.google.internal"


class IMetadataClient(Protocol):
    """Source of host, instance and project metadata."""

    async def get_hostname(self) -> str:
        """Host name, falling back to the local host name. Never fails."""
        ...

    async def get_instance_id(self) -> int | None:
        """Instance ID, or None when unavailable."""
        ...

    async def get_project_id(self) -> str:
        """Project ID. Raises MetadataPartial when it cannot be fetched."""
        ...


class MetadataClient:
    """Queries the GCE metadata server over HTTP."""

    def __init__(
        self,
        host: str | None = None,
        timeout: float = 3.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._host = host or os.getenv("GCE_METADATA_HOST", DEFAULT_METADATA_HOST)
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return f"http://{self._host}/computeMetadata/v1"

    async def _get(self, path: str) -> str:
        """Fetch one metadata value as text."""
        headers = {
            "Metadata-Flavor": "Google",
            TRACE_AGENT_REQUEST_HEADER: "1",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(f"{self.base_url}/{path}", headers=headers)
                response.raise_for_status()
                return response.text.strip()
        except httpx.ConnectError as e:
            # The metadata host does not resolve outside GCP
            raise MetadataPartial(f"metadata server unreachable: {e}", not_found=True) from e
        except httpx.HTTPError as e:
            raise MetadataPartial(f"metadata lookup {path} failed: {e}") from e

    async def get_hostname(self) -> str:
        try:
            return await self._get("instance/hostname")
        except MetadataPartial as e:
            if not e.not_found:
                logger.warning(
                    "Unable to retrieve GCE hostname from the metadata service: %s", e
                )
            return socket.gethostname()

    async def get_instance_id(self) -> int | None:
        try:
            value = await self._get("instance/id")
        except MetadataPartial as e:
            if not e.not_found:
                logger.warning(
                    "Unable to retrieve GCE instance ID from the metadata service: %s", e
                )
            return None

        try:
            return int(value)
        except ValueError:
            logger.warning("Metadata service returned a non-numeric instance ID: %r", value)
            return None

    async def get_project_id(self) -> str:
        project_id = await self._get("project/project-id")
        if not project_id:
            raise MetadataPartial("metadata service returned an empty project ID")
        return project_id
