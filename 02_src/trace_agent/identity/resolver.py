"""Project identity resolution."""

import asyncio

from ..errors import IdentityUnavailable
from ..logging_config import get_logger
from ..metadata import IMetadataClient

logger = get_logger(__name__)


class IdentityResolver:
    """Memoizing async lookup of the project ID traces are published under."""

    def __init__(self, metadata: IMetadataClient, project_id: str | None = None):
        self._metadata = metadata
        self._project_id = project_id or None
        self._pending: asyncio.Task | None = None

    @property
    def project_id(self) -> str | None:
        """The cached project ID, or None until resolved."""
        return self._project_id

    @property
    def resolved(self) -> bool:
        return self._project_id is not None

    async def resolve_project_id(self) -> str:
        """Return the project ID, querying metadata at most once per success."""
        if self._project_id is not None:
            return self._project_id

        # Concurrent callers share the same lookup
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._lookup())

        pending = self._pending
        try:
            return await asyncio.shield(pending)
        finally:
            if pending.done() and self._pending is pending:
                self._pending = None

    async def _lookup(self) -> str:
        try:
            project_id = await self._metadata.get_project_id()
        except IdentityUnavailable:
            raise
        except Exception as e:
            raise IdentityUnavailable(
                f"Unable to acquire the project ID from the metadata service: {e}"
            ) from e

        if not project_id:
            raise IdentityUnavailable("Metadata service returned an empty project ID")

        self._project_id = project_id
        logger.debug("Resolved project ID %s", project_id)
        return project_id
