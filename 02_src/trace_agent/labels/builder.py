"""Default label construction."""

import asyncio
import socket
from collections.abc import Mapping
from types import MappingProxyType

from ..config import AGENT_NAME, AGENT_VERSION, TraceWriterConfig
from ..logging_config import get_logger
from ..metadata import IMetadataClient
from ..models import TraceLabels

logger = get_logger(__name__)

DEFAULT_MODULE_NAME = "default"


async def build_default_labels(
    config: TraceWriterConfig, metadata: IMetadataClient
) -> Mapping[str, str]:
    """
    Build the labels attached to every server span.

    Host name and instance ID are fetched concurrently. A failed lookup falls
    back to the local host name or no instance ID. The result is a read-only
    view; nothing holds a mutable reference to it.
    """
    hostname, instance_id = await asyncio.gather(
        metadata.get_hostname(),
        metadata.get_instance_id(),
        return_exceptions=True,
    )

    if isinstance(hostname, Exception):
        logger.warning("Hostname lookup failed, using local host name: %s", hostname)
        hostname = socket.gethostname()
    if isinstance(instance_id, Exception):
        logger.warning("Instance ID lookup failed: %s", instance_id)
        instance_id = None

    labels: dict[str, str] = {
        TraceLabels.AGENT_DATA: f"python {AGENT_NAME} v{AGENT_VERSION}",
        TraceLabels.GCE_HOSTNAME: str(hostname),
    }
    if instance_id:
        labels[TraceLabels.GCE_INSTANCE_ID] = str(instance_id)

    service_context = config.service_context
    module_name = service_context.service or str(hostname)
    labels[TraceLabels.GAE_MODULE_NAME] = module_name

    module_version = service_context.version
    if module_version:
        labels[TraceLabels.GAE_MODULE_VERSION] = module_version
        minor_version = service_context.minor_version
        if minor_version:
            version_label = ""
            if module_name != DEFAULT_MODULE_NAME:
                version_label = f"{module_name}:"
            version_label += f"{module_version}.{minor_version}"
            labels[TraceLabels.GAE_VERSION] = version_label

    return MappingProxyType(labels)
