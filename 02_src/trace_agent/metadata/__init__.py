"""Metadata module."""

from .metadata import IMetadataClient, MetadataClient

__all__ = ["IMetadataClient", "MetadataClient"]
