"""Identity module."""

from .resolver import IdentityResolver

__all__ = ["IdentityResolver"]
