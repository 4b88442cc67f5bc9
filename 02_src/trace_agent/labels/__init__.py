"""Labels module."""

from .builder import DEFAULT_MODULE_NAME, build_default_labels

__all__ = ["DEFAULT_MODULE_NAME", "build_default_labels"]
