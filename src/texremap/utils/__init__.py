"""Small shared helpers (size and timestamp conversions)."""

from .convert_utils import ConvertUtils

__all__ = ["ConvertUtils"]
