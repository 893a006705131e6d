"""Read-only query selectors."""

from wms_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
