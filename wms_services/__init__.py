"""
wms_services -- cross-module collaborators.

Responsibility:
    Infrastructure shared by the module services and selectors: the
    read-model cache.

Architecture position:
    Services -- may import from wms_kernel.  wms_kernel must never import
    from this package.
"""

from wms_services.cache import CacheBackend, InMemoryCache

__all__ = [
    "CacheBackend",
    "InMemoryCache",
]
