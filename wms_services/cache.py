"""
wms_services.cache -- Read-model cache.

Responsibility:
    Key/value cache for selector DTOs with per-entry time-to-live.
    Services invalidate entries after a successful commit; selectors
    populate them on miss.

Architecture position:
    Services layer.  Depends only on ``wms_kernel.domain.clock`` so expiry
    is driven by the injected Clock, never by wall-clock calls.

Invariants enforced:
    - An entry is never returned after its expiry instant.
    - ``remove`` of an absent key is a no-op.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Protocol, runtime_checkable

from wms_kernel.domain.clock import Clock, SystemClock
from wms_kernel.logging_config import get_logger

logger = get_logger("services.cache")


@runtime_checkable
class CacheBackend(Protocol):
    """Structural interface any cache implementation must satisfy."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: int) -> None: ...

    def remove(self, key: str) -> None: ...


@dataclass(frozen=True)
class _Entry:
    value: Any
    expires_at: datetime


class InMemoryCache:
    """
    Process-local TTL cache.

    Thread-safe; entries expire lazily on read.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock.now() >= entry.expires_at:
                del self._entries[key]
                logger.debug("cache_entry_expired", extra={"cache_key": key})
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        expires_at = self._clock.now() + timedelta(seconds=ttl_seconds)
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def remove(self, key: str) -> None:
        with self._lock:
            if self._entries.pop(key, None) is not None:
                logger.debug("cache_entry_removed", extra={"cache_key": key})

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
