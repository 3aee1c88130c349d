"""
Process-local TTL cache.

Entries expire lazily: a read past ``expires_at`` evicts the entry and reports
a miss. Nothing survives a restart.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    """A cached value and the moment it stops being served."""
    key: str
    value: Any
    expires_at: datetime


class EphemeralCache:
    """Thread-safe key -> (value, expiry) store with lazy expiry."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """
        Return the stored value, or None on a miss.

        An expired entry is removed as a side effect.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() < entry.expires_at:
                return entry.value
            del self._entries[key]
            return None

    def set(self, key: str, value: Any, ttl_seconds: float) -> CacheEntry:
        """Store ``value`` under ``key`` for ``ttl_seconds``, replacing any entry."""
        entry = CacheEntry(
            key=key,
            value=value,
            expires_at=self._clock() + timedelta(seconds=ttl_seconds),
        )
        with self._lock:
            self._entries[key] = entry
        return entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        """Evict every expired entry; returns how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [key for key, entry in self._entries.items() if now >= entry.expires_at]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
