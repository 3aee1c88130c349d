"""
Rate limiter for the rental search API.

Implements per-identity fixed-window counters so a single caller cannot flood
the listing store or the geocoding provider.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from rental_search.config import RateLimitConfig
from rental_search.error_handling import RateLimitExceeded


logger = logging.getLogger(__name__)


class EndpointClass(str, Enum):
    """Endpoint classes with independent ceilings."""
    GENERAL = "general"
    AUTH = "auth"
    CREATE = "create"


@dataclass
class RateRecord:
    """
    Request counter for one (identity, endpoint class) pair.

    Attributes:
        identity: Caller's network identity
        endpoint_class: Endpoint class the counter applies to
        count: Requests seen in the current window
        window_start: When the current window opened
    """
    identity: str
    endpoint_class: EndpointClass
    count: int
    window_start: datetime


class RateLimiter:
    """
    Fixed-window rate limiter keyed by caller identity and endpoint class.

    All reads and writes of the record map happen under one lock, so
    concurrent increments are never lost.

    Attributes:
        window: Length of a rate window
        ceilings: Maximum requests per window for each endpoint class
        max_tracked_records: Map size that triggers a sweep of stale records
    """

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize rate limiter with configuration.

        Args:
            config: Window length and class ceilings (default: RateLimitConfig())
            clock: Source of the current time (default: datetime.now)
        """
        config = config or RateLimitConfig()
        self.window = timedelta(seconds=config.window_seconds)
        self.ceilings: Dict[EndpointClass, int] = {
            EndpointClass.GENERAL: config.general_max_requests,
            EndpointClass.AUTH: config.auth_max_requests,
            EndpointClass.CREATE: config.create_max_requests,
        }
        self.max_tracked_records = config.max_tracked_records
        self._clock = clock
        self._records: Dict[Tuple[str, EndpointClass], RateRecord] = {}
        self._lock = threading.Lock()

    def check(self, identity: str, endpoint_class: EndpointClass = EndpointClass.GENERAL) -> RateRecord:
        """
        Count a request and enforce the class ceiling.

        Resets the caller's window if it has expired, then increments the
        counter. Rejected requests still count toward the window.

        Args:
            identity: Caller's network identity
            endpoint_class: Endpoint class being requested

        Returns:
            Snapshot of the caller's record after the increment

        Raises:
            RateLimitExceeded: If the post-increment count exceeds the ceiling
        """
        endpoint_class = EndpointClass(endpoint_class)
        ceiling = self.ceilings[endpoint_class]

        with self._lock:
            now = self._clock()
            if len(self._records) >= self.max_tracked_records:
                self._purge_expired_locked(now)

            key = (identity, endpoint_class)
            record = self._records.get(key)
            if record is None:
                record = RateRecord(identity, endpoint_class, 0, now)
                self._records[key] = record
            elif now - record.window_start > self.window:
                record.count = 0
                record.window_start = now

            record.count += 1
            snapshot = RateRecord(identity, endpoint_class, record.count, record.window_start)
            retry_after = self._retry_after(record, now)

        if snapshot.count > ceiling:
            logger.warning(
                f"Rate limit exceeded for identity {identity} on {endpoint_class.value} endpoint "
                f"({snapshot.count}/{ceiling})"
            )
            raise RateLimitExceeded(identity, endpoint_class.value, retry_after)

        return snapshot

    def get_record(self, identity: str, endpoint_class: EndpointClass = EndpointClass.GENERAL) -> Optional[RateRecord]:
        """Return a copy of the caller's record, or None if untracked."""
        with self._lock:
            record = self._records.get((identity, EndpointClass(endpoint_class)))
            if record is None:
                return None
            return RateRecord(record.identity, record.endpoint_class, record.count, record.window_start)

    def purge_expired(self) -> int:
        """
        Drop records whose window has elapsed.

        Returns:
            Number of records removed
        """
        with self._lock:
            return self._purge_expired_locked(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _purge_expired_locked(self, now: datetime) -> int:
        stale = [
            key for key, record in self._records.items()
            if now - record.window_start > self.window
        ]
        for key in stale:
            del self._records[key]
        return len(stale)

    def _retry_after(self, record: RateRecord, now: datetime) -> int:
        """Whole seconds until the caller's window resets (at least 1)."""
        remaining = (record.window_start + self.window - now).total_seconds()
        return max(1, int(remaining) + 1)
