"""
Security utilities for the notification relay: API-key check, client
hashing and a per-client fixed-window rate limiter.
"""

import hashlib
import hmac
import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


def hash_client_address(ip_address: Optional[str]) -> Optional[str]:
    """
    Hash a client IP so raw addresses never sit in memory or logs.

    Args:
        ip_address: Raw IP address string (IPv4 or IPv6)

    Returns:
        First 16 hex characters of a salted SHA-256, or None if input is empty
    """
    if not ip_address or not ip_address.strip():
        return None

    salt = "civic_guard_relay"
    return hashlib.sha256(f"{salt}{ip_address.strip()}".encode()).hexdigest()[:16]


def keys_match(provided: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time API key comparison. A missing key never matches."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


class FixedWindowRateLimiter:
    """
    Allows `limit` hits per client per `window_seconds`.

    In-process only: counts reset on restart and are not shared between
    workers.
    """

    def __init__(self, limit: int, window_seconds: int = 60, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Tuple[int, int]] = {}  # client -> (window index, count)
        self._lock = threading.Lock()

    def allow(self, client_key: Optional[str]) -> bool:
        """
        Record a hit and report whether it is within the limit.
        A limit of 0 (or less) disables limiting.
        """
        if self.limit <= 0:
            return True

        key = client_key or "unknown"
        window = int(self._clock() // self.window_seconds)

        with self._lock:
            current_window, count = self._hits.get(key, (window, 0))
            if current_window != window:
                count = 0
            count += 1
            self._hits[key] = (window, count)

            # Drop stale windows so the table does not grow without bound
            if len(self._hits) > 10000:
                self._hits = {k: v for k, v in self._hits.items() if v[0] == window}

        if count > self.limit:
            logger.warning(f"Rate limit exceeded for client {key}: {count}/{self.limit}")
            return False
        return True

    def reset(self) -> None:
        with self._lock:
            self._hits = {}
