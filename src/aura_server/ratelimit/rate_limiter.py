"""
Rate Limiter

In-memory sliding-window admission control keyed per client.

Design choices
--------------
- In-memory only (no persistence across process restarts). The goal is
  abuse mitigation, not hard quotas.
- One timestamp list per key, always ascending and inside the trailing
  window after a check.
- The check-and-append sequence runs under a re-entrant lock, so concurrent
  admissions for the same key never lose updates.
- A periodic sweep reclaims keys that have gone quiet, bounding memory under
  load from many distinct clients.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, Dict, List, NamedTuple

logger = logging.getLogger("aura.ratelimit")


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class RateLimitDecision(NamedTuple):
    """Outcome of a single admission check."""
    allowed: bool
    retry_after_ms: int
    remaining: int


@dataclass
class RateLimitEntry:
    """Timestamps (ms, ascending) of admitted requests for one key."""
    window_ms: int
    timestamps: List[float] = field(default_factory=list)

    def prune(self, now: float) -> None:
        cutoff = now - self.window_ms
        # Timestamps are ascending, so stale ones form a prefix.
        drop = 0
        for ts in self.timestamps:
            if ts > cutoff:
                break
            drop += 1
        if drop:
            del self.timestamps[:drop]


class RateLimiter:
    """
    Sliding-window rate limiter.

    Safe to share between async request handlers and thread-pool callers.
    """

    def __init__(self, clock: Callable[[], float] = _monotonic_ms) -> None:
        """
        Parameters
        ----------
        clock : Callable[[], float]
            Millisecond clock. Defaults to a monotonic clock; tests inject a
            fake one.
        """
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = RLock()
        self._clock = clock

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def admit(self, key: str, limit: int, window_ms: int) -> RateLimitDecision:
        """
        Check whether one more request for ``key`` fits in the window.

        Parameters
        ----------
        key : str
            Client identity, optionally namespaced by endpoint.
        limit : int
            Maximum admitted requests within any trailing ``window_ms``.
        window_ms : int
            Window length in milliseconds.

        Returns
        -------
        RateLimitDecision
            ``allowed`` with the remaining budget, or a denial carrying the
            time until the oldest admitted request leaves the window.
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is None:
                entry = RateLimitEntry(window_ms=window_ms)
                self._entries[key] = entry
            entry.window_ms = window_ms
            entry.prune(now)

            if len(entry.timestamps) >= limit:
                oldest = entry.timestamps[0] if entry.timestamps else now
                retry_after = max(1, math.ceil(oldest + window_ms - now))
                logger.debug("Rate limit hit for %s (retry in %d ms)", key, retry_after)
                return RateLimitDecision(
                    allowed=False,
                    retry_after_ms=retry_after,
                    remaining=0,
                )

            entry.timestamps.append(now)
            return RateLimitDecision(
                allowed=True,
                retry_after_ms=0,
                remaining=limit - len(entry.timestamps),
            )

    def sweep(self) -> int:
        """
        Drop stale timestamps everywhere and remove keys left empty.

        Returns
        -------
        int
            Number of keys removed.
        """
        with self._lock:
            now = self._clock()
            stale_keys = []
            for key, entry in self._entries.items():
                entry.prune(now)
                if not entry.timestamps:
                    stale_keys.append(key)

            for key in stale_keys:
                del self._entries[key]

            return len(stale_keys)

    async def run_cleanup(self, interval_s: float = 300.0) -> None:
        """
        Background task sweeping the store every ``interval_s`` seconds.

        Runs until cancelled.
        """
        logger.info("Rate limiter cleanup started (interval=%ss)", interval_s)
        while True:
            try:
                await asyncio.sleep(interval_s)
                removed = self.sweep()
                if removed:
                    logger.debug("Rate limiter reclaimed %d idle keys", removed)
            except asyncio.CancelledError:
                logger.info("Rate limiter cleanup cancelled.")
                break

    # ------------------------------------------------------------------
    # Utility operations
    # ------------------------------------------------------------------

    def timestamps_for(self, key: str) -> List[float]:
        """Return a copy of the admitted timestamps for ``key``."""
        with self._lock:
            entry = self._entries.get(key)
            return list(entry.timestamps) if entry else []

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
