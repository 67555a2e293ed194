"""In-memory, time-bounded response cache with a background reaper.

:class:`ResponseCache` maps opaque request keys (canonical request URLs) to
the raw bytes of successful responses.  Every access to the mapping -- the
caller-facing :meth:`~ResponseCache.add` and :meth:`~ResponseCache.get` as
well as the reaper's sweep -- is serialised by a single coarse lock, so
callers never see a half-written entry and never have to lock anything
themselves.

Expiry is handled exclusively by a daemon thread started in the
constructor.  It wakes every ``ttl`` seconds and drops every entry whose age
is at least ``ttl``.  Lookups do not check age, so an entry that expired
just after a sweep stays visible until the next one: observed staleness is
bounded by ``2 * ttl``, not ``ttl``.

The reaper is stopped with :meth:`~ResponseCache.close` (or by leaving a
``with`` block), which makes tear-down deterministic in tests and on REPL
exit.

See Also:
    :class:`~pokedex.client.sync_client.SyncClient` -- the fetch-or-populate
    caller that owns the key format.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the time it was stored.

    Entries are never mutated; an overwrite replaces the whole entry.
    """

    created_at: float
    payload: bytes


class ResponseCache:
    """Thread-safe byte cache whose entries are swept after a fixed TTL.

    Args:
        ttl: Time-to-live in seconds.  Also the reaper's wake-up period.
        clock: Zero-argument callable returning the current time in
            seconds.  Defaults to :func:`time.monotonic`.

    Raises:
        ValueError: If *ttl* is not positive.

    Example::

        from pokedex.cache import ResponseCache

        with ResponseCache(5) as cache:
            cache.add("https://pokeapi.co/api/v2/location-area", b"{...}")
            payload, found = cache.get("https://pokeapi.co/api/v2/location-area")
    """

    def __init__(
        self,
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError(f"Cache TTL must be positive, got {ttl!r}")
        self._ttl = float(ttl)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._reaper = threading.Thread(
            target=self._reap_loop,
            name=f"pokedex-cache-reaper-{id(self):x}",
            daemon=True,
        )
        self._reaper.start()

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ResponseCache:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def ttl(self) -> float:
        """The configured time-to-live in seconds."""
        return self._ttl

    @property
    def running(self) -> bool:
        """Whether the reaper thread is still alive."""
        return self._reaper.is_alive()

    def add(self, key: str, value: bytes) -> None:
        """Store *value* under *key*, replacing any existing entry.

        The entry's age restarts at zero even if a sweep is in progress or
        about to run.

        Args:
            key: Opaque request key.
            value: Raw response body.
        """
        entry = CacheEntry(created_at=self._clock(), payload=value)
        with self._lock:
            self._entries[key] = entry

    def get(self, key: str) -> tuple[Optional[bytes], bool]:
        """Look up *key*.

        The entry's age is not checked; staleness is resolved only by the
        reaper.

        Args:
            key: Opaque request key.

        Returns:
            ``(payload, True)`` when an entry exists, ``(None, False)``
            otherwise.
        """
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None, False
        return entry.payload, True

    def reap(self, now: Optional[float] = None) -> int:
        """Remove every entry whose age is at least the TTL.

        Called by the reaper thread once per period; may also be called
        directly.

        Args:
            now: Reference time.  Defaults to the cache clock.

        Returns:
            The number of entries removed.
        """
        with self._lock:
            if now is None:
                now = self._clock()
            expired = [
                key
                for key, entry in self._entries.items()
                if now - entry.created_at >= self._ttl
            ]
            for key in expired:
                del self._entries[key]
            remaining = len(self._entries)
        if expired:
            logger.debug(
                "Reaped %d expired cache entries (%d remaining)", len(expired), remaining
            )
        return len(expired)

    def clear(self) -> None:
        """Remove all entries from the cache."""
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``size`` (number of entries), ``ttl_seconds``
            and ``running`` (whether the reaper is active).
        """
        return {
            "size": len(self),
            "ttl_seconds": self._ttl,
            "running": self.running,
        }

    def close(self) -> None:
        """Stop the reaper thread and wait for it to exit.

        Safe to call more than once.  Entries already in the cache remain
        readable but are no longer swept.
        """
        self._stop.set()
        if self._reaper.is_alive() and self._reaper is not threading.current_thread():
            self._reaper.join()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    # ------------------------------------------------------------------ #
    # Reaper
    # ------------------------------------------------------------------ #

    def _reap_loop(self) -> None:
        """Sweep once per TTL until :meth:`close` is called."""
        logger.debug("Cache reaper started (ttl=%ss)", self._ttl)
        while not self._stop.wait(self._ttl):
            self.reap()
        logger.debug("Cache reaper stopped")
