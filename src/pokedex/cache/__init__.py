"""In-memory response caching for pokedex.

This package provides :class:`ResponseCache`, a thread-safe store of raw
response bodies keyed by canonical request URL.  A background reaper
removes entries once they are at least ``ttl`` seconds old.

The cache is created by the application entry point, injected into
:class:`~pokedex.client.sync_client.SyncClient`, and closed when the
command or REPL session finishes.  Its TTL comes from the ``cache``
section of the global configuration (:class:`~pokedex.models.CacheConfig`).
"""

from pokedex.cache.cache import CacheEntry, ResponseCache

__all__ = ["CacheEntry", "ResponseCache"]
