"""HTTP client module for pokedex.

Classes:
    :class:`SyncClient` -- blocking fetch-or-populate client backed by
    :class:`httpx.Client` and an optional :class:`~pokedex.cache.ResponseCache`.
    :class:`PokeAPI` -- decodes raw bodies into :mod:`pokedex.models` payloads.

Example::

    from pokedex.cache import ResponseCache
    from pokedex.client import PokeAPI, SyncClient

    with ResponseCache(5) as cache, SyncClient(cache=cache) as client:
        page = PokeAPI(client).location_areas(limit=5)
"""

from pokedex.client.pokeapi import PokeAPI
from pokedex.client.sync_client import SyncClient

__all__ = ["SyncClient", "PokeAPI"]
