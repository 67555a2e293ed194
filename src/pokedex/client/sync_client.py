"""Synchronous fetch-or-populate HTTP client with caching and retry.

This module provides :class:`SyncClient`, the blocking HTTP client used by
every pokedex command.  It wraps :class:`httpx.Client` and layers on:

- **Canonical keys** -- every request is reduced to one absolute URL with
  sorted query parameters, which doubles as the cache key.
- **Response caching** -- raw bodies of successful GET responses are stored
  in an injected :class:`~pokedex.cache.ResponseCache` and served from it on
  later identical requests.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).
- **Error mapping** -- non-2xx statuses become typed
  :class:`~pokedex.exceptions.PokedexError` subclasses.

The client never decodes bodies; :class:`~pokedex.client.pokeapi.PokeAPI`
does that on top of :meth:`SyncClient.fetch`.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Optional

import httpx

from pokedex.exceptions import ConnectionError_, NotFoundError, ServerError
from pokedex.models import DEFAULT_BASE_URL, RequestConfig
from pokedex.output import get_output

if TYPE_CHECKING:
    from pokedex.cache import ResponseCache


class SyncClient:
    """Synchronous HTTP client for PokeAPI calls.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.  The cache is owned by the caller and is
    not closed by the client.

    Args:
        request: Timeout, SSL and retry settings.
        base_url: API root that relative paths are resolved against.
        cache: Optional response cache.  Only 2xx bodies are stored.

    Example::

        with ResponseCache(5) as cache, SyncClient(RequestConfig(), cache=cache) as client:
            raw = client.fetch("location-area", {"offset": 0, "limit": 20})
    """

    def __init__(
        self,
        request: Optional[RequestConfig] = None,
        base_url: str = DEFAULT_BASE_URL,
        cache: Optional[ResponseCache] = None,
    ) -> None:
        self._request = request or RequestConfig()
        self._base_url = httpx.URL(base_url if base_url.endswith("/") else base_url + "/")
        self._cache = cache
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        self._client = httpx.Client(
            timeout=self._request.timeout,
            verify=self._request.verify_ssl,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def cache(self) -> Optional[ResponseCache]:
        return self._cache

    def make_key(self, path: str, params: Optional[dict[str, Any]] = None) -> str:
        """Build the canonical URL for a request.

        *path* is resolved against the base URL (absolute URLs such as
        pagination links are kept as-is).  Query parameters already present
        in *path* are merged with *params*, ``None`` values are dropped, and
        the result is sorted so that parameter order never changes the key.

        Args:
            path: Relative resource path or absolute URL.
            params: Extra query parameters.

        Returns:
            The absolute URL string used both for the request and as the
            cache key.
        """
        url = self._base_url.join(path)
        merged = list(url.params.multi_items())
        for key, value in (params or {}).items():
            if value is not None:
                merged.append((key, str(value)))
        return str(url.copy_with(params=httpx.QueryParams(sorted(merged))))

    def fetch(self, path: str, params: Optional[dict[str, Any]] = None) -> bytes:
        """Return the raw body for a GET request, using the cache when possible.

        On a cache hit the stored bytes are returned without network I/O.
        On a miss the request is sent; if and only if the response is 2xx
        its body is added to the cache.

        Args:
            path: Relative resource path or absolute URL.
            params: Query parameters.

        Returns:
            The raw response body.

        Raises:
            NotFoundError: On 404.
            ServerError: On any other non-2xx status after retries.
            ConnectionError_: On network / timeout errors after all retries.
        """
        output = get_output()
        key = self.make_key(path, params)

        if self._cache is not None:
            payload, found = self._cache.get(key)
            if found:
                output.debug(f"Cache hit: {key}")
                return payload  # type: ignore[return-value]
            output.debug(f"Cache miss: {key}")

        response = self._execute_with_retry(key)
        self._map_response_error(response)

        raw = response.content
        if self._cache is not None:
            self._cache.add(key, raw)
        return raw

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _execute_with_retry(self, url: str) -> httpx.Response:
        """Send ``GET url`` with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times. The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        max_retries = self._request.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = self._client.get(url)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"HTTP error when GET'ing {url} after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(delay)
                continue

            return response

        raise ServerError(f"Request to {url} failed after all retries")  # pragma: no cover

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for non-2xx HTTP status codes."""
        status = response.status_code
        if 200 <= status < 300:
            return

        msg = f"Invalid HTTP response code from {response.request.url}, status: {status}"
        if status == 404:
            raise NotFoundError(msg)
        raise ServerError(msg)
