"""Shared test fixtures for pokedex.

Provides a fake PokeAPI served through :class:`httpx.MockTransport`,
isolated config environments, output state management, and a CLI runner.
These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Union

import httpx
import pytest

from pokedex.cache import ResponseCache
from pokedex.client import PokeAPI, SyncClient
from pokedex.models import RequestConfig
from pokedex.output import OutputFormat, OutputManager, reset_output, set_output


BASE_URL = "https://pokeapi.test/api/v2/"

Route = Union[dict[str, Any], tuple[int, Any]]


class FakePokeAPI:
    """Route table standing in for PokeAPI.

    Routes are keyed by raw path plus (sorted) query string.  A plain dict
    value is served as a 200 JSON body; a ``(status, body)`` tuple is served
    as-is.  Unknown paths answer 404.  Every request path is recorded in
    :attr:`calls`.
    """

    def __init__(self, routes: dict[str, Route]) -> None:
        self.routes = routes
        self.calls: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        key = request.url.raw_path.decode()
        self.calls.append(key)
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(route, tuple):
            status, body = route
        else:
            status, body = 200, route
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def count(self, key: str) -> int:
        return self.calls.count(key)


def _area_ref(name: str) -> dict[str, str]:
    return {"name": name, "url": f"{BASE_URL}location-area/{name}/"}


DEFAULT_ROUTES: dict[str, Route] = {
    "/api/v2/location-area?limit=2&offset=0": {
        "count": 5,
        "next": f"{BASE_URL}location-area?offset=2&limit=2",
        "previous": None,
        "results": [_area_ref("canalave-city-area"), _area_ref("eterna-city-area")],
    },
    "/api/v2/location-area?limit=2&offset=2": {
        "count": 5,
        "next": f"{BASE_URL}location-area?offset=4&limit=2",
        "previous": f"{BASE_URL}location-area?offset=0&limit=2",
        "results": [_area_ref("pastoria-city-area"), _area_ref("sunyshore-city-area")],
    },
    "/api/v2/location-area?limit=2&offset=4": {
        "count": 5,
        "next": None,
        "previous": f"{BASE_URL}location-area?offset=2&limit=2",
        "results": [_area_ref("sinnoh-pokemon-league-area")],
    },
    "/api/v2/location-area/canalave-city-area": {
        "id": 1,
        "name": "canalave-city-area",
        "game_index": 1,
        "pokemon_encounters": [
            {"pokemon": {"name": "tentacool", "url": f"{BASE_URL}pokemon/72/"}},
            {"pokemon": {"name": "staryu", "url": f"{BASE_URL}pokemon/120/"}},
        ],
    },
    "/api/v2/pokemon/pikachu": {
        "id": 25,
        "name": "pikachu",
        "base_experience": 112,
        "height": 4,
        "weight": 60,
        "stats": [
            {"base_stat": 35, "effort": 0, "stat": {"name": "hp", "url": ""}},
            {"base_stat": 55, "effort": 0, "stat": {"name": "attack", "url": ""}},
        ],
        "types": [{"slot": 1, "type": {"name": "electric", "url": ""}}],
    },
    "/api/v2/pokemon/mewtwo": {
        "id": 150,
        "name": "mewtwo",
        "base_experience": 340,
        "height": 20,
        "weight": 1220,
        "stats": [],
        "types": [{"slot": 1, "type": {"name": "psychic", "url": ""}}],
    },
    "/api/v2/pokemon/missingno": (500, {"detail": "glitch"}),
}


class FakeClock:
    """Manually advanced clock for deterministic cache ageing."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> Iterator[None]:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; a stale manager would write to closed capture streams.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake API fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_pokeapi() -> FakePokeAPI:
    """A fresh fake PokeAPI with the default route table."""
    return FakePokeAPI(dict(DEFAULT_ROUTES))


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def response_cache(clock: FakeClock) -> Iterator[ResponseCache]:
    """A cache on the fake clock whose reaper never fires during a test."""
    with ResponseCache(3600, clock=clock) as cache:
        yield cache


@pytest.fixture
def sync_client(
    fake_pokeapi: FakePokeAPI, response_cache: ResponseCache
) -> Iterator[SyncClient]:
    """An entered SyncClient wired to the fake API and the test cache."""
    with SyncClient(
        RequestConfig(max_retries=0), base_url=BASE_URL, cache=response_cache
    ) as client:
        assert client._client is not None
        client._client.close()
        client._client = httpx.Client(transport=httpx.MockTransport(fake_pokeapi.handler))
        yield client


@pytest.fixture
def pokeapi(sync_client: SyncClient) -> PokeAPI:
    return PokeAPI(sync_client)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    and clears all POKEDEX_* environment variables.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setattr("pokedex.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["POKEDEX_BASE_URL", "POKEDEX_CACHE_TTL"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> Iterator[OutputManager]:
    """Install a PLAIN-format, colourless OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def quiet_output() -> Iterator[OutputManager]:
    """Set up a quiet output manager for tests that don't care about output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
