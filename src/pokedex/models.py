"""Canonical Pydantic models shared across all pokedex modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CacheConfig`, :class:`RequestConfig` and :class:`GlobalConfig`.

**API payload models** -- decoded from raw PokeAPI response bodies by
:class:`~pokedex.client.pokeapi.PokeAPI`:
    :class:`NamedResource`, :class:`LocationAreaPage`,
    :class:`PokemonEncounter`, :class:`LocationArea`, :class:`StatSlot`,
    :class:`TypeSlot`, and :class:`Pokemon`.

PokeAPI returns far more fields than the client needs. Payload models use
``extra="ignore"`` so that unknown keys are dropped instead of failing
validation.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BASE_URL = "https://pokeapi.co/api/v2/"


# --- Configuration ---


class CacheConfig(BaseModel):
    """In-memory response cache settings stored in :class:`GlobalConfig`."""

    ttl_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Seconds before a cached response becomes eligible for eviction",
    )


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every API call."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=3, ge=0, description="Max retry attempts")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted as ``config.json``.

    See Also:
        :func:`~pokedex.config.load_global_config`: Read from disk.
        :func:`~pokedex.config.resolve_config`: Apply env and CLI overrides.
    """

    base_url: str = Field(default=DEFAULT_BASE_URL, description="PokeAPI root URL")
    page_size: int = Field(
        default=20, gt=0, description="Location areas per page for map/mapb"
    )
    prompt: str = Field(default="Pokedex > ", description="REPL prompt")
    cache: CacheConfig = Field(default_factory=CacheConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- API payloads ---


class NamedResource(BaseModel):
    """A ``{"name": ..., "url": ...}`` reference to another PokeAPI resource."""

    model_config = ConfigDict(extra="ignore")

    name: str
    url: str = ""


class LocationAreaPage(BaseModel):
    """One page of the ``location-area`` listing.

    ``next`` and ``previous`` are absolute URLs (or ``None`` at either end)
    and are fed back to :meth:`~pokedex.client.pokeapi.PokeAPI.location_area_page`
    by the ``map`` and ``mapb`` commands.
    """

    model_config = ConfigDict(extra="ignore")

    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None
    results: list[NamedResource] = Field(default_factory=list)


class PokemonEncounter(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pokemon: NamedResource


class LocationArea(BaseModel):
    """A single location area with the Pokemon that can be encountered there."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: str
    pokemon_encounters: list[PokemonEncounter] = Field(default_factory=list)


class StatSlot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    base_stat: int
    stat: NamedResource


class TypeSlot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    slot: int = 0
    type: NamedResource


class Pokemon(BaseModel):
    """The subset of the ``pokemon`` resource used by ``catch`` and ``inspect``."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: str
    base_experience: Optional[int] = None
    height: int = 0
    weight: int = 0
    stats: list[StatSlot] = Field(default_factory=list)
    types: list[TypeSlot] = Field(default_factory=list)
