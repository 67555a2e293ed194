"""PokeAPI facade -- decodes raw response bodies into payload models.

:class:`PokeAPI` sits on top of :meth:`~pokedex.client.sync_client.SyncClient.fetch`.
The client hands back raw bytes (possibly straight from the response
cache); this module is the only place they are parsed.

See Also:
    :mod:`pokedex.models` -- the payload models.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from pokedex.client.sync_client import SyncClient
from pokedex.exceptions import ResponseDecodeError
from pokedex.models import LocationArea, LocationAreaPage, Pokemon

if TYPE_CHECKING:
    from pokedex.cache import ResponseCache

ModelT = TypeVar("ModelT", bound=BaseModel)


class PokeAPI:
    """Typed accessors for the PokeAPI resources used by the REPL.

    Args:
        client: An entered :class:`SyncClient`.
    """

    def __init__(self, client: SyncClient) -> None:
        self._client = client

    @property
    def cache(self) -> Optional[ResponseCache]:
        """The response cache behind the client, if any."""
        return self._client.cache

    def location_areas(self, offset: int = 0, limit: int = 20) -> LocationAreaPage:
        """Fetch one page of the ``location-area`` listing."""
        return self._get(LocationAreaPage, "location-area", {"offset": offset, "limit": limit})

    def location_areas_url(self, offset: int = 0, limit: int = 20) -> str:
        """Return the absolute URL of a listing page without fetching it."""
        return self._client.make_key("location-area", {"offset": offset, "limit": limit})

    def location_area_page(self, url: str) -> LocationAreaPage:
        """Fetch a listing page by its absolute ``next``/``previous`` URL."""
        return self._get(LocationAreaPage, url)

    def location_area(self, name: str) -> LocationArea:
        """Fetch a single location area by name.

        Raises:
            NotFoundError: If PokeAPI has no area called *name*.
        """
        return self._get(LocationArea, f"location-area/{name}")

    def pokemon(self, name: str) -> Pokemon:
        """Fetch a single Pokemon by name.

        Raises:
            NotFoundError: If PokeAPI has no Pokemon called *name*.
        """
        return self._get(Pokemon, f"pokemon/{name}")

    def _get(self, model: type[ModelT], path: str, params: dict | None = None) -> ModelT:
        raw = self._client.fetch(path, params)
        try:
            return model.model_validate_json(raw)
        except ValidationError as exc:
            url = self._client.make_key(path, params)
            raise ResponseDecodeError(f"Error decoding response from {url}: {exc}") from exc
