"""Spoonacular-backed recipe data provider.

Wraps :class:`SpoonacularClient` and converts its raw JSON into internal
models via :mod:`recipe_finder.ingestion.recipe_mapper`, so the cache layer
(and everything above it) is unaware of the provider's schema.
"""

from typing import Callable, List, TypeVar

from recipe_finder.config import Settings
from recipe_finder.data_layer.exceptions import ProviderError
from recipe_finder.data_layer.models import Ingredient, Recipe, RecipeDetails
from recipe_finder.ingestion.recipe_mapper import (
    map_ingredient,
    map_recipe_details,
    map_recipe_information,
    map_search_results,
)
from recipe_finder.ingestion.spoonacular_client import SpoonacularClient
from recipe_finder.providers.recipe_provider import RecipeDataProvider

T = TypeVar("T")


def _map_response(endpoint: str, mapper: Callable[[], T]) -> T:
    """Run a payload mapper, reporting malformed payloads as provider failures.

    Raises:
        ProviderError: With code INVALID_RESPONSE if the payload does not
            have the expected shape
    """
    try:
        return mapper()
    except (AttributeError, TypeError, ValueError, KeyError) as e:
        raise ProviderError(
            "INVALID_RESPONSE",
            f"Unexpected payload from Spoonacular {endpoint}: {e}",
            endpoint=endpoint,
        ) from e


class SpoonacularProvider(RecipeDataProvider):
    """Provider that fetches recipe data from the Spoonacular API.

    Usage::

        provider = SpoonacularProvider.from_settings(load_settings())
        recipes = provider.search_by_terms(["eggs", "milk"])
    """

    def __init__(self, client: SpoonacularClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SpoonacularProvider":
        """Create provider from settings.

        Raises:
            ConfigurationError: If no API key is configured
        """
        client = SpoonacularClient(
            api_key=settings.require_api_key(),
            timeout=settings.api_timeout_seconds,
        )
        return cls(client)

    def search_by_terms(self, terms: List[str]) -> List[Recipe]:
        raw = self._client.find_by_ingredients(terms)
        return _map_response("/recipes/findByIngredients", lambda: map_search_results(raw))

    def fetch_popular(self) -> List[Recipe]:
        raw = self._client.get_random_recipes()
        return _map_response(
            "/recipes/random", lambda: [map_recipe_information(item) for item in raw]
        )

    def fetch_details(self, recipe_id: str) -> RecipeDetails:
        raw = self._client.get_recipe_information(recipe_id)
        return _map_response(
            f"/recipes/{recipe_id}/information", lambda: map_recipe_details(raw)
        )

    def search_terms(self, query: str) -> List[Ingredient]:
        raw = self._client.search_ingredients(query)
        return _map_response(
            "/food/ingredients/search", lambda: [map_ingredient(item) for item in raw]
        )
