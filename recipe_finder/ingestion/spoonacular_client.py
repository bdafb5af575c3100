"""Spoonacular API client for recipe and ingredient lookups.

This module performs the raw HTTP calls against the external recipe API and
returns parsed JSON without reshaping it (reshaping lives in
``recipe_mapper``).

API Reference: https://spoonacular.com/food-api/docs

DESIGN DECISIONS:
- API key is required; there is no built-in fallback key
- Every request is bounded by a configured timeout
- Non-2xx responses, timeouts and connection failures raise ProviderError
- No retries or backoff; callers decide what to do on failure
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from recipe_finder.data_layer.exceptions import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
SEARCH_RESULT_COUNT = 12
INGREDIENT_RESULT_COUNT = 10


class SpoonacularClient:
    """Client for the Spoonacular recipe API.

    Usage:
        client = SpoonacularClient(api_key="your_key", timeout=30)

        recipes = client.find_by_ingredients(["eggs", "milk"])
        info = client.get_recipe_information("716429")
    """

    BASE_URL = "https://api.spoonacular.com"

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None
    ):
        """Initialize client with API key.

        Args:
            api_key: Spoonacular API key
            timeout: Request timeout in seconds
            session: Optional requests session (a new one is created if omitted)

        Raises:
            ConfigurationError: If API key is empty
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                "SPOONACULAR_API_KEY",
                "Spoonacular API key is required. Set SPOONACULAR_API_KEY."
            )
        self.api_key = api_key.strip()
        self.timeout = timeout
        self.session = session or requests.Session()

    def find_by_ingredients(
        self, ingredients: List[str], number: int = SEARCH_RESULT_COUNT
    ) -> List[Dict[str, Any]]:
        """Search recipes that use the given ingredients.

        Args:
            ingredients: Ingredient names
            number: Maximum number of recipes to return

        Returns:
            Raw recipe list from ``/recipes/findByIngredients``

        Raises:
            ProviderError: If the request fails
        """
        data = self._get(
            "/recipes/findByIngredients",
            {
                "ingredients": ",".join(ingredients),
                "number": number,
                "ranking": 1,
                "ignorePantry": "true",
            },
        )
        if not isinstance(data, list):
            raise ProviderError(
                "INVALID_RESPONSE",
                "Expected a list of recipes from findByIngredients",
                endpoint="/recipes/findByIngredients",
            )
        return data

    def get_random_recipes(self, number: int = SEARCH_RESULT_COUNT) -> List[Dict[str, Any]]:
        """Fetch random (popular) recipes with full information.

        Returns:
            Raw recipe information list from ``/recipes/random``

        Raises:
            ProviderError: If the request fails
        """
        data = self._get("/recipes/random", {"number": number})
        if not isinstance(data, dict):
            raise ProviderError(
                "INVALID_RESPONSE",
                "Expected an object from random recipes",
                endpoint="/recipes/random",
            )
        return data.get("recipes") or []

    def get_recipe_information(self, recipe_id: str) -> Dict[str, Any]:
        """Fetch full information for one recipe.

        Args:
            recipe_id: Spoonacular recipe id

        Returns:
            Raw payload from ``/recipes/{id}/information``

        Raises:
            ProviderError: If the request fails or the recipe does not exist
        """
        endpoint = f"/recipes/{recipe_id}/information"
        data = self._get(endpoint, {"includeNutrition": "false"})
        if not isinstance(data, dict):
            raise ProviderError(
                "INVALID_RESPONSE", "Expected an object for recipe information", endpoint=endpoint
            )
        return data

    def search_ingredients(
        self, query: str, number: int = INGREDIENT_RESULT_COUNT
    ) -> List[Dict[str, Any]]:
        """Search ingredient names for autocomplete.

        Returns:
            Raw ``results`` list from ``/food/ingredients/search``

        Raises:
            ProviderError: If the request fails
        """
        data = self._get(
            "/food/ingredients/search",
            {"query": query, "number": number, "metaInformation": "false"},
        )
        if not isinstance(data, dict):
            raise ProviderError(
                "INVALID_RESPONSE",
                "Expected an object from ingredient search",
                endpoint="/food/ingredients/search",
            )
        return data.get("results") or []

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """Make a GET request and return the parsed JSON body.

        Args:
            endpoint: Path below BASE_URL
            params: Query parameters (the API key is added here)

        Returns:
            Parsed JSON response

        Raises:
            ProviderError: If the API request fails
        """
        url = f"{self.BASE_URL}{endpoint}"
        query = dict(params)
        query["apiKey"] = self.api_key

        logger.info("Calling Spoonacular %s", endpoint)
        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise ProviderError(
                "TIMEOUT", f"Spoonacular request timed out after {self.timeout}s", endpoint=endpoint
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise ProviderError(
                "CONNECTION_ERROR", "Failed to connect to Spoonacular API", endpoint=endpoint
            ) from e
        except requests.exceptions.RequestException as e:
            raise ProviderError("API_ERROR", f"Request failed: {e}", endpoint=endpoint) from e

        if response.status_code == 429:
            raise ProviderError(
                "RATE_LIMITED",
                "Too many requests. Please wait before trying again.",
                status_code=429,
                endpoint=endpoint,
            )
        if response.status_code == 404:
            raise ProviderError(
                "NOT_FOUND",
                f"Spoonacular resource not found: {endpoint}",
                status_code=404,
                endpoint=endpoint,
            )
        if not 200 <= response.status_code < 300:
            raise ProviderError(
                "API_ERROR",
                f"Spoonacular API returned status {response.status_code}",
                status_code=response.status_code,
                endpoint=endpoint,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                "INVALID_RESPONSE",
                "Spoonacular API returned malformed JSON",
                status_code=response.status_code,
                endpoint=endpoint,
            ) from e
