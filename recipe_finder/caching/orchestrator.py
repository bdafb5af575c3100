"""Two-tier lookup chain: memory cache, persistent store, then provider.

Every query path (recipe search, recipe details, ingredient search) runs
through :class:`TieredLookup`:

    1. memory cache, keyed by the literal query   -> hit returns
    2. persistent store, keyed by the normalized query -> hit warms memory
    3. provider (or its default fetch for an empty query)
    4. write-through to store and memory, then return

DESIGN DECISIONS:
- Memory keys are NOT normalized, so "eggs,milk" and "milk, eggs" are two
  memory entries sharing one persisted file
- A persistence failure after a successful fetch is logged and swallowed;
  the fetched payload is still returned
- A provider failure propagates and leaves both tiers untouched
- Every returned payload is a deep copy of the cached value
- No request coalescing: concurrent misses each call the provider and the
  last writer wins
"""

import copy
import logging
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

from recipe_finder.caching.maintenance import StorageMaintenance
from recipe_finder.caching.memory_cache import MemoryCache
from recipe_finder.caching.persistent_store import (
    IngredientSearchStore,
    PersistentStore,
    RecipeDetailStore,
    RecipeSearchStore,
)
from recipe_finder.config import Settings
from recipe_finder.data_layer.exceptions import PersistenceError
from recipe_finder.data_layer.models import Ingredient, Recipe, RecipeDetails
from recipe_finder.ingestion.query_normalizer import join_terms
from recipe_finder.providers.recipe_provider import RecipeDataProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

SEARCH_KEY_PREFIX = "search"
INGREDIENT_KEY_PREFIX = "ingredients"
DETAILS_KEY_PREFIX = "recipe_details"


def _detach(value: Any) -> Any:
    # Callers get their own copy; model list fields are mutable
    return copy.deepcopy(value)


class TieredLookup(Generic[T]):
    """Lookup chain for one entity kind.

    Usage:
        lookup = TieredLookup(memory_cache, RecipeSearchStore(), "search")
        recipes = lookup.fetch("eggs,milk", lambda: provider.search_by_terms(terms))
    """

    def __init__(
        self,
        memory_cache: MemoryCache[Any],
        store: PersistentStore[T],
        key_prefix: str
    ):
        self.memory_cache = memory_cache
        self.store = store
        self.key_prefix = key_prefix

    def memory_key(self, query: str) -> str:
        return f"{self.key_prefix}_{query}"

    def fetch(
        self,
        query: str,
        fetcher: Callable[[], T],
        default_fetcher: Optional[Callable[[], T]] = None
    ) -> T:
        """Return the payload for *query*, consulting each tier in turn.

        Args:
            query: Query as phrased by the caller
            fetcher: Provider call used on a full miss
            default_fetcher: Provider call used instead when the query
                normalizes to the empty key

        Returns:
            The cached or freshly fetched payload

        Raises:
            ProviderError: If the provider call fails
            InvalidQueryError: If the query cannot be mapped to a storage key
        """
        normalized = self.store.normalize_key(query)
        memory_key = self.memory_key(query)

        cached = self.memory_cache.get(memory_key)
        if cached is not None:
            logger.debug("Memory cache hit for %s", memory_key)
            return _detach(cached)

        stored = self.store.load(query)
        if stored is not None:
            logger.debug("Persistent store hit for %s '%s'", self.store.kind, query)
            self.memory_cache.set(memory_key, stored)
            return _detach(stored)

        if normalized == "" and default_fetcher is not None:
            logger.info("Fetching default %s from provider", self.store.kind)
            payload = default_fetcher()
        else:
            logger.info("Fetching %s for '%s' from provider", self.store.kind, query)
            payload = fetcher()

        try:
            self.store.save(query, payload, normalized_key=normalized)
        except PersistenceError as e:
            logger.warning("Could not save %s to storage: %s", self.store.kind, e)
        self.memory_cache.set(memory_key, payload)
        return _detach(payload)


class CacheOrchestrator:
    """Entry point for every cached query, constructed once at startup.

    Holds one memory cache shared by all entity kinds (keys are prefixed
    per kind), the three persistent stores and the provider.

    Usage:
        orchestrator = CacheOrchestrator.from_settings(settings, provider)
        recipes = orchestrator.search_recipes(["eggs", "milk"])
        details = orchestrator.get_recipe_details("716429")
    """

    def __init__(
        self,
        provider: RecipeDataProvider,
        memory_cache: MemoryCache[Any],
        recipe_store: RecipeSearchStore,
        ingredient_store: IngredientSearchStore,
        detail_store: RecipeDetailStore
    ):
        self.provider = provider
        self.memory_cache = memory_cache
        self.recipe_store = recipe_store
        self.ingredient_store = ingredient_store
        self.detail_store = detail_store

        self._recipes: TieredLookup[List[Recipe]] = TieredLookup(
            memory_cache, recipe_store, SEARCH_KEY_PREFIX
        )
        self._ingredients: TieredLookup[List[Ingredient]] = TieredLookup(
            memory_cache, ingredient_store, INGREDIENT_KEY_PREFIX
        )
        self._details: TieredLookup[RecipeDetails] = TieredLookup(
            memory_cache, detail_store, DETAILS_KEY_PREFIX
        )
        self.maintenance = StorageMaintenance(self.stores)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider: RecipeDataProvider
    ) -> "CacheOrchestrator":
        """Build the orchestrator and its stores from settings."""
        return cls(
            provider=provider,
            memory_cache=MemoryCache(ttl_seconds=settings.cache_ttl_seconds),
            recipe_store=RecipeSearchStore(data_dir=settings.data_dir),
            ingredient_store=IngredientSearchStore(data_dir=settings.data_dir),
            detail_store=RecipeDetailStore(data_dir=settings.data_dir),
        )

    @property
    def stores(self) -> Sequence[PersistentStore[Any]]:
        return (self.recipe_store, self.ingredient_store, self.detail_store)

    def search_recipes(self, ingredients: Sequence[str]) -> List[Recipe]:
        """Return recipes for an ingredient list (popular recipes if empty).

        Args:
            ingredients: Ingredient names as entered by the user

        Raises:
            ProviderError: If the lookup misses and the provider fails
        """
        query = join_terms(ingredients)
        terms = [term.strip() for term in ingredients if term and term.strip()]
        return self._recipes.fetch(
            query,
            lambda: self.provider.search_by_terms(terms),
            default_fetcher=self.provider.fetch_popular,
        )

    def search_ingredients(self, query: str) -> List[Ingredient]:
        """Return ingredient suggestions; an empty query returns nothing.

        Raises:
            ProviderError: If the lookup misses and the provider fails
        """
        if not query or not query.strip():
            return []
        return self._ingredients.fetch(query, lambda: self.provider.search_terms(query))

    def get_recipe_details(self, recipe_id: str) -> RecipeDetails:
        """Return full details for one recipe.

        Raises:
            InvalidQueryError: If the id is not a valid recipe id
            ProviderError: If the lookup misses and the provider fails
        """
        return self._details.fetch(
            recipe_id, lambda: self.provider.fetch_details(recipe_id.strip())
        )
