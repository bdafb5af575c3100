"""Tests for the two-tier lookup chain.

The provider is a recording fake, so every test can assert exactly how
many external calls a lookup caused.
"""

import threading
from unittest.mock import patch

import pytest

from conftest import FakeSeconds, make_recipe
from recipe_finder.caching.memory_cache import MemoryCache
from recipe_finder.caching.orchestrator import CacheOrchestrator, TieredLookup
from recipe_finder.caching.persistent_store import (
    IngredientSearchStore,
    RecipeDetailStore,
    RecipeSearchStore,
)
from recipe_finder.config import Settings
from recipe_finder.data_layer.exceptions import (
    InvalidQueryError,
    PersistenceError,
    ProviderError,
)


@pytest.fixture
def seconds():
    return FakeSeconds()


@pytest.fixture
def memory(seconds):
    return MemoryCache(ttl_seconds=3600, clock=seconds)


@pytest.fixture
def orchestrator(tmp_path, clock, memory, fake_provider):
    return CacheOrchestrator(
        provider=fake_provider,
        memory_cache=memory,
        recipe_store=RecipeSearchStore(data_dir=str(tmp_path), clock=clock),
        ingredient_store=IngredientSearchStore(data_dir=str(tmp_path), clock=clock),
        detail_store=RecipeDetailStore(data_dir=str(tmp_path), clock=clock),
    )


def provider_calls(provider, name):
    return [call for call in provider.calls if call[0] == name]


class TestSearchRecipes:
    """Tests for the recipe search path."""

    def test_miss_fetches_and_writes_through(self, orchestrator, fake_provider, memory):
        recipes = orchestrator.search_recipes(["Eggs", " milk"])

        assert [r.id for r in recipes] == ["1", "2"]
        assert provider_calls(fake_provider, "search_by_terms") == [("search_by_terms", ("Eggs", "milk"))]
        assert orchestrator.recipe_store.load("eggs,milk") == recipes
        assert memory.get("search_Eggs, milk") == recipes

    def test_memory_hit_skips_provider(self, orchestrator, fake_provider):
        orchestrator.search_recipes(["eggs", "milk"])
        orchestrator.search_recipes(["eggs", "milk"])
        assert len(fake_provider.calls) == 1

    def test_reordered_query_hits_persistent_store(self, orchestrator, fake_provider, memory):
        """Test that a different wording misses memory but hits the shared file."""
        orchestrator.search_recipes(["eggs", "milk"])
        recipes = orchestrator.search_recipes(["milk", "eggs"])

        assert len(fake_provider.calls) == 1
        assert [r.id for r in recipes] == ["1", "2"]
        assert memory.get("search_milk,eggs") == recipes

    def test_store_hit_after_memory_expiry(self, orchestrator, fake_provider, seconds):
        orchestrator.search_recipes(["eggs"])
        seconds.advance(3601)
        orchestrator.search_recipes(["eggs"])
        assert len(fake_provider.calls) == 1

    def test_stale_store_refetches(self, orchestrator, fake_provider, seconds, clock):
        orchestrator.search_recipes(["eggs"])
        seconds.advance(3601)
        clock.advance(days=8)
        orchestrator.search_recipes(["eggs"])
        assert len(fake_provider.calls) == 2

    def test_empty_ingredients_use_popular(self, orchestrator, fake_provider, tmp_path):
        recipes = orchestrator.search_recipes([])

        assert [r.id for r in recipes] == ["99"]
        assert fake_provider.calls == [("fetch_popular",)]
        assert (tmp_path / "popular_recipes.json").exists()

    def test_blank_ingredients_share_popular_bucket(self, orchestrator, fake_provider):
        orchestrator.search_recipes([])
        orchestrator.search_recipes(["  ", ""])
        assert fake_provider.calls == [("fetch_popular",)]

    def test_returned_list_is_detached(self, orchestrator):
        first = orchestrator.search_recipes(["eggs"])
        first.append(make_recipe("junk"))
        first.reverse()

        again = orchestrator.search_recipes(["eggs"])
        assert [r.id for r in again] == ["1", "2"]

    def test_mutating_returned_recipe_fields_leaves_cache_intact(self, orchestrator, memory):
        """Test that list fields inside returned recipes are not shared with the cache."""
        orchestrator.search_recipes(["eggs"])[0].ingredients.append("POISON")

        again = orchestrator.search_recipes(["eggs"])

        assert again[0].ingredients == ["eggs", "butter"]
        assert memory.get("search_eggs")[0].ingredients == ["eggs", "butter"]

    def test_mutating_store_hit_payload_leaves_cache_intact(self, orchestrator):
        orchestrator.search_recipes(["eggs", "milk"])
        orchestrator.search_recipes(["milk", "eggs"])[1].ingredients.clear()

        again = orchestrator.search_recipes(["milk", "eggs"])
        assert again[1].ingredients == ["eggs", "milk", "flour"]


class TestFailures:
    """Tests for provider and persistence failures."""

    def test_provider_failure_propagates_and_caches_nothing(self, orchestrator, fake_provider, memory, tmp_path):
        fake_provider.error = ProviderError("API_ERROR", "upstream down", status_code=500)

        with pytest.raises(ProviderError):
            orchestrator.search_recipes(["eggs"])

        assert len(memory) == 0
        assert list(tmp_path.iterdir()) == []

    def test_failure_is_not_negatively_cached(self, orchestrator, fake_provider):
        fake_provider.error = ProviderError("TIMEOUT", "slow")
        with pytest.raises(ProviderError):
            orchestrator.search_recipes(["eggs"])

        fake_provider.error = None
        assert len(orchestrator.search_recipes(["eggs"])) == 2
        assert len(fake_provider.calls) == 2

    def test_persistence_failure_is_swallowed(self, orchestrator, fake_provider, memory):
        """Test that a failed save still returns and memory-caches the result."""
        with patch.object(
            orchestrator.recipe_store, "save", side_effect=PersistenceError("disk full")
        ):
            recipes = orchestrator.search_recipes(["eggs"])

        assert len(recipes) == 2
        assert memory.get("search_eggs") == recipes
        orchestrator.search_recipes(["eggs"])
        assert len(fake_provider.calls) == 1


class TestIngredientsAndDetails:
    def test_ingredient_search_caches(self, orchestrator, fake_provider):
        first = orchestrator.search_ingredients("Tom")
        second = orchestrator.search_ingredients("tom")

        assert first == second
        assert first[0].name == "tomato"
        assert provider_calls(fake_provider, "search_terms") == [("search_terms", "Tom")]

    def test_empty_ingredient_query_touches_nothing(self, orchestrator, fake_provider, memory, tmp_path):
        assert orchestrator.search_ingredients("   ") == []
        assert fake_provider.calls == []
        assert len(memory) == 0
        assert list(tmp_path.iterdir()) == []

    def test_details_cached_by_id(self, orchestrator, fake_provider, tmp_path):
        details = orchestrator.get_recipe_details("716429")
        again = orchestrator.get_recipe_details("716429")

        assert details == again
        assert details.title == "Pasta with Garlic"
        assert fake_provider.calls == [("fetch_details", "716429")]
        assert (tmp_path / "recipe_details_716429.json").exists()

    def test_mutating_returned_details_leaves_cache_intact(self, orchestrator):
        orchestrator.get_recipe_details("716429").instructions.clear()

        again = orchestrator.get_recipe_details("716429")

        assert [step.number for step in again.instructions] == [1, 2]

    def test_invalid_detail_id(self, orchestrator, fake_provider):
        with pytest.raises(InvalidQueryError):
            orchestrator.get_recipe_details("../secrets")
        assert fake_provider.calls == []

    def test_kinds_do_not_collide_in_memory(self, orchestrator, memory):
        orchestrator.search_recipes(["tomato"])
        orchestrator.search_ingredients("tomato")
        assert memory.get("search_tomato")[0].title == "Scrambled Eggs"
        assert memory.get("ingredients_tomato")[0].name == "tomato"


class TestConcurrency:
    """Concurrent lookups of the same key."""

    def test_concurrent_misses_are_consistent(self, orchestrator, fake_provider):
        """Test that parallel lookups all succeed and leave one consistent record.

        Lookups are not coalesced, so the provider may be called more than
        once; every caller still gets the full result.
        """
        results = []
        errors = []
        barrier = threading.Barrier(8)

        def worker():
            try:
                barrier.wait()
                results.append(orchestrator.search_recipes(["tomato"]))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(results) == 8
        assert all([r.id for r in result] == ["1", "2"] for result in results)
        assert 1 <= len(fake_provider.calls) <= 8
        assert [r.id for r in orchestrator.recipe_store.load("tomato")] == ["1", "2"]


class TestTieredLookup:
    def test_memory_key_prefix(self, memory, tmp_path):
        lookup = TieredLookup(memory, RecipeSearchStore(data_dir=str(tmp_path)), "search")
        assert lookup.memory_key("eggs") == "search_eggs"

    def test_default_fetcher_only_for_empty_key(self, memory, tmp_path):
        lookup = TieredLookup(memory, RecipeSearchStore(data_dir=str(tmp_path)), "search")
        result = lookup.fetch("eggs", lambda: [make_recipe("1")], default_fetcher=lambda: [])
        assert [r.id for r in result] == ["1"]


class TestFromSettings:
    def test_builds_stores_in_data_dir(self, tmp_path, fake_provider):
        settings = Settings(data_dir=str(tmp_path / "data"), cache_duration_hours=2)
        orchestrator = CacheOrchestrator.from_settings(settings, fake_provider)

        assert orchestrator.memory_cache.ttl_seconds == 7200
        assert all(store.data_dir == tmp_path / "data" for store in orchestrator.stores)
        assert orchestrator.maintenance.mapping_path == tmp_path / "data" / "filename_mapping.json"
