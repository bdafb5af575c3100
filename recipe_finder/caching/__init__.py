"""Two-tier caching: memory cache in front of content-addressed JSON stores."""

from recipe_finder.caching.rwlock import ReadWriteLock

from recipe_finder.caching.memory_cache import (
    MemoryCache,
    CacheEntry,
    DEFAULT_TTL_SECONDS,
)

from recipe_finder.caching.persistent_store import (
    PersistentStore,
    RecipeSearchStore,
    IngredientSearchStore,
    RecipeDetailStore,
    StoredRecord,
    StoreStats,
    ScanResult,
    STORE_FRESHNESS,
    POPULAR_RECIPES_FILENAME,
)

from recipe_finder.caching.maintenance import (
    StorageMaintenance,
    StorageStats,
    MAPPING_FILENAME,
)

from recipe_finder.caching.orchestrator import (
    CacheOrchestrator,
    TieredLookup,
)

__all__ = [
    "ReadWriteLock",
    # Memory tier
    "MemoryCache",
    "CacheEntry",
    "DEFAULT_TTL_SECONDS",
    # Persistent tier
    "PersistentStore",
    "RecipeSearchStore",
    "IngredientSearchStore",
    "RecipeDetailStore",
    "StoredRecord",
    "StoreStats",
    "ScanResult",
    "STORE_FRESHNESS",
    "POPULAR_RECIPES_FILENAME",
    # Maintenance
    "StorageMaintenance",
    "StorageStats",
    "MAPPING_FILENAME",
    # Lookup chain
    "CacheOrchestrator",
    "TieredLookup",
]
