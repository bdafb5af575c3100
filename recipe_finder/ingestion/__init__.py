"""Ingestion layer: query normalization, provider HTTP client and payload mapping."""

from recipe_finder.ingestion.query_normalizer import (
    normalize_query,
    split_terms,
    split_raw_terms,
    join_terms,
    content_hash,
    hashed_filename,
    QUERY_DELIMITER,
    MAX_HASH_CHARS,
)

from recipe_finder.ingestion.spoonacular_client import SpoonacularClient

from recipe_finder.ingestion.recipe_mapper import (
    map_search_recipe,
    map_search_results,
    map_recipe_information,
    map_recipe_details,
    map_ingredient,
    extract_instructions,
    strip_html,
)

__all__ = [
    # Query normalization
    "normalize_query",
    "split_terms",
    "split_raw_terms",
    "join_terms",
    "content_hash",
    "hashed_filename",
    "QUERY_DELIMITER",
    "MAX_HASH_CHARS",
    # Provider client
    "SpoonacularClient",
    # Payload mapping
    "map_search_recipe",
    "map_search_results",
    "map_recipe_information",
    "map_recipe_details",
    "map_ingredient",
    "extract_instructions",
    "strip_html",
]
