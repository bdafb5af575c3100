"""Formatters for API responses (JSON) and storage reports (Markdown)."""

import json
from typing import Any, Dict, List

from recipe_finder.caching.maintenance import StorageStats
from recipe_finder.data_layer.models import Ingredient, Recipe

TITLE_SEARCH_LIMIT = 8


def format_recipes_response(recipes: List[Recipe], ingredients: List[str]) -> Dict[str, Any]:
    """Build the response body for an ingredient-based recipe search.

    Args:
        recipes: Recipes to return
        ingredients: Ingredients the user searched for

    Returns:
        Dictionary with recipes, total and the echoed ingredients
    """
    return {
        "recipes": [recipe.to_dict() for recipe in recipes],
        "total": len(recipes),
        "ingredients": list(ingredients),
    }


def format_ingredients_response(ingredients: List[Ingredient], query: str) -> Dict[str, Any]:
    return {
        "ingredients": [ingredient.to_dict() for ingredient in ingredients],
        "query": query,
        "total": len(ingredients),
    }


def filter_by_title(recipes: List[Recipe], query: str, limit: int = TITLE_SEARCH_LIMIT) -> List[Recipe]:
    """Return up to *limit* recipes whose title contains *query* (case-insensitive)."""
    needle = query.strip().casefold()
    matches = [recipe for recipe in recipes if needle in recipe.title.casefold()]
    return matches[:limit]


def format_title_search_response(recipes: List[Recipe], query: str) -> Dict[str, Any]:
    return {
        "recipes": [recipe.to_dict() for recipe in recipes],
        "query": query,
        "total": len(recipes),
    }


def format_stats_markdown(stats: StorageStats) -> str:
    """Render storage statistics as a Markdown report.

    Args:
        stats: Aggregate statistics from StorageMaintenance

    Returns:
        Markdown string with a totals section and a per-store table
    """
    data = stats.to_dict()
    lines = [
        "# Storage Statistics",
        "",
        f"**Files:** {data['totalFiles']}",
        f"**Records:** {data['totalRecords']}",
        f"**Oldest entry:** {data['oldestEntry'] or 'n/a'}",
        f"**Newest entry:** {data['newestEntry'] or 'n/a'}",
        f"**Skipped files:** {data['skippedFiles']}",
        "",
        "| Store | Files | Records | Skipped |",
        "|-------|-------|---------|---------|",
    ]
    for store_stats in stats.stores:
        lines.append(
            f"| {store_stats.kind} | {store_stats.file_count} | "
            f"{store_stats.record_count} | {store_stats.skipped_files} |"
        )

    queries = data["searchQueries"]
    if queries:
        lines.extend(["", "## Queries", ""])
        lines.extend(f"- {query}" for query in queries)

    return "\n".join(lines) + "\n"


def format_stats_json_string(stats: StorageStats, indent: int = 2) -> str:
    return json.dumps(stats.to_dict(), indent=indent)
