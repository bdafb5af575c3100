"""Output formatting for API responses and CLI reports."""

from recipe_finder.output.formatters import (
    format_recipes_response,
    format_ingredients_response,
    format_title_search_response,
    filter_by_title,
    format_stats_markdown,
    format_stats_json_string,
)

__all__ = [
    "format_recipes_response",
    "format_ingredients_response",
    "format_title_search_response",
    "filter_by_title",
    "format_stats_markdown",
    "format_stats_json_string",
]
