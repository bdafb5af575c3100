"""Scoring helpers for search results."""

from recipe_finder.scoring.match_scorer import match_count, rescore_recipes

__all__ = ["match_count", "rescore_recipes"]
