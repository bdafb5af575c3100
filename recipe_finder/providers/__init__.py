"""Provider abstraction layer for external recipe data.

This package decouples the cache orchestrator from the concrete recipe API.
"""

from recipe_finder.providers.recipe_provider import RecipeDataProvider
from recipe_finder.providers.spoonacular_provider import SpoonacularProvider

__all__ = [
    "RecipeDataProvider",
    "SpoonacularProvider",
]
