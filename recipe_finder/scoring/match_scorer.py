"""Ingredient match counting for recipe search results."""

from dataclasses import replace
from typing import Iterable, List

from recipe_finder.data_layer.models import Recipe


def _canonical(term: str) -> str:
    return term.strip().casefold()


def match_count(user_terms: Iterable[str], candidate_terms: Iterable[str]) -> int:
    """Count user terms that equal at least one candidate term.

    Comparison is case-insensitive and ignores surrounding whitespace. Each
    user term contributes at most 1, however many candidates it matches.

    Args:
        user_terms: Ingredients entered by the user
        candidate_terms: Ingredients of a recipe

    Returns:
        Number of matching user terms

    Example:
        >>> match_count(["Egg", "Milk "], ["egg", "flour"])
        1
    """
    candidates = {_canonical(term) for term in candidate_terms}
    return sum(1 for term in user_terms if _canonical(term) in candidates)


def rescore_recipes(user_terms: List[str], recipes: List[Recipe]) -> List[Recipe]:
    """Return copies of *recipes* with match counts recomputed for *user_terms*.

    Cached recipes are frozen; this never mutates them.
    """
    return [
        replace(recipe, match_count=match_count(user_terms, recipe.ingredients))
        for recipe in recipes
    ]
