"""Mapping from Spoonacular payloads to the internal recipe schema.

This module converts raw provider JSON into :mod:`recipe_finder.data_layer.models`
objects. It runs before anything is cached; the cache tiers treat its
output as an opaque payload.

DESIGN DECISIONS:
- Missing times fall back to fixed defaults (15 min prep, 30 min cook,
  45 min total) because the search endpoint does not report them
- HTML markup in titles and summaries is stripped
- Descriptions are trimmed (150 chars for summaries, 200 for details)
- Instructions come from ``analyzedInstructions`` when present, otherwise
  from the HTML ``instructions`` list
"""

import re
from typing import Any, Dict, List

from recipe_finder.data_layer.models import (
    DetailedIngredient,
    Ingredient,
    Instruction,
    Recipe,
    RecipeDetails,
)

INGREDIENT_IMAGE_BASE = "https://spoonacular.com/cdn/ingredients_100x100/"
DEFAULT_PREP_TIME = "15 min"
DEFAULT_COOK_TIME = "30 min"
DEFAULT_TOTAL_TIME = "45 min"
DEFAULT_SERVINGS = 4
SUMMARY_DESCRIPTION_LIMIT = 150
DETAIL_DESCRIPTION_LIMIT = 200

_TAG_PATTERN = re.compile(r"<[^>]+>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_html(text: str) -> str:
    """Remove HTML tags and collapse whitespace."""
    if not text:
        return ""
    return _WHITESPACE_PATTERN.sub(" ", _TAG_PATTERN.sub(" ", text)).strip()


def truncate(text: str, limit: int) -> str:
    """Trim text to *limit* characters, appending an ellipsis when cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def format_minutes(minutes: Any, default: str) -> str:
    try:
        value = int(minutes or 0)
    except (TypeError, ValueError):
        return default
    return f"{value} min" if value > 0 else default


def ingredient_image_url(image: str) -> str:
    if not image:
        return ""
    if image.startswith("http://") or image.startswith("https://"):
        return image
    return INGREDIENT_IMAGE_BASE + image


def map_search_recipe(raw: Dict[str, Any]) -> Recipe:
    """Convert a ``findByIngredients`` result into a Recipe.

    Args:
        raw: One element of the findByIngredients response

    Returns:
        Recipe with default times and the provider's used-ingredient count
    """
    names = [ing.get("name", "") for ing in raw.get("usedIngredients") or []]
    names += [ing.get("name", "") for ing in raw.get("missedIngredients") or []]
    used = int(raw.get("usedIngredientCount", 0) or 0)

    return Recipe(
        id=str(raw.get("id", "")),
        title=strip_html(raw.get("title", "")),
        description=f"A delicious recipe that uses {used} of your ingredients",
        ingredients=[name for name in names if name],
        prep_time=DEFAULT_PREP_TIME,
        cook_time=DEFAULT_COOK_TIME,
        servings=DEFAULT_SERVINGS,
        image_url=raw.get("image", ""),
        match_count=used,
    )


def map_search_results(raw_results: List[Dict[str, Any]]) -> List[Recipe]:
    """Convert a findByIngredients response, best matches first."""
    recipes = [map_search_recipe(raw) for raw in raw_results]
    # sorted() is stable, so provider ranking breaks ties
    return sorted(recipes, key=lambda recipe: recipe.match_count, reverse=True)


def map_recipe_information(raw: Dict[str, Any]) -> Recipe:
    """Convert a full recipe information payload into a Recipe summary."""
    cook_minutes = raw.get("cookingMinutes") or raw.get("readyInMinutes")
    return Recipe(
        id=str(raw.get("id", "")),
        title=strip_html(raw.get("title", "")),
        description=truncate(strip_html(raw.get("summary", "")), SUMMARY_DESCRIPTION_LIMIT),
        ingredients=[
            ing.get("name", "") for ing in raw.get("extendedIngredients") or [] if ing.get("name")
        ],
        prep_time=format_minutes(raw.get("preparationMinutes"), DEFAULT_PREP_TIME),
        cook_time=format_minutes(cook_minutes, DEFAULT_COOK_TIME),
        servings=int(raw.get("servings", 0) or 0),
        image_url=raw.get("image", ""),
        match_count=0,
    )


def map_ingredient(raw: Dict[str, Any]) -> Ingredient:
    """Convert an ingredient search result."""
    return Ingredient(
        id=int(raw.get("id", 0) or 0),
        name=raw.get("name", ""),
        image=ingredient_image_url(raw.get("image", "")),
    )


def extract_instructions(raw: Dict[str, Any]) -> List[Instruction]:
    """Extract numbered steps from a recipe information payload.

    Uses the first ``analyzedInstructions`` block when it has steps;
    otherwise splits the HTML ``instructions`` text into one step per item
    or line.
    """
    analyzed = raw.get("analyzedInstructions") or []
    if analyzed and isinstance(analyzed[0], dict):
        steps = []
        for step in analyzed[0].get("steps") or []:
            if not isinstance(step, dict):
                continue
            number = step.get("number")
            text = step.get("step")
            if isinstance(number, (int, float)) and isinstance(text, str):
                steps.append(Instruction(number=int(number), step=text))
        if steps:
            return steps

    text = raw.get("instructions") or ""
    if not text:
        return []
    text = re.sub(r"</li\s*>", "\n", text, flags=re.IGNORECASE)
    lines = [strip_html(line) for line in text.splitlines()]
    return [
        Instruction(number=index, step=line)
        for index, line in enumerate((line for line in lines if line), start=1)
    ]


def map_recipe_details(raw: Dict[str, Any]) -> RecipeDetails:
    """Convert a recipe information payload into RecipeDetails.

    Args:
        raw: Response of ``/recipes/{id}/information``

    Returns:
        RecipeDetails with cleaned summary, instructions and ingredient lines
    """
    ingredients = [
        DetailedIngredient(
            id=int(ing.get("id", 0) or 0),
            name=ing.get("name", ""),
            original_name=ing.get("originalName", ""),
            amount=float(ing.get("amount", 0.0) or 0.0),
            unit=ing.get("unit", ""),
            unit_long=ing.get("unitLong", ""),
            original=ing.get("original", ""),
            aisle=ing.get("aisle", ""),
            image=ingredient_image_url(ing.get("image", "")),
            meta=[str(m) for m in ing.get("meta") or []],
        )
        for ing in raw.get("extendedIngredients") or []
    ]
    summary = strip_html(raw.get("summary", ""))

    return RecipeDetails(
        id=str(raw.get("id", "")),
        title=strip_html(raw.get("title", "")),
        description=truncate(summary, DETAIL_DESCRIPTION_LIMIT),
        summary=summary,
        ingredients=ingredients,
        instructions=extract_instructions(raw),
        prep_time=format_minutes(raw.get("preparationMinutes"), DEFAULT_PREP_TIME),
        cook_time=format_minutes(raw.get("cookingMinutes"), DEFAULT_COOK_TIME),
        total_time=format_minutes(raw.get("readyInMinutes"), DEFAULT_TOTAL_TIME),
        servings=int(raw.get("servings", 0) or 0),
        image_url=raw.get("image", ""),
        source_url=raw.get("sourceUrl", ""),
        spoonacular_url=raw.get("spoonacularSourceUrl", ""),
        health_score=float(raw.get("healthScore", 0.0) or 0.0),
        price_per_serving=float(raw.get("pricePerServing", 0.0) or 0.0),
        cuisines=list(raw.get("cuisines") or []),
        dish_types=list(raw.get("dishTypes") or []),
        diets=list(raw.get("diets") or []),
        occasions=list(raw.get("occasions") or []),
        is_vegetarian=bool(raw.get("vegetarian", False)),
        is_vegan=bool(raw.get("vegan", False)),
        is_gluten_free=bool(raw.get("glutenFree", False)),
        is_dairy_free=bool(raw.get("dairyFree", False)),
        is_very_healthy=bool(raw.get("veryHealthy", False)),
        is_cheap=bool(raw.get("cheap", False)),
        is_popular=bool(raw.get("veryPopular", False)),
        is_sustainable=bool(raw.get("sustainable", False)),
    )
