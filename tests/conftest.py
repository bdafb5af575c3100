"""Shared fixtures: controllable clocks, sample models and a fake provider."""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from recipe_finder.data_layer.models import (
    DetailedIngredient,
    Ingredient,
    Instruction,
    Recipe,
    RecipeDetails,
)
from recipe_finder.providers.recipe_provider import RecipeDataProvider


class FakeClock:
    """Manually advanced clock returning timezone-aware datetimes."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeSeconds:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_recipe(recipe_id: str = "1", title: str = "Omelette", ingredients=None, match_count: int = 0) -> Recipe:
    return Recipe(
        id=recipe_id,
        title=title,
        description="A delicious recipe",
        ingredients=list(ingredients or ["eggs", "milk"]),
        match_count=match_count,
    )


def make_details(recipe_id: str = "716429") -> RecipeDetails:
    return RecipeDetails(
        id=recipe_id,
        title="Pasta with Garlic",
        description="Simple pasta",
        summary="Simple pasta with garlic and oil",
        ingredients=[DetailedIngredient(id=11215, name="garlic", amount=2.0, unit="cloves")],
        instructions=[Instruction(number=1, step="Boil pasta."), Instruction(number=2, step="Add garlic.")],
        servings=2,
    )


class FakeProvider(RecipeDataProvider):
    """In-memory provider that records every call."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.recipes = [
            make_recipe("1", "Scrambled Eggs", ["eggs", "butter"], match_count=1),
            make_recipe("2", "Pancakes", ["eggs", "milk", "flour"], match_count=2),
        ]
        self.popular = [make_recipe("99", "Popular Pie", ["apple", "flour"])]
        self.ingredients = [Ingredient(id=1, name="tomato", image="https://spoonacular.com/cdn/ingredients_100x100/tomato.png")]
        self.error = None

    def _record(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    def search_by_terms(self, terms: List[str]) -> List[Recipe]:
        self._record("search_by_terms", tuple(terms))
        return list(self.recipes)

    def fetch_popular(self) -> List[Recipe]:
        self._record("fetch_popular")
        return list(self.popular)

    def fetch_details(self, recipe_id: str) -> RecipeDetails:
        self._record("fetch_details", recipe_id)
        return make_details(recipe_id)

    def search_terms(self, query: str) -> List[Ingredient]:
        self._record("search_terms", query)
        return list(self.ingredients)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_provider():
    return FakeProvider()
