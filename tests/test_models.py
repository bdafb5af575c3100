"""Tests for data models and their JSON representation."""

import dataclasses

import pytest

from conftest import make_details, make_recipe
from recipe_finder.data_layer.models import Ingredient, Recipe, RecipeDetails


class TestRecipe:
    """Tests for Recipe."""

    def test_defaults(self):
        recipe = Recipe(id="1", title="Toast")
        assert recipe.prep_time == "15 min"
        assert recipe.cook_time == "30 min"
        assert recipe.servings == 4
        assert recipe.match_count == 0

    def test_to_dict_uses_camel_case(self):
        data = make_recipe("1", match_count=2).to_dict()
        assert data["prepTime"] == "15 min"
        assert data["imageUrl"] == ""
        assert data["matchCount"] == 2

    def test_from_dict_tolerates_missing_fields(self):
        recipe = Recipe.from_dict({"id": 42, "title": "Soup"})
        assert recipe.id == "42"
        assert recipe.ingredients == []
        assert recipe.servings == 4

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            make_recipe().title = "Changed"


class TestRecipeDetails:
    def test_dict_round_trip(self):
        details = make_details()
        assert RecipeDetails.from_dict(details.to_dict()) == details

    def test_to_dict_keys(self):
        data = make_details().to_dict()
        assert data["instructions"][0] == {"number": 1, "step": "Boil pasta."}
        assert data["ingredients"][0]["unit"] == "cloves"
        assert data["isGlutenFree"] is False


class TestIngredient:
    def test_from_dict(self):
        assert Ingredient.from_dict({"id": "3", "name": "salt"}) == Ingredient(id=3, name="salt", image="")
