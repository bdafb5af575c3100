"""Data models for recipes, ingredients and recipe details.

These are the internal shapes handed to the cache tiers and the HTTP layer.
Field names in ``to_dict`` output follow the JSON contract consumed by the
frontend (camelCase), so cached files and API responses share one schema.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class Recipe:
    """A recipe summary as returned by ingredient searches."""

    id: str
    title: str
    description: str = ""
    ingredients: List[str] = field(default_factory=list)
    prep_time: str = "15 min"
    cook_time: str = "30 min"
    servings: int = 4
    image_url: str = ""
    match_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "ingredients": list(self.ingredients),
            "prepTime": self.prep_time,
            "cookTime": self.cook_time,
            "servings": self.servings,
            "imageUrl": self.image_url,
            "matchCount": self.match_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            description=data.get("description", ""),
            ingredients=[str(name) for name in data.get("ingredients") or []],
            prep_time=data.get("prepTime", "15 min"),
            cook_time=data.get("cookTime", "30 min"),
            servings=int(data.get("servings", 4) or 0),
            image_url=data.get("imageUrl", ""),
            match_count=int(data.get("matchCount", 0) or 0),
        )


@dataclass(frozen=True)
class Ingredient:
    """An ingredient suggestion returned by the ingredient search."""

    id: int
    name: str
    image: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "image": self.image}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ingredient":
        return cls(
            id=int(data.get("id", 0) or 0),
            name=data.get("name", ""),
            image=data.get("image", ""),
        )


@dataclass(frozen=True)
class DetailedIngredient:
    """An ingredient line of a recipe, with its measurements."""

    id: int
    name: str
    original_name: str = ""
    amount: float = 0.0
    unit: str = ""
    unit_long: str = ""
    original: str = ""
    aisle: str = ""
    image: str = ""
    meta: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "originalName": self.original_name,
            "amount": self.amount,
            "unit": self.unit,
            "unitLong": self.unit_long,
            "original": self.original,
            "aisle": self.aisle,
            "image": self.image,
            "meta": list(self.meta),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetailedIngredient":
        return cls(
            id=int(data.get("id", 0) or 0),
            name=data.get("name", ""),
            original_name=data.get("originalName", ""),
            amount=float(data.get("amount", 0.0) or 0.0),
            unit=data.get("unit", ""),
            unit_long=data.get("unitLong", ""),
            original=data.get("original", ""),
            aisle=data.get("aisle", ""),
            image=data.get("image", ""),
            meta=[str(m) for m in data.get("meta") or []],
        )


@dataclass(frozen=True)
class Instruction:
    """A single numbered cooking step."""

    number: int
    step: str

    def to_dict(self) -> Dict[str, Any]:
        return {"number": self.number, "step": self.step}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Instruction":
        return cls(number=int(data.get("number", 0)), step=data.get("step", ""))


@dataclass(frozen=True)
class RecipeDetails:
    """Full recipe information for the recipe detail page."""

    id: str
    title: str
    description: str = ""
    summary: str = ""
    ingredients: List[DetailedIngredient] = field(default_factory=list)
    instructions: List[Instruction] = field(default_factory=list)
    prep_time: str = "15 min"
    cook_time: str = "30 min"
    total_time: str = "45 min"
    servings: int = 0
    image_url: str = ""
    source_url: str = ""
    spoonacular_url: str = ""
    health_score: float = 0.0
    price_per_serving: float = 0.0
    cuisines: List[str] = field(default_factory=list)
    dish_types: List[str] = field(default_factory=list)
    diets: List[str] = field(default_factory=list)
    occasions: List[str] = field(default_factory=list)
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    is_dairy_free: bool = False
    is_very_healthy: bool = False
    is_cheap: bool = False
    is_popular: bool = False
    is_sustainable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation using the frontend field names
        """
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "summary": self.summary,
            "ingredients": [ing.to_dict() for ing in self.ingredients],
            "instructions": [step.to_dict() for step in self.instructions],
            "prepTime": self.prep_time,
            "cookTime": self.cook_time,
            "totalTime": self.total_time,
            "servings": self.servings,
            "imageUrl": self.image_url,
            "sourceUrl": self.source_url,
            "spoonacularUrl": self.spoonacular_url,
            "healthScore": self.health_score,
            "pricePerServing": self.price_per_serving,
            "cuisines": list(self.cuisines),
            "dishTypes": list(self.dish_types),
            "diets": list(self.diets),
            "occasions": list(self.occasions),
            "isVegetarian": self.is_vegetarian,
            "isVegan": self.is_vegan,
            "isGlutenFree": self.is_gluten_free,
            "isDairyFree": self.is_dairy_free,
            "isVeryHealthy": self.is_very_healthy,
            "isCheap": self.is_cheap,
            "isPopular": self.is_popular,
            "isSustainable": self.is_sustainable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecipeDetails":
        """Create RecipeDetails from dictionary.

        Args:
            data: Dictionary from a stored JSON record

        Returns:
            RecipeDetails instance
        """
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            description=data.get("description", ""),
            summary=data.get("summary", ""),
            ingredients=[
                DetailedIngredient.from_dict(ing) for ing in data.get("ingredients") or []
            ],
            instructions=[
                Instruction.from_dict(step) for step in data.get("instructions") or []
            ],
            prep_time=data.get("prepTime", "15 min"),
            cook_time=data.get("cookTime", "30 min"),
            total_time=data.get("totalTime", "45 min"),
            servings=int(data.get("servings", 0) or 0),
            image_url=data.get("imageUrl", ""),
            source_url=data.get("sourceUrl", ""),
            spoonacular_url=data.get("spoonacularUrl", ""),
            health_score=float(data.get("healthScore", 0.0) or 0.0),
            price_per_serving=float(data.get("pricePerServing", 0.0) or 0.0),
            cuisines=list(data.get("cuisines") or []),
            dish_types=list(data.get("dishTypes") or []),
            diets=list(data.get("diets") or []),
            occasions=list(data.get("occasions") or []),
            is_vegetarian=bool(data.get("isVegetarian", False)),
            is_vegan=bool(data.get("isVegan", False)),
            is_gluten_free=bool(data.get("isGlutenFree", False)),
            is_dairy_free=bool(data.get("isDairyFree", False)),
            is_very_healthy=bool(data.get("isVeryHealthy", False)),
            is_cheap=bool(data.get("isCheap", False)),
            is_popular=bool(data.get("isPopular", False)),
            is_sustainable=bool(data.get("isSustainable", False)),
        )
