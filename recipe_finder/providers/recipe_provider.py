"""Abstract base class for recipe data providers.

The cache orchestrator depends ONLY on this interface. It is called on a
cache miss and must either return fully mapped internal models or raise
:class:`~recipe_finder.data_layer.exceptions.ProviderError`.
"""

from abc import ABC, abstractmethod
from typing import List

from recipe_finder.data_layer.models import Ingredient, Recipe, RecipeDetails


class RecipeDataProvider(ABC):
    """Abstraction for the external recipe data source."""

    @abstractmethod
    def search_by_terms(self, terms: List[str]) -> List[Recipe]:
        """Return recipes that use the given ingredient terms.

        Args:
            terms: Ingredient names as entered by the user

        Raises:
            ProviderError: If the provider call fails
        """
        ...

    @abstractmethod
    def fetch_popular(self) -> List[Recipe]:
        """Return the default recipe set shown when no terms are given.

        Raises:
            ProviderError: If the provider call fails
        """
        ...

    @abstractmethod
    def fetch_details(self, recipe_id: str) -> RecipeDetails:
        """Return full details for one recipe.

        Raises:
            ProviderError: If the provider call fails
        """
        ...

    @abstractmethod
    def search_terms(self, query: str) -> List[Ingredient]:
        """Return ingredient suggestions for a partial name.

        Raises:
            ProviderError: If the provider call fails
        """
        ...
