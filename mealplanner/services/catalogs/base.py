from abc import ABC, abstractmethod
from typing import AbstractSet, Iterable, List, Sequence
from mealplanner.models import AllergyMode, Constraint, RecipeAttributes


class CatalogError(Exception):
    def __init__(self, catalog: str, errors: List[str]):
        super().__init__(f"Recipe catalog '{catalog}' failed: {'; '.join(errors)}")
        self.catalog = catalog
        self.errors = errors


class RecipeCatalog(ABC):
    name: str = "Unknown"

    @abstractmethod
    def resolve(self, ids: Iterable[str]) -> List[RecipeAttributes]:
        """
        Fetch full attributes for known recipe ids.
        Unknown ids are left out of the result.
        """
        pass

    @abstractmethod
    def query_by_constraints(
        self,
        constraints: Sequence[Constraint],
        allergy_mode: AllergyMode = AllergyMode.INCLUDE
    ) -> List[RecipeAttributes]:
        """
        Return recipes satisfying the AND of all constraints, in catalog order.
        `allergy_mode` decides whether an allergy constraint keeps or drops
        recipes carrying the allergen; the caller owns it.
        """
        pass

    @abstractmethod
    def query_page(self, excluding: AbstractSet[str], page_size: int) -> List[RecipeAttributes]:
        """
        Return up to `page_size` recipes, in catalog order, whose ids are not in `excluding`.
        """
        pass
