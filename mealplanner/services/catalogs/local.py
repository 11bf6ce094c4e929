import json
import os
import threading
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence, Set
from pydantic import ValidationError
from mealplanner.models import AllergyMode, Constraint, ConstraintKind, RecipeAttributes
from mealplanner.services.catalogs.base import RecipeCatalog
from mealplanner.core.logging_config import get_logger

logger = get_logger(__name__)


class RecipeIndex:
    """
    Denormalized lookup tables over a snapshot of the catalog.

    Each table maps an entity id (cuisine, ingredient, allergy) to the set of
    recipe ids carrying it. The main ingredient is indexed alongside the
    regular ingredients so an ingredient lookup covers both.
    """

    def __init__(self, recipes: Iterable[RecipeAttributes]):
        self.recipes: Dict[str, RecipeAttributes] = {}
        self.position: Dict[str, int] = {}
        self.by_cuisine: Dict[str, Set[str]] = {}
        self.by_ingredient: Dict[str, Set[str]] = {}
        self.by_allergy: Dict[str, Set[str]] = {}

        for recipe in recipes:
            self.position[recipe.id] = len(self.recipes)
            self.recipes[recipe.id] = recipe
            if recipe.cuisine_id is not None:
                self.by_cuisine.setdefault(recipe.cuisine_id, set()).add(recipe.id)
            if recipe.main_ingredient_id is not None:
                self.by_ingredient.setdefault(recipe.main_ingredient_id, set()).add(recipe.id)
            for ingredient_id in recipe.ingredient_ids:
                self.by_ingredient.setdefault(ingredient_id, set()).add(recipe.id)
            for allergy_id in recipe.allergy_ids:
                self.by_allergy.setdefault(allergy_id, set()).add(recipe.id)

    def __len__(self) -> int:
        return len(self.recipes)

    def lookup(self, constraint: Constraint, allergy_mode: AllergyMode) -> Set[str]:
        kind = constraint.kind
        if kind is ConstraintKind.CUISINE:
            return self.by_cuisine.get(constraint.entity_id, set())
        if kind is ConstraintKind.INGREDIENT:
            return self.by_ingredient.get(constraint.entity_id, set())
        if kind is ConstraintKind.ALLERGY:
            carrying = self.by_allergy.get(constraint.entity_id, set())
            if allergy_mode is AllergyMode.EXCLUDE:
                return set(self.recipes) - carrying
            return carrying
        raise ValueError(f"Unsupported constraint kind: {kind}")

    def select(self, constraints: Sequence[Constraint], allergy_mode: AllergyMode) -> List[RecipeAttributes]:
        """Intersect the lookups one constraint at a time, then restore catalog order."""
        candidate_ids: Optional[Set[str]] = None
        for constraint in constraints:
            matched = self.lookup(constraint, allergy_mode)
            candidate_ids = set(matched) if candidate_ids is None else candidate_ids & matched
            if not candidate_ids:
                return []

        if candidate_ids is None:
            return list(self.recipes.values())
        return [self.recipes[i] for i in sorted(candidate_ids, key=self.position.__getitem__)]

    def page(self, excluding: AbstractSet[str], page_size: int) -> List[RecipeAttributes]:
        page: List[RecipeAttributes] = []
        if page_size <= 0:
            return page
        for recipe_id, recipe in self.recipes.items():
            if recipe_id in excluding:
                continue
            page.append(recipe)
            if len(page) >= page_size:
                break
        return page


class LocalCatalog(RecipeCatalog):
    """
    Recipe catalog kept in memory and loaded from a JSON file.

    Writes land in the primary store right away; constraint and page queries
    read from a `RecipeIndex` that is only rebuilt by `refresh()`, so reads can
    lag behind writes until then. With `auto_refresh` the next read rebuilds
    a stale index.
    """
    name = "Local"

    def __init__(
        self,
        file_path: Optional[str] = "data/recipes.json",
        recipes: Optional[Iterable[RecipeAttributes]] = None,
        auto_refresh: bool = True
    ):
        self.auto_refresh = auto_refresh
        self._lock = threading.RLock()
        self._recipes: Dict[str, RecipeAttributes] = {}

        source = recipes if recipes is not None else self._load_data(file_path)
        for recipe in source:
            if recipe.id in self._recipes:
                logger.warning(f"Duplicate recipe id {recipe.id} in catalog; keeping the first entry.")
                continue
            self._recipes[recipe.id] = recipe

        self._index = RecipeIndex(self._recipes.values())
        self._stale = False
        logger.info(f"Loaded {len(self._recipes)} recipes into the local catalog.")

    def _load_data(self, file_path: Optional[str]) -> List[RecipeAttributes]:
        if not file_path or not os.path.exists(file_path):
            logger.warning(f"{file_path} not found.")
            return []
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError:
            logger.error(f"Error decoding {file_path}")
            return []

        recipes = []
        for record in raw:
            try:
                recipes.append(RecipeAttributes.model_validate(record))
            except ValidationError as e:
                logger.error(f"Skipping invalid recipe record {record.get('id') if isinstance(record, dict) else record!r}: {e}")
        return recipes

    @property
    def stale(self) -> bool:
        return self._stale

    def refresh(self) -> None:
        """Rebuild the index from the primary store."""
        with self._lock:
            self._index = RecipeIndex(list(self._recipes.values()))
            self._stale = False
        logger.info(f"Refreshed catalog index ({len(self._index)} recipes).")

    def upsert(self, recipe: RecipeAttributes) -> None:
        with self._lock:
            self._recipes[recipe.id] = recipe
            self._stale = True

    def remove(self, recipe_id: str) -> bool:
        with self._lock:
            removed = self._recipes.pop(recipe_id, None) is not None
            if removed:
                self._stale = True
        return removed

    def _current_index(self) -> RecipeIndex:
        with self._lock:
            if self._stale and self.auto_refresh:
                self.refresh()
            return self._index

    def resolve(self, ids: Iterable[str]) -> List[RecipeAttributes]:
        wanted = set(ids)
        with self._lock:
            return [r for r in self._recipes.values() if r.id in wanted]

    def query_by_constraints(
        self,
        constraints: Sequence[Constraint],
        allergy_mode: AllergyMode = AllergyMode.INCLUDE
    ) -> List[RecipeAttributes]:
        return self._current_index().select(constraints, allergy_mode)

    def query_page(self, excluding: AbstractSet[str], page_size: int) -> List[RecipeAttributes]:
        return self._current_index().page(excluding, page_size)
