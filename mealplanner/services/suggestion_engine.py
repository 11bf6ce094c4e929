import threading
from typing import Dict, List, Optional, Set
from mealplanner.core.config import EngineConfig, load_engine_config
from mealplanner.core.logging_config import get_logger
from mealplanner.models import AllergyMode, Constraint, RecipeAttributes, SuggestionRequest
from mealplanner.services.catalogs.base import RecipeCatalog
from mealplanner.services.constraint_matcher import query_by_constraints
from mealplanner.services.similarity import diversity_score, rank_by_diversity

DEFAULT_TOP_UP_PAGE_SIZE = 100

logger = get_logger(__name__)


class InvalidSuggestionRequest(ValueError):
    pass


class SuggestionCancelled(Exception):
    pass


class _Selection:
    """Recipes picked so far in one request, plus every id that must not be suggested."""

    def __init__(self, already_selected: List[RecipeAttributes], excluded_ids: Set[str]) -> None:
        self.recipes: Dict[str, RecipeAttributes] = {r.id: r for r in already_selected}
        self.excluded_ids: Set[str] = set(excluded_ids)
        self.result: List[str] = []

    def add(self, recipe: RecipeAttributes) -> None:
        self.recipes[recipe.id] = recipe
        self.excluded_ids.add(recipe.id)
        self.result.append(recipe.id)

    def available(self, recipes: List[RecipeAttributes]) -> List[RecipeAttributes]:
        return [r for r in recipes if r.id not in self.excluded_ids]

    @property
    def selected(self) -> List[RecipeAttributes]:
        return list(self.recipes.values())


class SuggestionEngine:
    def __init__(
        self,
        top_up_page_size: int = DEFAULT_TOP_UP_PAGE_SIZE,
        allergy_mode: AllergyMode = AllergyMode.INCLUDE
    ) -> None:
        if top_up_page_size <= 0:
            raise ValueError("top_up_page_size must be positive")
        self.top_up_page_size = top_up_page_size
        self.allergy_mode = allergy_mode

    @classmethod
    def from_config(cls, config: EngineConfig) -> "SuggestionEngine":
        return cls(
            top_up_page_size=config.top_up_page_size,
            allergy_mode=AllergyMode(config.allergy_mode)
        )

    def suggest(
        self,
        request: SuggestionRequest,
        catalog: RecipeCatalog,
        cancel_event: Optional[threading.Event] = None
    ) -> List[str]:
        """Pick a diverse, constraint-satisfying list of recipe ids.

        Args:
            request: Amount, per-day constraint sets and already chosen recipe ids.
            catalog: Recipe catalog to query. Its errors propagate unchanged.
            cancel_event: Optional event checked before every catalog call.

        Returns:
            Recipe ids in pick order: constrained picks first, then top-up picks.
            The list is shorter than requested when the catalog runs out.

        Notes:
            - Day constraint sets are consumed as a stack, so the last day is tried first.
            - A day whose constraints match nothing new is skipped.
            - Each pick maximizes diversity against everything selected so far;
              the first candidate wins ties.
        """
        amount = request.amount_to_suggest
        if amount < 0:
            raise InvalidSuggestionRequest(f"amount_to_suggest must be >= 0, got {amount}")

        logger.info(
            f"Suggesting {amount} recipes "
            f"({len(request.constraints_per_day)} constrained days, "
            f"{len(set(request.already_selected))} already selected)"
        )

        already_selected_ids = set(request.already_selected)
        already_selected: List[RecipeAttributes] = []
        if already_selected_ids:
            self._check_cancelled(cancel_event)
            already_selected = catalog.resolve(already_selected_ids)
        selection = _Selection(already_selected, already_selected_ids)

        # 1. Constrained picks, last day first
        stack: List[List[Constraint]] = [list(day) for day in request.constraints_per_day]
        while stack and len(selection.result) < amount:
            constraints = stack.pop()
            self._check_cancelled(cancel_event)
            candidates = selection.available(
                query_by_constraints(catalog, constraints, self.allergy_mode)
            )
            if not candidates:
                logger.debug(f"No unselected recipe matches {self._describe(constraints)}; skipping day.")
                continue

            selected = selection.selected
            best = max(candidates, key=lambda c: diversity_score(c, selected))
            selection.add(best)
            logger.debug(f"Picked {best.id} for {self._describe(constraints)}")

        # 2. Unconstrained top-up
        while len(selection.result) < amount:
            self._check_cancelled(cancel_event)
            page = selection.available(
                catalog.query_page(frozenset(selection.excluded_ids), self.top_up_page_size)
            )
            if not page:
                break

            for _, recipe in rank_by_diversity(page, selection.selected):
                if len(selection.result) >= amount:
                    break
                if recipe.id not in selection.excluded_ids:
                    selection.add(recipe)

        if len(selection.result) < amount:
            logger.warning(
                f"Catalog exhausted: suggested {len(selection.result)} of {amount} requested recipes."
            )
        else:
            logger.info(f"Suggested {len(selection.result)} recipes.")
        return selection.result

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise SuggestionCancelled("Suggestion request was cancelled")

    @staticmethod
    def _describe(constraints: List[Constraint]) -> str:
        if not constraints:
            return "no constraints"
        return " AND ".join(f"{c.kind.value}={c.entity_id}" for c in constraints)


suggestion_engine = SuggestionEngine.from_config(load_engine_config())
