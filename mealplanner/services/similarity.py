from typing import Collection, Iterable, List, Tuple
from mealplanner.models import RecipeAttributes

CUISINE_WEIGHT = 0.25
MAIN_INGREDIENT_WEIGHT = 0.25


def similarity(a: RecipeAttributes, b: RecipeAttributes) -> float:
    """Score how alike two recipes are.

    Args:
        a: First recipe.
        b: Second recipe.

    Returns:
        A non-negative score where higher means more similar.

    Notes:
        - Shared cuisine and shared main ingredient each add a fixed weight,
          only when both sides have a value.
        - Ingredient overlap is the overlap coefficient
          |A & B| / min(|A|, |B|), not Jaccard.
        - The total is not capped and can exceed 1.0.
    """
    score = 0.0

    if a.cuisine_id is not None and b.cuisine_id is not None and a.cuisine_id == b.cuisine_id:
        score += CUISINE_WEIGHT

    if (
        a.main_ingredient_id is not None
        and b.main_ingredient_id is not None
        and a.main_ingredient_id == b.main_ingredient_id
    ):
        score += MAIN_INGREDIENT_WEIGHT

    if a.ingredient_ids and b.ingredient_ids:
        shared = len(a.ingredient_ids & b.ingredient_ids)
        score += shared / min(len(a.ingredient_ids), len(b.ingredient_ids))

    return score


def diversity_score(candidate: RecipeAttributes, selected: Collection[RecipeAttributes]) -> float:
    """Return 1 - mean similarity to the selected recipes (1.0 when nothing is selected).

    The result may be negative since similarity is uncapped; only the ordering matters.
    """
    if not selected:
        return 1.0
    total = sum(similarity(candidate, s) for s in selected)
    return 1.0 - total / len(selected)


def rank_by_diversity(
    candidates: Iterable[RecipeAttributes],
    selected: Collection[RecipeAttributes]
) -> List[Tuple[float, RecipeAttributes]]:
    """Order candidates by diversity, most diverse first. Ties keep input order."""
    scored = [(diversity_score(c, selected), c) for c in candidates]
    # sorted() is stable, so equal scores stay in catalog order
    return sorted(scored, key=lambda item: item[0], reverse=True)
