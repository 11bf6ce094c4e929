from typing import List, Sequence
from mealplanner.models import AllergyMode, Constraint, ConstraintKind, RecipeAttributes
from mealplanner.services.catalogs.base import RecipeCatalog


def matches_constraint(
    recipe: RecipeAttributes,
    constraint: Constraint,
    allergy_mode: AllergyMode = AllergyMode.INCLUDE
) -> bool:
    kind = constraint.kind
    entity_id = constraint.entity_id

    if kind is ConstraintKind.CUISINE:
        return recipe.cuisine_id == entity_id
    if kind is ConstraintKind.INGREDIENT:
        return entity_id == recipe.main_ingredient_id or entity_id in recipe.ingredient_ids
    if kind is ConstraintKind.ALLERGY:
        # INCLUDE keeps recipes that carry the allergen
        if allergy_mode is AllergyMode.EXCLUDE:
            return entity_id not in recipe.allergy_ids
        return entity_id in recipe.allergy_ids
    raise ValueError(f"Unsupported constraint kind: {kind}")


def matches(
    recipe: RecipeAttributes,
    constraints: Sequence[Constraint],
    allergy_mode: AllergyMode = AllergyMode.INCLUDE
) -> bool:
    """True when the recipe satisfies every constraint. An empty set matches everything."""
    return all(matches_constraint(recipe, c, allergy_mode) for c in constraints)


def query_by_constraints(
    catalog: RecipeCatalog,
    constraints: Sequence[Constraint],
    allergy_mode: AllergyMode = AllergyMode.INCLUDE
) -> List[RecipeAttributes]:
    """
    Fetch recipes matching all constraints from the catalog.

    The allergy mode is handed to the catalog, which does the heavy filtering
    (possibly from a stale index); each returned recipe is checked again
    against its own snapshot with the same mode so the result is always the
    AND of the constraints. Catalog order is preserved.
    """
    recipes = catalog.query_by_constraints(list(constraints), allergy_mode)
    return [r for r in recipes if matches(r, constraints, allergy_mode)]
