from typing import Any, Dict, List, Optional
from mealplanner.core.logging_config import get_logger
from mealplanner.models import RecipeAttributes
from mealplanner.services.catalogs.local import LocalCatalog

logger = get_logger(__name__)

RECIPE_CREATED = "RecipeCreated"
RECIPE_UPDATED = "RecipeUpdated"
RECIPE_DELETED = "RecipeDeleted"


def _entity_id(entity: Any) -> Optional[str]:
    if not isinstance(entity, dict) or entity.get("id") is None:
        return None
    return str(entity["id"])


def _entity_ids(entities: Any) -> List[str]:
    if not isinstance(entities, list):
        return []
    # Entries that are not {"id": ...} objects are skipped
    return [entity_id for entity_id in map(_entity_id, entities) if entity_id is not None]


def project_recipe(aggregate_id: str, recipe: Any) -> RecipeAttributes:
    """Flatten a recipe event body into the attributes the engine scores on."""
    if not isinstance(recipe, dict):
        recipe = {}
    name = recipe.get("name")
    return RecipeAttributes(
        id=str(aggregate_id),
        name=name if isinstance(name, str) else None,
        cuisine_id=_entity_id(recipe.get("cuisine")),
        main_ingredient_id=_entity_id(recipe.get("main_ingredient")),
        ingredient_ids=frozenset(_entity_ids(recipe.get("ingredients"))),
        allergy_ids=frozenset(_entity_ids(recipe.get("allergies")))
    )


class RecipeEventHandler:
    def __init__(self, catalog: LocalCatalog):
        self.catalog = catalog

    def handle(self, event: Dict[str, Any]) -> bool:
        """
        Apply one recipe lifecycle event to the catalog.

        Returns True when the catalog changed. The constraint index is not
        rebuilt here; it catches up on the catalog's next refresh.
        """
        event_type = event.get("type")
        aggregate_id = event.get("aggregate_id")
        logger.info(f"Handling event: {event_type} {aggregate_id}")

        if aggregate_id is None:
            logger.warning(f"Ignoring {event_type} event without aggregate_id")
            return False

        if event_type in (RECIPE_CREATED, RECIPE_UPDATED):
            self.catalog.upsert(project_recipe(aggregate_id, event.get("recipe")))
            return True
        if event_type == RECIPE_DELETED:
            return self.catalog.remove(str(aggregate_id))

        logger.warning(f"Ignoring unknown event type: {event_type}")
        return False
