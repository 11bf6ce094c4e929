import time
from typing import AbstractSet, Any, Dict, Iterable, List, Optional, Sequence
import requests
from pydantic import ValidationError
from mealplanner.models import AllergyMode, Constraint, RecipeAttributes
from mealplanner.services.catalogs.base import CatalogError, RecipeCatalog
from mealplanner.core.logging_config import get_logger

logger = get_logger(__name__)


class HttpRecipeCatalog(RecipeCatalog):
    """
    Catalog backed by the recipe read-model API.

    Endpoints (all JSON, all answering {"recipes": [...]}):
      POST /recipes/resolve   {"ids": [...]}
      POST /recipes/query     {"constraints": [{"kind": ..., "entity_id": ...}], "allergy_mode": ...}
      POST /recipes/page      {"excluding": [...], "page_size": n}

    Failures are raised as CatalogError straight away; there are no retries.
    """
    name = "RecipeApi"

    def __init__(self, base_url: str, timeout_seconds: float = 5, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _post(self, path: str, payload: Dict[str, Any]) -> List[RecipeAttributes]:
        url = f"{self.base_url}{path}"
        try:
            api_start = time.time()
            res = self.session.post(url, json=payload, timeout=self.timeout_seconds)
            res.raise_for_status()
            data = res.json()
            logger.debug(f"Recipe API {path}: {time.time() - api_start:.2f}s")
        except requests.RequestException as e:
            logger.error(f"Recipe API request to {url} failed: {e}")
            raise CatalogError(self.name, [f"{path}: {e}"]) from e
        except ValueError as e:
            logger.error(f"Recipe API returned invalid JSON from {url}: {e}")
            raise CatalogError(self.name, [f"{path}: invalid JSON"]) from e

        records = data.get("recipes") if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise CatalogError(self.name, [f"{path}: response has no 'recipes' list"])
        try:
            return [RecipeAttributes.model_validate(r) for r in records]
        except ValidationError as e:
            raise CatalogError(self.name, [f"{path}: malformed recipe record ({e.error_count()} errors)"]) from e

    def resolve(self, ids: Iterable[str]) -> List[RecipeAttributes]:
        return self._post("/recipes/resolve", {"ids": sorted(set(ids))})

    def query_by_constraints(
        self,
        constraints: Sequence[Constraint],
        allergy_mode: AllergyMode = AllergyMode.INCLUDE
    ) -> List[RecipeAttributes]:
        return self._post(
            "/recipes/query",
            {
                "constraints": [c.model_dump(mode="json") for c in constraints],
                "allergy_mode": allergy_mode.value
            }
        )

    def query_page(self, excluding: AbstractSet[str], page_size: int) -> List[RecipeAttributes]:
        return self._post(
            "/recipes/page",
            {"excluding": sorted(excluding), "page_size": page_size}
        )
