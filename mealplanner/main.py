from typing import Any, Dict
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
import time
import uuid
from mealplanner.core.config import load_engine_config
from mealplanner.core.logging_config import get_logger
from mealplanner.models import PlanMealRequest, PlanMealResponse
from mealplanner.services.catalog_service import build_catalog
from mealplanner.services.catalogs.base import CatalogError
from mealplanner.services.catalogs.local import LocalCatalog
from mealplanner.services.recipe_events import RecipeEventHandler
from mealplanner.services.request_validator import request_validator
from mealplanner.services.suggestion_engine import InvalidSuggestionRequest, suggestion_engine

app = FastAPI(title="Meal Suggestion API", version="0.1.0")
logger = get_logger(__name__)
config = load_engine_config()
catalog = build_catalog(config)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = str(uuid.uuid4())
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000.0
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} "
        f"{duration_ms:.1f}ms request_id={request_id}"
    )
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    logger.error(f"Recipe catalog failure: {exc.errors}")
    return JSONResponse(
        status_code=503,
        content={
            "error_code": "CATALOG_UNAVAILABLE",
            "message": "The recipe catalog is currently unavailable.",
            "catalog": exc.catalog,
            "errors": exc.errors
        }
    )


@app.exception_handler(InvalidSuggestionRequest)
async def invalid_request_handler(request: Request, exc: InvalidSuggestionRequest):
    return JSONResponse(
        status_code=400,
        content={
            "error_code": "INVALID_SUGGESTION_REQUEST",
            "message": str(exc)
        }
    )


@app.get("/")
def read_root():
    return {"message": "Welcome to the Meal Suggestion API. Visit /docs for documentation."}


@app.get("/health")
def health():
    return {"status": "ok", "catalog": catalog.name}


@app.post("/v1/plan-meal", response_model=PlanMealResponse)
def plan_meal(request: PlanMealRequest):
    """
    Suggest a diverse list of recipe ids satisfying the per-day constraints.
    """
    request_validator.validate(request)
    recipe_ids = suggestion_engine.suggest(request.to_suggestion_request(), catalog)
    return PlanMealResponse(
        recipe_ids=recipe_ids,
        requested=request.amount,
        fulfilled=len(recipe_ids)
    )


@app.post("/v1/recipe-events")
def recipe_event(event: Dict[str, Any]):
    """
    Apply a recipe created/updated/deleted event to the local catalog.
    """
    if not isinstance(catalog, LocalCatalog):
        raise HTTPException(
            status_code=409,
            detail={
                "error_code": "CATALOG_READ_ONLY",
                "message": f"The {catalog.name} catalog does not accept recipe events."
            }
        )
    changed = RecipeEventHandler(catalog).handle(event)
    return {"applied": changed}
