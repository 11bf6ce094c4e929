import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from mealplanner import main
from mealplanner.main import app
from mealplanner.services.catalogs.base import CatalogError


client = TestClient(app)


@pytest.fixture(autouse=True)
def use_test_catalog(monkeypatch, catalog):
    monkeypatch.setattr(main, "catalog", catalog)
    return catalog


def test_openapi_docs_contains_plan_meal():
    response = client.get("/openapi.json")
    assert response.status_code == 200
    paths = response.json().get("paths", {})
    assert "/v1/plan-meal" in paths
    assert "post" in paths["/v1/plan-meal"]


def test_health_reports_catalog():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "catalog": "Local"}


def test_plan_meal_returns_constrained_then_top_up_ids():
    response = client.post(
        "/v1/plan-meal",
        json={
            "amount": 3,
            "constraints": [
                {"cuisine_ids": ["mexican"], "ingredient_ids": ["rice"]},
                {"cuisine_ids": ["thai"]}
            ],
            "already_selected_recipe_ids": []
        }
    )
    assert response.status_code == 200
    assert "X-Request-ID" in response.headers
    data = response.json()
    assert data["recipe_ids"][:2] == ["r2", "r4"]
    assert len(data["recipe_ids"]) == 3
    assert data["requested"] == 3
    assert data["fulfilled"] == 3


def test_plan_meal_under_fulfilment_is_success():
    response = client.post("/v1/plan-meal", json={"amount": 20})
    assert response.status_code == 200
    data = response.json()
    assert data["fulfilled"] == 5
    assert data["requested"] == 20


def test_plan_meal_rejects_negative_amount():
    response = client.post("/v1/plan-meal", json={"amount": -1})
    assert response.status_code == 422


def test_plan_meal_rejects_amount_over_limit():
    response = client.post("/v1/plan-meal", json={"amount": 10_000})
    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "AMOUNT_LIMIT_EXCEEDED"


def test_catalog_failure_maps_to_503(monkeypatch):
    failing = MagicMock()
    failing.name = "RecipeApi"
    failing.query_page.side_effect = CatalogError("RecipeApi", ["timeout"])
    monkeypatch.setattr(main, "catalog", failing)

    response = client.post("/v1/plan-meal", json={"amount": 1})

    assert response.status_code == 503
    data = response.json()
    assert data["error_code"] == "CATALOG_UNAVAILABLE"
    assert data["errors"] == ["timeout"]


def test_recipe_event_updates_local_catalog():
    response = client.post(
        "/v1/recipe-events",
        json={
            "type": "RecipeCreated",
            "aggregate_id": "sushi",
            "recipe": {"cuisine": {"id": "japanese"}, "ingredients": [{"id": "rice"}]}
        }
    )
    assert response.status_code == 200
    assert response.json() == {"applied": True}

    response = client.post(
        "/v1/plan-meal",
        json={"amount": 1, "constraints": [{"cuisine_ids": ["japanese"]}]}
    )
    assert response.json()["recipe_ids"] == ["sushi"]


def test_recipe_event_rejected_for_remote_catalog(monkeypatch):
    remote = MagicMock()
    remote.name = "RecipeApi"
    monkeypatch.setattr(main, "catalog", remote)

    response = client.post("/v1/recipe-events", json={"type": "RecipeDeleted", "aggregate_id": "r1"})

    assert response.status_code == 409
    assert response.json()["detail"]["error_code"] == "CATALOG_READ_ONLY"


def test_recipe_event_with_bare_string_entities_is_applied():
    response = client.post(
        "/v1/recipe-events",
        json={
            "type": "RecipeCreated",
            "aggregate_id": "onigiri",
            "recipe": {"ingredients": ["rice", {"id": "nori"}]}
        }
    )

    assert response.status_code == 200
    assert response.json() == {"applied": True}
