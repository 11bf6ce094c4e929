import pytest
from mealplanner.models import RecipeAttributes
from mealplanner.services.catalogs.local import LocalCatalog
from mealplanner.services.suggestion_engine import SuggestionEngine


@pytest.fixture
def recipes():
    """Five recipes in a fixed catalog order."""
    return [
        RecipeAttributes(id="r1", cuisine_id="mexican", main_ingredient_id="chicken",
                         ingredient_ids={"chicken", "onion", "tortilla"}),
        RecipeAttributes(id="r2", cuisine_id="thai", main_ingredient_id="chicken",
                         ingredient_ids={"chicken", "rice", "coconut"}),
        RecipeAttributes(id="r3", cuisine_id="greek", main_ingredient_id="feta",
                         ingredient_ids={"feta", "cucumber", "tomato"}),
        RecipeAttributes(id="r4", cuisine_id="mexican", main_ingredient_id="beans",
                         ingredient_ids={"beans", "rice", "onion"}),
        RecipeAttributes(id="r5", cuisine_id="italian", main_ingredient_id="pasta",
                         ingredient_ids={"pasta", "tomato", "basil"}, allergy_ids={"gluten"}),
    ]


@pytest.fixture
def catalog(recipes):
    """In-memory catalog over the `recipes` fixture."""
    return LocalCatalog(file_path=None, recipes=recipes)


@pytest.fixture
def engine():
    """Engine with the default top-up page size."""
    return SuggestionEngine()
