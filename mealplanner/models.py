from enum import Enum
from typing import FrozenSet, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ConstraintKind(str, Enum):
    CUISINE = "cuisine"
    INGREDIENT = "ingredient"
    ALLERGY = "allergy"


class AllergyMode(str, Enum):
    INCLUDE = "include"  # allergy constraint keeps recipes containing the allergen
    EXCLUDE = "exclude"


class RecipeAttributes(BaseModel):
    """Read-only projection of a recipe used for matching and scoring."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    cuisine_id: Optional[str] = None
    main_ingredient_id: Optional[str] = None
    ingredient_ids: FrozenSet[str] = Field(default_factory=frozenset)
    allergy_ids: FrozenSet[str] = Field(default_factory=frozenset)


class Constraint(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ConstraintKind
    entity_id: str

    @classmethod
    def cuisine(cls, entity_id: str) -> "Constraint":
        return cls(kind=ConstraintKind.CUISINE, entity_id=entity_id)

    @classmethod
    def ingredient(cls, entity_id: str) -> "Constraint":
        return cls(kind=ConstraintKind.INGREDIENT, entity_id=entity_id)

    @classmethod
    def allergy(cls, entity_id: str) -> "Constraint":
        return cls(kind=ConstraintKind.ALLERGY, entity_id=entity_id)


class SuggestionRequest(BaseModel):
    amount_to_suggest: int = Field(..., ge=0, description="Total number of recipes desired")
    constraints_per_day: List[List[Constraint]] = Field(
        default_factory=list,
        description="One AND-combined constraint set per planning day"
    )
    already_selected: List[str] = Field(
        default_factory=list,
        description="Recipe ids to exclude and to diversify against"
    )


# --- HTTP request/response shapes ---

class DayConstraints(BaseModel):
    ingredient_ids: List[str] = Field(default_factory=list)
    cuisine_ids: List[str] = Field(default_factory=list)
    allergy_ids: List[str] = Field(default_factory=list)

    def to_constraints(self) -> List[Constraint]:
        return (
            [Constraint.ingredient(i) for i in self.ingredient_ids]
            + [Constraint.cuisine(c) for c in self.cuisine_ids]
            + [Constraint.allergy(a) for a in self.allergy_ids]
        )


class PlanMealRequest(BaseModel):
    amount: int = Field(..., ge=0, description="Number of recipes to suggest")
    constraints: List[DayConstraints] = Field(
        default_factory=list,
        description="Constraints for each planning day"
    )
    already_selected_recipe_ids: List[str] = Field(default_factory=list)

    def to_suggestion_request(self) -> SuggestionRequest:
        return SuggestionRequest(
            amount_to_suggest=self.amount,
            constraints_per_day=[day.to_constraints() for day in self.constraints],
            already_selected=self.already_selected_recipe_ids
        )


class PlanMealResponse(BaseModel):
    recipe_ids: List[str]
    requested: int
    fulfilled: int
