"""Meal template domain models."""

from dataclasses import dataclass

from meal_planner.domain.models import GoalType, MealType


@dataclass(frozen=True)
class TemplateIngredient:
    """A food reference and its gram amount inside a template."""

    food_id: str
    grams: float


@dataclass(frozen=True)
class MealTemplate:
    """Reusable recipe definition for one meal slot."""

    id: str
    name: str
    meal_type: MealType
    ingredients: tuple[TemplateIngredient, ...]
    suitable_goals: frozenset[GoalType]
    tags: tuple[str, ...] = ()
