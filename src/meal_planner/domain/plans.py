"""Domain models for generated meal plans."""

from dataclasses import dataclass, field, replace
from datetime import date

from meal_planner.domain.models import GoalType, MealType
from meal_planner.domain.nutrition import IngredientNutrition, NutrientSummary
from meal_planner.domain.targets import MacroTargets


@dataclass(frozen=True)
class PlannedMeal:
    """One meal occurrence inside a plan."""

    date: date
    meal_type: MealType
    template_id: str
    template_name: str
    ingredients: list[IngredientNutrition]
    nutrition: NutrientSummary
    id: str | None = None
    plan_id: str | None = None


@dataclass(frozen=True)
class GeneratedMealPlan:
    """A finished multi-day schedule."""

    member_id: str
    start_date: date
    end_date: date
    goal_type: GoalType
    daily_targets: MacroTargets
    meals: list[PlannedMeal] = field(default_factory=list)
    complete: bool = True
    id: str | None = None

    def with_meals(self, meals: list[PlannedMeal]) -> "GeneratedMealPlan":
        return replace(self, meals=meals)

    def meals_on(self, day: date) -> list[PlannedMeal]:
        """Return the meals scheduled for a given date."""
        return [meal for meal in self.meals if meal.date == day]
