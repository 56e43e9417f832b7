"""Calorie and macro target models."""

from dataclasses import dataclass

from meal_planner.domain.models import ActivityLevel, MacroRatios, MealType


@dataclass(frozen=True)
class MacroTargets:
    """Calorie and macro numbers for a day or a single meal."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class MealTargets:
    """Per-slot targets for one day."""

    breakfast: MacroTargets
    lunch: MacroTargets
    dinner: MacroTargets
    snack: MacroTargets

    def for_meal(self, meal_type: MealType) -> MacroTargets:
        return getattr(self, meal_type.value)

    def slots(self) -> list[MacroTargets]:
        return [self.for_meal(meal_type) for meal_type in MealType]


@dataclass(frozen=True)
class PlanTargets:
    """Everything derived from a profile and goal before matching starts."""

    age: int
    age_group: str
    bmi: float
    activity_level: ActivityLevel
    bmr: float
    tdee: float
    target_calories: float
    ratios: MacroRatios
    daily: MacroTargets
    meals: MealTargets
