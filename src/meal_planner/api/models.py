"""Pydantic models for the meal plan API."""

from datetime import date

from pydantic import BaseModel, Field

from meal_planner.domain.plans import GeneratedMealPlan, PlannedMeal
from meal_planner.services.plans import MealReplacement


class GeneratePlanRequest(BaseModel):
    """Body of a plan generation request."""

    days: int | None = Field(default=None, ge=1)
    start_date: date | None = None


class IngredientOut(BaseModel):
    """Scaled ingredient in a planned meal."""

    food_id: str
    name: str
    grams: float
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    micros: dict[str, float] = {}


class NutritionOut(BaseModel):
    """Aggregated nutrition of a meal."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    micros: dict[str, float] = {}


class PlannedMealOut(BaseModel):
    """One meal of a plan."""

    id: str | None
    date: date
    meal_type: str
    template_id: str
    template_name: str
    ingredients: list[IngredientOut]
    nutrition: NutritionOut

    @classmethod
    def from_domain(cls, meal: PlannedMeal) -> "PlannedMealOut":
        return cls(
            id=meal.id,
            date=meal.date,
            meal_type=meal.meal_type.value,
            template_id=meal.template_id,
            template_name=meal.template_name,
            ingredients=[
                IngredientOut(
                    food_id=item.food_id,
                    name=item.name,
                    grams=item.grams,
                    calories=item.calories,
                    protein_g=item.protein_g,
                    carbs_g=item.carbs_g,
                    fat_g=item.fat_g,
                    micros=item.micros,
                )
                for item in meal.ingredients
            ],
            nutrition=NutritionOut(
                calories=meal.nutrition.calories,
                protein_g=meal.nutrition.protein_g,
                carbs_g=meal.nutrition.carbs_g,
                fat_g=meal.nutrition.fat_g,
                micros=meal.nutrition.micros,
            ),
        )


class MealPlanOut(BaseModel):
    """A generated meal plan."""

    id: str | None
    member_id: str
    start_date: date
    end_date: date
    goal_type: str
    target_calories: float
    target_protein_g: float
    target_carbs_g: float
    target_fat_g: float
    complete: bool
    meals: list[PlannedMealOut]

    @classmethod
    def from_domain(cls, plan: GeneratedMealPlan) -> "MealPlanOut":
        return cls(
            id=plan.id,
            member_id=plan.member_id,
            start_date=plan.start_date,
            end_date=plan.end_date,
            goal_type=plan.goal_type.value,
            target_calories=plan.daily_targets.calories,
            target_protein_g=plan.daily_targets.protein_g,
            target_carbs_g=plan.daily_targets.carbs_g,
            target_fat_g=plan.daily_targets.fat_g,
            complete=plan.complete,
            meals=[PlannedMealOut.from_domain(meal) for meal in plan.meals],
        )


class CandidateScoreOut(BaseModel):
    """How the chosen template compared with the meal it replaced."""

    template_id: str
    deviations: dict[str, float]
    penalty: float
    seasonal_bonus: float
    score: float


class MealReplacementOut(BaseModel):
    """A replaced meal with the score that selected it."""

    meal: PlannedMealOut
    penalized: bool
    selected: CandidateScoreOut | None

    @classmethod
    def from_domain(cls, replacement: MealReplacement) -> "MealReplacementOut":
        chosen = replacement.trace.selected
        return cls(
            meal=PlannedMealOut.from_domain(replacement.meal),
            penalized=replacement.penalized,
            selected=(
                CandidateScoreOut(
                    template_id=chosen.template_id,
                    deviations=chosen.deviations,
                    penalty=chosen.penalty,
                    seasonal_bonus=chosen.seasonal_bonus,
                    score=chosen.score,
                )
                if chosen is not None
                else None
            ),
        )
