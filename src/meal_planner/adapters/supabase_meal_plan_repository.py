"""Supabase repository for generated meal plans."""

from dataclasses import dataclass, replace
from datetime import date

from supabase import Client

from meal_planner.domain.models import GoalType, MealType
from meal_planner.domain.nutrition import IngredientNutrition, NutrientSummary
from meal_planner.domain.plans import GeneratedMealPlan, PlannedMeal
from meal_planner.domain.targets import MacroTargets
from meal_planner.services.plans import MealPlanRepository

_MEAL_COLUMNS = (
    "id, plan_id, date, meal_type, template_id, template_name, calories, protein, "
    "carbs, fat, micros"
)
_INGREDIENT_COLUMNS = (
    "meal_id, food_id, name_snapshot, amount, item_calories, item_protein, "
    "item_carbs, item_fat, item_micros"
)


@dataclass
class SupabaseMealPlanRepository(MealPlanRepository):
    """Supabase implementation for meal plans, meals and ingredients."""

    client: Client

    def save_plan(self, plan: GeneratedMealPlan) -> GeneratedMealPlan:
        """Insert the plan header, its meals and their ingredients."""
        response = (
            self.client.table("meal_plans")
            .insert(
                {
                    "member_id": plan.member_id,
                    "start_date": plan.start_date.isoformat(),
                    "end_date": plan.end_date.isoformat(),
                    "goal_type": plan.goal_type.value,
                    "target_calories": plan.daily_targets.calories,
                    "target_protein": plan.daily_targets.protein_g,
                    "target_carbs": plan.daily_targets.carbs_g,
                    "target_fat": plan.daily_targets.fat_g,
                    "status": "active",
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal plan")
        plan_id = str(response.data[0]["id"])
        if not plan.meals:
            return replace(plan, id=plan_id)

        try:
            saved = self._insert_meals(plan_id, plan.meals)
        except Exception:
            self.client.table("meals").delete().eq("plan_id", plan_id).execute()
            self.client.table("meal_plans").delete().eq("id", plan_id).execute()
            raise
        return replace(plan, id=plan_id).with_meals(saved)

    def get_plan(self, plan_id: str) -> GeneratedMealPlan | None:
        """Return a plan header without its meals."""
        response = (
            self.client.table("meal_plans")
            .select(
                "id, member_id, start_date, end_date, goal_type, target_calories, "
                "target_protein, target_carbs, target_fat"
            )
            .eq("id", plan_id)
            .is_("deleted_at", "null")
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return GeneratedMealPlan(
            id=str(row["id"]),
            member_id=str(row["member_id"]),
            start_date=date.fromisoformat(str(row["start_date"])[:10]),
            end_date=date.fromisoformat(str(row["end_date"])[:10]),
            goal_type=GoalType(row["goal_type"]),
            daily_targets=MacroTargets(
                calories=float(row.get("target_calories", 0.0)),
                protein_g=float(row.get("target_protein", 0.0)),
                carbs_g=float(row.get("target_carbs", 0.0)),
                fat_g=float(row.get("target_fat", 0.0)),
            ),
        )

    def get_meal(self, meal_id: str) -> PlannedMeal | None:
        """Return a meal with its ingredient rows."""
        response = (
            self.client.table("meals")
            .select(_MEAL_COLUMNS)
            .eq("id", meal_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0], self._list_ingredients(meal_id))

    def replace_meal(self, meal: PlannedMeal) -> PlannedMeal:
        """Swap a meal's ingredients and nutrition in place.

        New ingredient rows are written before the old ones are removed, so a
        failure part-way never leaves the meal without ingredients.
        """
        if meal.id is None:
            raise ValueError("Cannot replace a meal that has not been saved")
        old_response = (
            self.client.table("meal_ingredients")
            .select("id")
            .eq("meal_id", meal.id)
            .execute()
        )
        old_ids = [str(row["id"]) for row in old_response.data or []]
        new_ids: list[str] = []
        if meal.ingredients:
            inserted = (
                self.client.table("meal_ingredients")
                .insert([_ingredient_row(meal.id, item) for item in meal.ingredients])
                .execute()
            )
            new_ids = [str(row["id"]) for row in inserted.data or []]
        try:
            if len(new_ids) != len(meal.ingredients):
                raise RuntimeError("Failed to insert replacement ingredients")
            self.client.table("meals").update(
                {
                    "template_id": meal.template_id,
                    "template_name": meal.template_name,
                    **_nutrition_columns(meal.nutrition),
                }
            ).eq("id", meal.id).execute()
        except Exception:
            if new_ids:
                self.client.table("meal_ingredients").delete().in_(
                    "id", new_ids
                ).execute()
            raise
        if old_ids:
            self.client.table("meal_ingredients").delete().in_(
                "id", old_ids
            ).execute()
        return meal

    def _insert_meals(
        self, plan_id: str, meals: list[PlannedMeal]
    ) -> list[PlannedMeal]:
        meal_response = (
            self.client.table("meals")
            .insert([_meal_row(plan_id, meal) for meal in meals])
            .execute()
        )
        meal_rows = meal_response.data or []
        if len(meal_rows) != len(meals):
            raise RuntimeError("Failed to create meals for meal plan")
        saved = [
            replace(meal, id=str(row["id"]), plan_id=plan_id)
            for meal, row in zip(meals, meal_rows, strict=True)
        ]
        ingredient_rows = [
            _ingredient_row(meal.id, item)
            for meal in saved
            for item in meal.ingredients
        ]
        if ingredient_rows:
            self.client.table("meal_ingredients").insert(ingredient_rows).execute()
        return saved

    def _list_ingredients(self, meal_id: str) -> list[IngredientNutrition]:
        response = (
            self.client.table("meal_ingredients")
            .select(_INGREDIENT_COLUMNS)
            .eq("meal_id", meal_id)
            .execute()
        )
        return [_parse_ingredient(row) for row in response.data or []]


def _nutrition_columns(nutrition: NutrientSummary) -> dict[str, object]:
    return {
        "calories": nutrition.calories,
        "protein": nutrition.protein_g,
        "carbs": nutrition.carbs_g,
        "fat": nutrition.fat_g,
        "micros": nutrition.micros,
    }


def _meal_row(plan_id: str, meal: PlannedMeal) -> dict[str, object]:
    return {
        "plan_id": plan_id,
        "date": meal.date.isoformat(),
        "meal_type": meal.meal_type.value,
        "template_id": meal.template_id,
        "template_name": meal.template_name,
        **_nutrition_columns(meal.nutrition),
    }


def _ingredient_row(meal_id: str, item: IngredientNutrition) -> dict[str, object]:
    return {
        "meal_id": meal_id,
        "food_id": item.food_id,
        "name_snapshot": item.name,
        "amount": item.grams,
        "item_calories": item.calories,
        "item_protein": item.protein_g,
        "item_carbs": item.carbs_g,
        "item_fat": item.fat_g,
        "item_micros": item.micros,
    }


def _parse_meal(
    row: dict[str, object], ingredients: list[IngredientNutrition]
) -> PlannedMeal:
    return PlannedMeal(
        id=str(row["id"]),
        plan_id=str(row["plan_id"]),
        date=date.fromisoformat(str(row["date"])[:10]),
        meal_type=MealType(row["meal_type"]),
        template_id=str(row.get("template_id") or ""),
        template_name=str(row.get("template_name") or ""),
        ingredients=ingredients,
        nutrition=NutrientSummary(
            calories=float(row.get("calories", 0.0)),
            protein_g=float(row.get("protein", 0.0)),
            carbs_g=float(row.get("carbs", 0.0)),
            fat_g=float(row.get("fat", 0.0)),
            micros=dict(row.get("micros") or {}),
        ),
    )


def _parse_ingredient(row: dict[str, object]) -> IngredientNutrition:
    return IngredientNutrition(
        food_id=str(row["food_id"]),
        name=str(row.get("name_snapshot", "")),
        grams=float(row.get("amount", 0.0)),
        calories=float(row.get("item_calories", 0.0)),
        protein_g=float(row.get("item_protein", 0.0)),
        carbs_g=float(row.get("item_carbs", 0.0)),
        fat_g=float(row.get("item_fat", 0.0)),
        micros=dict(row.get("item_micros") or {}),
    )
