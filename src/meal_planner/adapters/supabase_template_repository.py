"""Supabase implementation of the meal template repository."""

from dataclasses import dataclass

from supabase import Client

from meal_planner.domain.models import GoalType, MealType
from meal_planner.domain.templates import MealTemplate, TemplateIngredient
from meal_planner.services.matching import TemplateRepository
from meal_planner.services.nutrition import ingredient_grams


@dataclass
class SupabaseTemplateRepository(TemplateRepository):
    """Loads templates and their ingredient rows for a meal slot."""

    client: Client

    def list_templates(self, meal_type: MealType) -> list[MealTemplate]:
        """Return templates for a meal slot in their stored order."""
        template_response = (
            self.client.table("meal_templates")
            .select("id, name, meal_type, suitable_goals, tags")
            .eq("meal_type", meal_type.value)
            .order("position", desc=False)
            .execute()
        )
        rows = template_response.data or []
        if not rows:
            return []

        ingredient_response = (
            self.client.table("meal_template_ingredients")
            .select("template_id, food_id, amount, unit")
            .in_("template_id", [str(row["id"]) for row in rows])
            .execute()
        )
        ingredients: dict[str, list[TemplateIngredient]] = {}
        for row in ingredient_response.data or []:
            ingredients.setdefault(str(row["template_id"]), []).append(
                TemplateIngredient(
                    food_id=str(row["food_id"]),
                    grams=ingredient_grams(
                        float(row.get("amount", 0.0)), row.get("unit")
                    ),
                )
            )

        return [
            MealTemplate(
                id=str(row["id"]),
                name=str(row.get("name", "")),
                meal_type=MealType(row["meal_type"]),
                ingredients=tuple(ingredients.get(str(row["id"]), [])),
                suitable_goals=frozenset(
                    GoalType(goal) for goal in row.get("suitable_goals") or []
                ),
                tags=tuple(row.get("tags") or []),
            )
            for row in rows
        ]
