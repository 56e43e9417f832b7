"""Supabase implementation of the food catalog."""

import json
from dataclasses import dataclass

from supabase import Client

from meal_planner.domain.nutrition import MICRONUTRIENTS, FoodNutrientRecord
from meal_planner.services.nutrition import FoodCatalog


@dataclass
class SupabaseFoodCatalog(FoodCatalog):
    """Resolves per-100g food records from the foods table."""

    client: Client

    def resolve_many(self, food_ids: list[str]) -> dict[str, FoodNutrientRecord]:
        """Fetch all requested foods with a single query."""
        if not food_ids:
            return {}
        response = (
            self.client.table("foods")
            .select("*")
            .in_("id", list(food_ids))
            .execute()
        )
        records = [_parse_food(row) for row in response.data or []]
        return {record.id: record for record in records}


def _parse_food(row: dict[str, object]) -> FoodNutrientRecord:
    micros = {
        name: float(row[name]) if row.get(name) is not None else None
        for name in MICRONUTRIENTS
    }
    return FoodNutrientRecord(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        aliases=_parse_aliases(row.get("aliases")),
        calories=float(row.get("calories", 0.0)),
        protein_g=float(row.get("protein", 0.0)),
        carbs_g=float(row.get("carbs", 0.0)),
        fat_g=float(row.get("fat", 0.0)),
        **micros,
    )


def _parse_aliases(raw: object) -> tuple[str, ...]:
    """Aliases are stored either as a JSON array column or a JSON string."""
    if isinstance(raw, list):
        return tuple(str(alias) for alias in raw)
    if isinstance(raw, str) and raw:
        try:
            parsed = json.loads(raw)
        except ValueError:
            return (raw,)
        if isinstance(parsed, list):
            return tuple(str(alias) for alias in parsed)
    return ()
