"""Nutrition aggregation over the food catalog."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from meal_planner.domain.errors import CatalogUnavailableError, ValidationError
from meal_planner.domain.nutrition import (
    MICRONUTRIENTS,
    FoodNutrientRecord,
    IngredientNutrition,
    NutrientSummary,
    NutritionResult,
)
from meal_planner.services.cache import Cache

_logger = logging.getLogger(__name__)

_MASS_UNITS = {
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.35,
    "lb": 453.592,
}

# Approximate grams per volume unit; density varies by food.
_VOLUME_TABLE = {
    "rice": {"cup": 200, "tbsp": 12.5, "tsp": 4.2, "ml": 0.2, "l": 200},
    "flour": {"cup": 120, "tbsp": 7.5, "tsp": 2.5, "ml": 0.12, "l": 120},
    "sugar": {"cup": 200, "tbsp": 12.5, "tsp": 4.2, "ml": 0.2, "l": 200},
    "milk": {"cup": 240, "tbsp": 15, "tsp": 5, "ml": 1, "l": 1000},
    "oil": {"cup": 220, "tbsp": 14, "tsp": 4.7, "ml": 0.9, "l": 900},
    "default": {"cup": 200, "tbsp": 12.5, "tsp": 4.2, "ml": 1, "l": 1000},
}


class FoodCatalog(Protocol):
    """Lookup interface for per-100g food nutrient records."""

    def resolve_many(self, food_ids: list[str]) -> dict[str, FoodNutrientRecord]:
        """Return records keyed by id; unknown ids are absent."""


@dataclass
class NutritionAggregator:
    """Scales food records to portions and sums them."""

    catalog: FoodCatalog
    cache: Cache
    food_ttl_seconds: int = 3600

    def resolve_many(self, food_ids: Iterable[str]) -> dict[str, FoodNutrientRecord]:
        """Resolve unique food ids with one catalog call for cache misses."""
        unique_ids = list(dict.fromkeys(food_ids))
        if not unique_ids:
            return {}
        cached = self.cache.get_many([_cache_key(food_id) for food_id in unique_ids])
        records = {
            food_id: cached[_cache_key(food_id)]
            for food_id in unique_ids
            if _cache_key(food_id) in cached
        }
        missing = [food_id for food_id in unique_ids if food_id not in records]
        if missing:
            try:
                fetched = self.catalog.resolve_many(missing)
            except Exception as exc:
                raise CatalogUnavailableError(
                    f"Food catalog lookup failed for {len(missing)} foods"
                ) from exc
            self.cache.set_many(
                {_cache_key(food_id): record for food_id, record in fetched.items()},
                ttl_seconds=self.food_ttl_seconds,
            )
            records.update(fetched)
        return records

    def aggregate(
        self,
        ingredients: list[tuple[str, float]],
        records: dict[str, FoodNutrientRecord] | None = None,
    ) -> NutritionResult:
        """Scale and sum ingredients given as (food_id, grams) pairs.

        Pass ``records`` when they were already resolved to skip the lookup.
        """
        if records is None:
            records = self.resolve_many(food_id for food_id, _ in ingredients)
        items: list[IngredientNutrition] = []
        for food_id, grams in ingredients:
            record = records.get(food_id)
            if record is None:
                _logger.warning("Skipping unknown food %s in aggregation", food_id)
                continue
            items.append(scale(record, grams))
        return NutritionResult(summary=summarize(items), items=items)


def scale(record: FoodNutrientRecord, grams: float) -> IngredientNutrition:
    """Scale a per-100g record to a portion, rounding to one decimal."""
    ratio = grams / 100
    micros = {
        name: round(value * ratio, 1)
        for name in MICRONUTRIENTS
        if (value := getattr(record, name)) is not None
    }
    return IngredientNutrition(
        food_id=record.id,
        name=record.name,
        grams=grams,
        calories=round(record.calories * ratio, 1),
        protein_g=round(record.protein_g * ratio, 1),
        carbs_g=round(record.carbs_g * ratio, 1),
        fat_g=round(record.fat_g * ratio, 1),
        micros=micros,
    )


def summarize(items: list[IngredientNutrition]) -> NutrientSummary:
    """Sum scaled ingredients; a micro is totalled only if some item has it."""
    micros: dict[str, float] = {}
    for name in MICRONUTRIENTS:
        present = [item.micros[name] for item in items if name in item.micros]
        if present:
            micros[name] = round(sum(present), 1)
    return NutrientSummary(
        calories=round(sum(item.calories for item in items), 1),
        protein_g=round(sum(item.protein_g for item in items), 1),
        carbs_g=round(sum(item.carbs_g for item in items), 1),
        fat_g=round(sum(item.fat_g for item in items), 1),
        micros=micros,
    )


def to_grams(amount: float, unit: str) -> float:
    """Convert a mass in g, kg, oz or lb to grams."""
    factor = _MASS_UNITS.get(unit.lower())
    if factor is None:
        raise ValidationError(f"Unsupported mass unit: {unit}")
    return amount * factor


def volume_to_grams(amount: float, unit: str, food_type: str | None = None) -> float:
    """Approximate grams for a volume of a common food."""
    table = _VOLUME_TABLE.get(food_type or "default", _VOLUME_TABLE["default"])
    per_unit = table.get(unit.lower())
    if per_unit is None:
        raise ValidationError(f"Unsupported volume unit: {unit}")
    return amount * per_unit


def ingredient_grams(
    amount: float, unit: str | None, food_type: str | None = None
) -> float:
    """Convert a stored ingredient amount to grams.

    Mass units convert exactly; volume units use the approximate density table.
    A missing unit means grams.
    """
    if not unit or unit.lower() in _MASS_UNITS:
        return to_grams(amount, unit or "g")
    return volume_to_grams(amount, unit, food_type)


def _cache_key(food_id: str) -> str:
    return f"food:{food_id}"
