"""Nutrition domain models."""

from dataclasses import dataclass, field

MICRONUTRIENTS = (
    "fiber",
    "sugar",
    "sodium",
    "vitamin_a",
    "vitamin_c",
    "calcium",
    "iron",
)


@dataclass(frozen=True)
class FoodNutrientRecord:
    """Nutrient facts per 100g of a food."""

    id: str
    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    aliases: tuple[str, ...] = ()
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    vitamin_a: float | None = None
    vitamin_c: float | None = None
    calcium: float | None = None
    iron: float | None = None

    def labels(self) -> list[str]:
        """Return the name followed by all aliases."""
        return [self.name, *self.aliases]


@dataclass(frozen=True)
class IngredientNutrition:
    """Nutrients of one ingredient scaled to its portion."""

    food_id: str
    name: str
    grams: float
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    micros: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class NutrientSummary:
    """Totals across a list of ingredients."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    micros: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class NutritionResult:
    """Aggregate summary plus the per-ingredient breakdown."""

    summary: NutrientSummary
    items: list[IngredientNutrition]
