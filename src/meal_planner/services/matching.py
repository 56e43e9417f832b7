"""Template matching for a single meal slot.

A slot is evaluated in fixed stages: load the pool, keep templates suited to
the goal, drop templates containing an allergen, drop templates already used
in the run, then score what is left against the slot target. The lowest score
wins and ties go to the template listed first.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from meal_planner.domain.errors import CatalogUnavailableError, UnsatisfiableSlotError
from meal_planner.domain.models import GoalType, MealType, Season
from meal_planner.domain.nutrition import (
    FoodNutrientRecord,
    NutrientSummary,
    NutritionResult,
)
from meal_planner.domain.targets import MacroTargets
from meal_planner.domain.templates import MealTemplate
from meal_planner.services.nutrition import NutritionAggregator

DEFAULT_TOLERANCE = 0.05
DEFAULT_PENALTY = 10.0
SEASONAL_WEIGHT = 0.1
SEASONAL_SCORE = 10.0

SEASONAL_KEYWORDS: dict[Season, tuple[str, ...]] = {
    Season.SPRING: (
        "bamboo shoot",
        "spinach",
        "chive",
        "celery",
        "celtuce",
        "green peas",
        "春笋",
        "菠菜",
        "韭菜",
        "芹菜",
        "莴笋",
        "豌豆",
    ),
    Season.SUMMER: (
        "watermelon",
        "cucumber",
        "tomato",
        "eggplant",
        "winter melon",
        "bitter melon",
        "luffa",
        "西瓜",
        "黄瓜",
        "番茄",
        "茄子",
        "冬瓜",
        "苦瓜",
        "丝瓜",
    ),
    Season.AUTUMN: (
        "pumpkin",
        "sweet potato",
        "yam",
        "chestnut",
        "lotus root",
        "radish",
        "南瓜",
        "红薯",
        "山药",
        "栗子",
        "莲藕",
        "萝卜",
    ),
    Season.WINTER: (
        "napa cabbage",
        "radish",
        "carrot",
        "daikon",
        "cabbage",
        "白菜",
        "萝卜",
        "胡萝卜",
        "白萝卜",
        "大白菜",
        "卷心菜",
    ),
}

_AXES = ("calories", "protein_g", "carbs_g", "fat_g")

_logger = logging.getLogger(__name__)


class TemplateRepository(Protocol):
    """Source of meal templates with resolved food references."""

    def list_templates(self, meal_type: MealType) -> list[MealTemplate]:
        """Return all templates defined for a meal slot."""


@dataclass(frozen=True)
class CandidateScore:
    """How one candidate compared against the slot target."""

    template_id: str
    template_name: str
    deviations: dict[str, float]
    penalty: float
    seasonal_bonus: float

    @property
    def score(self) -> float:
        return sum(self.deviations.values()) + self.penalty - self.seasonal_bonus


@dataclass
class SelectionTrace:
    """Record of every stage of one slot evaluation."""

    meal_type: MealType
    pool_size: int = 0
    after_goal: int = 0
    after_resolution: int = 0
    after_allergens: int = 0
    after_repeats: int = 0
    repeat_fallback: bool = False
    candidates: list[CandidateScore] = field(default_factory=list)
    selected_id: str | None = None

    @property
    def selected(self) -> CandidateScore | None:
        for candidate in self.candidates:
            if candidate.template_id == self.selected_id:
                return candidate
        return None


@dataclass(frozen=True)
class TemplateSelection:
    """The winning template for a slot together with its nutrition."""

    template: MealTemplate
    nutrition: NutritionResult
    trace: SelectionTrace

    @property
    def penalized(self) -> bool:
        selected = self.trace.selected
        return selected is not None and selected.penalty > 0


def season_for(day: date) -> Season:
    """Return the season of a calendar date."""
    if 3 <= day.month <= 5:  # noqa: PLR2004
        return Season.SPRING
    if 6 <= day.month <= 8:  # noqa: PLR2004
        return Season.SUMMER
    if 9 <= day.month <= 11:  # noqa: PLR2004
        return Season.AUTUMN
    return Season.WINTER


def contains_any(labels: list[str], needles: list[str]) -> bool:
    """Case-insensitive substring check of any needle in any label."""
    lowered = [label.lower() for label in labels]
    return any(needle in label for needle in needles for label in lowered)


def score_deviations(
    actual: NutrientSummary, target: MacroTargets, tolerance: float, penalty: float
) -> tuple[dict[str, float], float]:
    """Return relative deviation per axis and the penalty that applies."""
    deviations = {
        axis: abs(getattr(actual, axis) - getattr(target, axis))
        / max(getattr(target, axis), 1)
        for axis in _AXES
    }
    over = any(value > tolerance for value in deviations.values())
    return deviations, penalty if over else 0.0


@dataclass
class TemplateMatcher:
    """Filters, scores and selects meal templates for a slot."""

    repository: TemplateRepository
    aggregator: NutritionAggregator
    tolerance: float = DEFAULT_TOLERANCE
    penalty: float = DEFAULT_PENALTY
    allow_repeat_fallback: bool = True

    def load_pool(self, meal_type: MealType) -> list[MealTemplate]:
        """Load the templates for a meal slot from the repository."""
        try:
            return list(self.repository.list_templates(meal_type))
        except Exception as exc:
            raise CatalogUnavailableError(
                f"Template repository failed for {meal_type.value}"
            ) from exc

    def select(  # noqa: PLR0913
        self,
        meal_type: MealType,
        target: MacroTargets,
        goal_type: GoalType,
        allergens: list[str],
        season: Season,
        used_ids: set[str] | None = None,
        pool: list[MealTemplate] | None = None,
        allow_repeats: bool | None = None,
    ) -> TemplateSelection:
        """Pick the best template for a slot.

        ``used_ids`` enables the anti-repeat filter; pass None to skip it.
        ``allow_repeats`` overrides the matcher's fallback policy for one call.
        Raises UnsatisfiableSlotError when no candidate survives.
        """
        fallback = (
            self.allow_repeat_fallback if allow_repeats is None else allow_repeats
        )
        templates = self.load_pool(meal_type) if pool is None else pool
        trace = SelectionTrace(meal_type=meal_type, pool_size=len(templates))

        suited = [t for t in templates if goal_type in t.suitable_goals]
        trace.after_goal = len(suited)
        records = self.aggregator.resolve_many(
            ingredient.food_id for t in suited for ingredient in t.ingredients
        )
        suited = [t for t in suited if _fully_resolved(t, records)]
        trace.after_resolution = len(suited)

        needles = [name.strip().lower() for name in allergens if name.strip()]
        safe = [t for t in suited if not _has_allergen(t, records, needles)]
        trace.after_allergens = len(safe)
        if not safe:
            raise UnsatisfiableSlotError(
                meal_type, f"no {goal_type.value} template is free of allergens"
            )

        candidates = safe
        if used_ids is not None:
            candidates = [t for t in safe if t.id not in used_ids]
            if not candidates:
                if not fallback:
                    raise UnsatisfiableSlotError(
                        meal_type, "every eligible template was already used"
                    )
                _logger.warning(
                    "All %s %s templates already used, allowing repeats",
                    len(safe),
                    meal_type.value,
                )
                trace.repeat_fallback = True
                candidates = safe
        trace.after_repeats = len(candidates)

        keywords = [word.lower() for word in SEASONAL_KEYWORDS[season]]
        best: tuple[MealTemplate, NutritionResult, CandidateScore] | None = None
        for template in candidates:
            nutrition = self.aggregator.aggregate(
                [(i.food_id, i.grams) for i in template.ingredients], records
            )
            deviations, penalty = score_deviations(
                nutrition.summary, target, self.tolerance, self.penalty
            )
            candidate = CandidateScore(
                template_id=template.id,
                template_name=template.name,
                deviations=deviations,
                penalty=penalty,
                seasonal_bonus=(
                    SEASONAL_WEIGHT * SEASONAL_SCORE
                    if _is_seasonal(template, records, keywords)
                    else 0.0
                ),
            )
            trace.candidates.append(candidate)
            if best is None or candidate.score < best[2].score:
                best = (template, nutrition, candidate)

        template, nutrition, _ = best
        trace.selected_id = template.id
        return TemplateSelection(template=template, nutrition=nutrition, trace=trace)


def _fully_resolved(
    template: MealTemplate, records: dict[str, FoodNutrientRecord]
) -> bool:
    missing = [i.food_id for i in template.ingredients if i.food_id not in records]
    if missing:
        _logger.warning(
            "Dropping template %s: unknown foods %s", template.id, ", ".join(missing)
        )
        return False
    return True


def _has_allergen(
    template: MealTemplate,
    records: dict[str, FoodNutrientRecord],
    needles: list[str],
) -> bool:
    if not needles:
        return False
    return any(
        contains_any(records[i.food_id].labels(), needles)
        for i in template.ingredients
    )


def _is_seasonal(
    template: MealTemplate,
    records: dict[str, FoodNutrientRecord],
    keywords: list[str],
) -> bool:
    return any(
        contains_any(records[i.food_id].labels(), keywords)
        for i in template.ingredients
    )
