"""Goal-adjusted calorie and macro targets."""

import logging
from datetime import date

from meal_planner.domain.errors import ValidationError
from meal_planner.domain.models import (
    GoalType,
    HealthGoal,
    MacroRatios,
    MealType,
    MemberProfile,
)
from meal_planner.domain.targets import MacroTargets, MealTargets, PlanTargets
from meal_planner.services import metabolism

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FAT = 9

RATIO_TOLERANCE = 0.01
PROTEIN_FLOOR_G = 20.0

CALORIE_ADJUSTMENTS = {
    GoalType.LOSE_WEIGHT: -400,
    GoalType.GAIN_MUSCLE: 300,
    GoalType.MAINTAIN: 0,
    GoalType.IMPROVE_HEALTH: 0,
}

DEFAULT_RATIOS = {
    GoalType.LOSE_WEIGHT: MacroRatios(carbs=0.45, protein=0.30, fat=0.25),
    GoalType.GAIN_MUSCLE: MacroRatios(carbs=0.40, protein=0.35, fat=0.25),
    GoalType.MAINTAIN: MacroRatios(carbs=0.50, protein=0.20, fat=0.30),
    GoalType.IMPROVE_HEALTH: MacroRatios(carbs=0.50, protein=0.20, fat=0.30),
}

MEAL_WEIGHTS = {
    MealType.BREAKFAST: 0.30,
    MealType.LUNCH: 0.35,
    MealType.DINNER: 0.25,
    MealType.SNACK: 0.10,
}

_logger = logging.getLogger(__name__)


def target_calories(tdee: float, goal_type: GoalType) -> float:
    """Return the daily calorie target for a goal."""
    return tdee + CALORIE_ADJUSTMENTS[goal_type]


def default_ratios(goal_type: GoalType) -> MacroRatios:
    """Return the built-in macro split for a goal."""
    return DEFAULT_RATIOS[goal_type]


def validate_ratios(ratios: MacroRatios) -> MacroRatios:
    """Ensure ratios are non-negative and sum to one."""
    if min(ratios.carbs, ratios.protein, ratios.fat) < 0:
        raise ValidationError(f"Macro ratios must not be negative: {ratios}")
    if abs(ratios.total - 1) > RATIO_TOLERANCE:
        raise ValidationError(
            f"Macro ratios must sum to 1, got {ratios.total:.3f}"
        )
    return ratios


def resolve_ratios(goal: HealthGoal) -> MacroRatios:
    """Return the goal's custom ratios, or the defaults for its type."""
    custom = goal.custom_ratios
    if custom is None:
        return default_ratios(goal.goal_type)
    return validate_ratios(custom)


def daily_targets(calories: float, ratios: MacroRatios) -> MacroTargets:
    """Split a calorie target into macro grams."""
    validate_ratios(ratios)
    return MacroTargets(
        calories=round(calories),
        protein_g=round(calories * ratios.protein / KCAL_PER_GRAM_PROTEIN, 1),
        carbs_g=round(calories * ratios.carbs / KCAL_PER_GRAM_CARBS, 1),
        fat_g=round(calories * ratios.fat / KCAL_PER_GRAM_FAT, 1),
    )


def per_meal_targets(daily: MacroTargets) -> MealTargets:
    """Distribute daily targets across the four meal slots.

    Every slot ends with at least 20g of protein. Raised slots are funded from
    the snack first, then from the other slots in proportion to how far they
    sit above the floor, so the slot proteins still add up to the daily total.
    """
    proteins = _apply_protein_floor(
        {meal: daily.protein_g * weight for meal, weight in MEAL_WEIGHTS.items()},
        daily.protein_g,
    )
    slots = {
        meal: MacroTargets(
            calories=round(daily.calories * weight),
            protein_g=proteins[meal],
            carbs_g=round(daily.carbs_g * weight, 1),
            fat_g=round(daily.fat_g * weight, 1),
        )
        for meal, weight in MEAL_WEIGHTS.items()
    }
    return MealTargets(
        breakfast=slots[MealType.BREAKFAST],
        lunch=slots[MealType.LUNCH],
        dinner=slots[MealType.DINNER],
        snack=slots[MealType.SNACK],
    )


def plan_targets(
    profile: MemberProfile, goal: HealthGoal, today: date | None = None
) -> PlanTargets:
    """Derive all targets for a member and goal."""
    if profile.weight_kg is None or profile.height_cm is None:
        raise ValidationError(f"Member {profile.id} is missing weight or height")
    if profile.birthdate is None:
        raise ValidationError(f"Member {profile.id} is missing a birthdate")

    age_years = metabolism.age(profile.birthdate, today)
    level = (
        metabolism.activity_level_from_factor(goal.activity_factor)
        if goal.activity_factor
        else profile.activity_level
    )
    bmr_kcal = metabolism.bmr(
        profile.weight_kg, profile.height_cm, age_years, profile.gender
    )
    tdee_kcal = metabolism.tdee(bmr_kcal, metabolism.activity_factor(level))
    calories = target_calories(tdee_kcal, goal.goal_type)
    ratios = resolve_ratios(goal)
    daily = daily_targets(calories, ratios)
    return PlanTargets(
        age=age_years,
        age_group=metabolism.age_group(age_years),
        bmi=metabolism.bmi(profile.weight_kg, profile.height_cm),
        activity_level=level,
        bmr=bmr_kcal,
        tdee=tdee_kcal,
        target_calories=calories,
        ratios=ratios,
        daily=daily,
        meals=per_meal_targets(daily),
    )


def _apply_protein_floor(
    proteins: dict[MealType, float], daily_protein: float
) -> dict[MealType, float]:
    if daily_protein < PROTEIN_FLOOR_G * len(proteins):
        _logger.warning(
            "Daily protein %.1fg cannot give every meal %.0fg, splitting evenly",
            daily_protein,
            PROTEIN_FLOOR_G,
        )
        even = daily_protein / len(proteins)
        return _round_preserving_total(dict.fromkeys(proteins, even), daily_protein)

    adjusted = dict(proteins)
    deficit = 0.0
    raised: set[MealType] = set()
    for meal, value in proteins.items():
        if value < PROTEIN_FLOOR_G:
            deficit += PROTEIN_FLOOR_G - value
            adjusted[meal] = PROTEIN_FLOOR_G
            raised.add(meal)

    if deficit and MealType.SNACK not in raised:
        taken = min(deficit, adjusted[MealType.SNACK] - PROTEIN_FLOOR_G)
        adjusted[MealType.SNACK] -= taken
        deficit -= taken

    if deficit:
        donors = {
            meal: adjusted[meal] - PROTEIN_FLOOR_G
            for meal in adjusted
            if meal not in raised
            and meal != MealType.SNACK
            and adjusted[meal] > PROTEIN_FLOOR_G
        }
        surplus = sum(donors.values())
        for meal, spare in donors.items():
            adjusted[meal] -= deficit * spare / surplus

    return _round_preserving_total(adjusted, daily_protein)


def _round_preserving_total(
    values: dict[MealType, float], total: float
) -> dict[MealType, float]:
    rounded = {meal: round(value, 1) for meal, value in values.items()}
    drift = round(total - sum(rounded.values()), 1)
    if drift:
        largest = max(rounded, key=lambda meal: rounded[meal])
        rounded[largest] = round(rounded[largest] + drift, 1)
    return rounded
