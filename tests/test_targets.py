"""Tests for calorie and macro targets."""

from dataclasses import replace
from datetime import date

import pytest

from meal_planner.domain.errors import ValidationError
from meal_planner.domain.models import GoalType, HealthGoal, MacroRatios, MealType
from meal_planner.domain.targets import MacroTargets
from meal_planner.services import targets


def test_target_calories_by_goal() -> None:
    assert targets.target_calories(2500, GoalType.LOSE_WEIGHT) == 2100
    assert targets.target_calories(2500, GoalType.GAIN_MUSCLE) == 2800
    assert targets.target_calories(2500, GoalType.MAINTAIN) == 2500
    assert targets.target_calories(2500, GoalType.IMPROVE_HEALTH) == 2500


@pytest.mark.parametrize("goal_type", list(GoalType))
def test_default_ratios_sum_to_one(goal_type: GoalType) -> None:
    assert targets.default_ratios(goal_type).total == pytest.approx(1)


def test_daily_targets_worked_example() -> None:
    calories = targets.target_calories(1648.75 * 1.55, GoalType.LOSE_WEIGHT)
    daily = targets.daily_targets(
        calories, targets.default_ratios(GoalType.LOSE_WEIGHT)
    )

    assert calories == pytest.approx(2155.5625)
    assert daily.calories == 2156
    assert daily.protein_g == pytest.approx(161.7)
    assert daily.carbs_g == pytest.approx(242.5)
    assert daily.fat_g == pytest.approx(59.9)


def test_daily_targets_rejects_bad_ratio_sum() -> None:
    with pytest.raises(ValidationError):
        targets.daily_targets(2000, MacroRatios(carbs=0.5, protein=0.3, fat=0.3))


def test_custom_ratios_override_defaults() -> None:
    goal = HealthGoal(
        id="g",
        member_id="m",
        goal_type=GoalType.MAINTAIN,
        carb_ratio=0.4,
        protein_ratio=0.35,
        fat_ratio=0.25,
    )

    assert targets.resolve_ratios(goal) == MacroRatios(
        carbs=0.4, protein=0.35, fat=0.25
    )


def test_partial_custom_ratios_fall_back_to_defaults() -> None:
    goal = HealthGoal(
        id="g", member_id="m", goal_type=GoalType.GAIN_MUSCLE, carb_ratio=0.9
    )

    assert targets.resolve_ratios(goal) == targets.default_ratios(
        GoalType.GAIN_MUSCLE
    )


def test_invalid_custom_ratios_raise() -> None:
    goal = HealthGoal(
        id="g",
        member_id="m",
        goal_type=GoalType.MAINTAIN,
        carb_ratio=0.3,
        protein_ratio=0.3,
        fat_ratio=0.3,
    )

    with pytest.raises(ValidationError):
        targets.resolve_ratios(goal)


def test_per_meal_targets_use_fixed_weights() -> None:
    daily = MacroTargets(calories=2000, protein_g=300, carbs_g=250, fat_g=60)

    meals = targets.per_meal_targets(daily)

    assert meals.breakfast.calories == 600
    assert meals.lunch.calories == 700
    assert meals.dinner.calories == 500
    assert meals.snack.calories == 200
    assert meals.lunch.carbs_g == pytest.approx(87.5)
    assert meals.snack.protein_g == pytest.approx(30)


def test_protein_floor_takes_deficit_from_other_slots() -> None:
    daily = MacroTargets(calories=2000, protein_g=100, carbs_g=250, fat_g=60)

    meals = targets.per_meal_targets(daily)

    assert meals.snack.protein_g == pytest.approx(20)
    assert meals.breakfast.protein_g == pytest.approx(26.7)
    assert meals.lunch.protein_g == pytest.approx(30)
    assert meals.dinner.protein_g == pytest.approx(23.3)


def test_protein_floor_draws_from_snack_first() -> None:
    proteins = {
        MealType.BREAKFAST: 30.0,
        MealType.LUNCH: 30.0,
        MealType.DINNER: 15.0,
        MealType.SNACK: 25.0,
    }

    adjusted = targets._apply_protein_floor(proteins, 100.0)

    assert adjusted[MealType.DINNER] == pytest.approx(20)
    assert adjusted[MealType.SNACK] == pytest.approx(20)
    assert adjusted[MealType.BREAKFAST] == pytest.approx(30)
    assert adjusted[MealType.LUNCH] == pytest.approx(30)


@pytest.mark.parametrize("daily_protein", [80, 95.5, 120, 161.7, 199.9, 240])
def test_protein_floor_preserves_daily_total(daily_protein: float) -> None:
    daily = MacroTargets(
        calories=2000, protein_g=daily_protein, carbs_g=200, fat_g=60
    )

    meals = targets.per_meal_targets(daily)

    assert all(slot.protein_g >= 20 for slot in meals.slots())
    assert sum(slot.protein_g for slot in meals.slots()) == pytest.approx(
        daily_protein, abs=1
    )


def test_protein_below_floor_total_is_split_evenly() -> None:
    daily = MacroTargets(calories=1200, protein_g=60, carbs_g=150, fat_g=40)

    meals = targets.per_meal_targets(daily)

    assert [slot.protein_g for slot in meals.slots()] == [15, 15, 15, 15]


def test_plan_targets_composes_profile_and_goal(profile, goal) -> None:
    plan = targets.plan_targets(profile, goal, today=date(2026, 10, 18))

    assert plan.age == 30
    assert plan.age_group == "adult"
    assert plan.bmi == 22.9
    assert plan.bmr == pytest.approx(1648.75)
    assert plan.tdee == pytest.approx(2555.5625)
    assert plan.daily.calories == 2156
    assert plan.meals.breakfast.calories == 647


def test_plan_targets_uses_goal_activity_factor(profile, goal) -> None:
    active_goal = replace(goal, activity_factor=1.7)

    plan = targets.plan_targets(profile, active_goal, today=date(2026, 10, 18))

    assert plan.tdee == pytest.approx(1648.75 * 1.725)


def test_plan_targets_requires_weight_and_height(profile, goal) -> None:
    with pytest.raises(ValidationError):
        targets.plan_targets(replace(profile, weight_kg=None), goal)
    with pytest.raises(ValidationError):
        targets.plan_targets(replace(profile, birthdate=None), goal)
