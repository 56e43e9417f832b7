"""Meal plan generation and single-meal replacement."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Protocol

from meal_planner.domain.errors import (
    AuthorizationError,
    NotFoundError,
    UnsatisfiableSlotError,
    ValidationError,
)
from meal_planner.domain.models import HealthGoal, MealType, MemberProfile
from meal_planner.domain.plans import GeneratedMealPlan, PlannedMeal
from meal_planner.domain.targets import MacroTargets
from meal_planner.domain.templates import MealTemplate
from meal_planner.services.matching import (
    SelectionTrace,
    TemplateMatcher,
    season_for,
)
from meal_planner.services.targets import plan_targets

_logger = logging.getLogger(__name__)


class MemberProvider(Protocol):
    """Read access to member profiles and goals."""

    def get_profile(self, member_id: str) -> MemberProfile | None:
        """Return the member's profile, if present."""

    def get_active_goal(self, member_id: str) -> HealthGoal | None:
        """Return the member's most recent active goal, if any."""


class AllergyRegistry(Protocol):
    """Read access to declared food allergies."""

    def list_allergen_names(self, member_id: str) -> list[str]:
        """Return allergen names declared for a member."""


@dataclass(frozen=True)
class MealReplacement:
    """A stored replacement meal and the selection that produced it."""

    meal: PlannedMeal
    trace: SelectionTrace

    @property
    def penalized(self) -> bool:
        selected = self.trace.selected
        return selected is not None and selected.penalty > 0


class MealPlanRepository(Protocol):
    """Persistence interface for generated plans."""

    def save_plan(self, plan: GeneratedMealPlan) -> GeneratedMealPlan:
        """Store a plan with its meals and return it with ids assigned."""

    def get_plan(self, plan_id: str) -> GeneratedMealPlan | None:
        """Return a plan header by id, if present."""

    def get_meal(self, meal_id: str) -> PlannedMeal | None:
        """Return a planned meal by id, if present."""

    def replace_meal(self, meal: PlannedMeal) -> PlannedMeal:
        """Overwrite a meal's recipe and nutrition, returning the stored row."""


@dataclass
class MealPlanOrchestrator:
    """Builds multi-day plans one meal slot at a time."""

    members: MemberProvider
    allergies: AllergyRegistry
    matcher: TemplateMatcher
    repository: MealPlanRepository
    max_days: int = 31
    timeout_seconds: float | None = None
    today: Callable[[], date] = date.today

    def generate_plan(
        self,
        member_id: str,
        days: int = 7,
        start_date: date | None = None,
        cancel_event: threading.Event | None = None,
    ) -> GeneratedMealPlan:
        """Generate a plan without persisting it.

        Slots with no usable template are left out. If the timeout elapses or
        ``cancel_event`` is set, generation stops after the last finished meal
        and the plan is returned with ``complete=False``.
        """
        if not 1 <= days <= self.max_days:
            raise ValidationError(f"days must be between 1 and {self.max_days}")
        profile, goal = self._load_member(member_id)
        today = self.today()
        targets = plan_targets(profile, goal, today)
        allergens = self.allergies.list_allergen_names(member_id)
        season = season_for(today)
        first_day = start_date or today
        deadline = (
            time.monotonic() + self.timeout_seconds
            if self.timeout_seconds is not None
            else None
        )

        pools: dict[MealType, list[MealTemplate]] = {}
        used_ids: set[str] = set()
        meals: list[PlannedMeal] = []
        complete = True
        for offset in range(days):
            day = first_day + timedelta(days=offset)
            for meal_type in MealType:
                if _should_stop(deadline, cancel_event):
                    complete = False
                    break
                if meal_type not in pools:
                    pools[meal_type] = self.matcher.load_pool(meal_type)
                try:
                    selection = self.matcher.select(
                        meal_type,
                        targets.meals.for_meal(meal_type),
                        goal.goal_type,
                        allergens,
                        season,
                        used_ids=used_ids,
                        pool=pools[meal_type],
                    )
                except UnsatisfiableSlotError as exc:
                    _logger.info("Omitting %s on %s: %s", meal_type.value, day, exc)
                    continue
                used_ids.add(selection.template.id)
                meals.append(
                    PlannedMeal(
                        date=day,
                        meal_type=meal_type,
                        template_id=selection.template.id,
                        template_name=selection.template.name,
                        ingredients=selection.nutrition.items,
                        nutrition=selection.nutrition.summary,
                    )
                )
            if not complete:
                _logger.warning(
                    "Plan generation for member %s stopped early after %s meals",
                    member_id,
                    len(meals),
                )
                break

        _logger.info(
            "Generated plan for member %s: %s days, %s of %s meals",
            member_id,
            days,
            len(meals),
            days * len(MealType),
        )
        return GeneratedMealPlan(
            member_id=member_id,
            start_date=first_day,
            end_date=first_day + timedelta(days=days - 1),
            goal_type=goal.goal_type,
            daily_targets=targets.daily,
            meals=meals,
            complete=complete,
        )

    def generate_and_save_plan(
        self,
        member_id: str,
        days: int = 7,
        start_date: date | None = None,
        cancel_event: threading.Event | None = None,
    ) -> GeneratedMealPlan:
        """Generate a plan and hand it to the repository."""
        plan = self.generate_plan(member_id, days, start_date, cancel_event)
        return self.repository.save_plan(plan)

    def replace_meal(self, meal_id: str, member_id: str) -> MealReplacement:
        """Re-select a meal against its own nutrition.

        The run-scoped anti-repeat set does not apply here, so the current
        template competes like any other and wins when nothing fits better.
        """
        meal = self.repository.get_meal(meal_id)
        if meal is None:
            raise NotFoundError(f"Meal {meal_id} not found")
        plan = self.repository.get_plan(meal.plan_id) if meal.plan_id else None
        if plan is None:
            raise NotFoundError(f"Plan for meal {meal_id} not found")
        if plan.member_id != member_id:
            raise AuthorizationError(
                f"Member {member_id} cannot replace meal {meal_id}"
            )
        goal = self.members.get_active_goal(member_id)
        if goal is None:
            raise NotFoundError(f"Member {member_id} has no active goal")

        target = MacroTargets(
            calories=meal.nutrition.calories,
            protein_g=meal.nutrition.protein_g,
            carbs_g=meal.nutrition.carbs_g,
            fat_g=meal.nutrition.fat_g,
        )
        selection = self.matcher.select(
            meal.meal_type,
            target,
            goal.goal_type,
            self.allergies.list_allergen_names(member_id),
            season_for(self.today()),
        )
        if selection.penalized:
            chosen = selection.trace.selected
            _logger.info(
                "Replacement for meal %s is outside tolerance: template=%s "
                "deviations=%s penalty=%s",
                meal_id,
                selection.template.id,
                chosen.deviations,
                chosen.penalty,
            )
        updated = replace(
            meal,
            template_id=selection.template.id,
            template_name=selection.template.name,
            ingredients=selection.nutrition.items,
            nutrition=selection.nutrition.summary,
        )
        return MealReplacement(
            meal=self.repository.replace_meal(updated), trace=selection.trace
        )

    def _load_member(self, member_id: str) -> tuple[MemberProfile, HealthGoal]:
        profile = self.members.get_profile(member_id)
        if profile is None:
            raise NotFoundError(f"Member {member_id} not found")
        goal = self.members.get_active_goal(member_id)
        if goal is None:
            raise NotFoundError(f"Member {member_id} has no active goal")
        return profile, goal


def _should_stop(deadline: float | None, cancel_event: threading.Event | None) -> bool:
    if cancel_event is not None and cancel_event.is_set():
        return True
    return deadline is not None and time.monotonic() >= deadline
