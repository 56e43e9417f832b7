"""Errors raised by the meal planning core."""

from meal_planner.domain.models import MealType


class MealPlannerError(Exception):
    """Base class for meal planner errors."""


class ValidationError(MealPlannerError):
    """Input data is malformed or incomplete."""


class NotFoundError(MealPlannerError):
    """A member, goal, plan or meal does not exist."""


class AuthorizationError(MealPlannerError):
    """The caller does not own the requested resource."""


class UnsatisfiableSlotError(MealPlannerError):
    """No template survived filtering for a meal slot."""

    def __init__(self, meal_type: MealType, reason: str) -> None:
        super().__init__(f"No template available for {meal_type.value}: {reason}")
        self.meal_type = meal_type
        self.reason = reason


class CatalogUnavailableError(MealPlannerError):
    """The food catalog or template repository could not be reached."""
