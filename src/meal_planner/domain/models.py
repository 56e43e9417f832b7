"""Domain models for members and their health goals."""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class Gender(str, Enum):
    """Gender used by the BMR equation."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(str, Enum):
    """Self-reported activity level."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class GoalType(str, Enum):
    """Objective of an active health goal."""

    LOSE_WEIGHT = "lose_weight"
    GAIN_MUSCLE = "gain_muscle"
    MAINTAIN = "maintain"
    IMPROVE_HEALTH = "improve_health"


class MealType(str, Enum):
    """Meal slot within a day, in serving order."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class MemberProfile:
    """Physiological profile of the person being planned for."""

    id: str
    weight_kg: float | None
    height_cm: float | None
    birthdate: date | None
    gender: Gender
    activity_level: ActivityLevel = ActivityLevel.MODERATE


@dataclass(frozen=True)
class MacroRatios:
    """Share of calories coming from each macro."""

    carbs: float
    protein: float
    fat: float

    @property
    def total(self) -> float:
        return self.carbs + self.protein + self.fat


@dataclass(frozen=True)
class HealthGoal:
    """The member's active health goal."""

    id: str
    member_id: str
    goal_type: GoalType
    carb_ratio: float | None = None
    protein_ratio: float | None = None
    fat_ratio: float | None = None
    activity_factor: float | None = None

    @property
    def custom_ratios(self) -> MacroRatios | None:
        """Return the goal's own ratios when all three are set."""
        if None in (self.carb_ratio, self.protein_ratio, self.fat_ratio):
            return None
        return MacroRatios(
            carbs=float(self.carb_ratio),
            protein=float(self.protein_ratio),
            fat=float(self.fat_ratio),
        )


class Season(str, Enum):
    """Calendar season used for seasonal ingredient preference."""

    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"
