"""Metabolic arithmetic derived from a member's physiological profile.

All functions are pure: BMR uses the Mifflin-St Jeor equation and TDEE scales
it by a fixed activity factor.
"""

from datetime import date

from meal_planner.domain.errors import ValidationError
from meal_planner.domain.models import ActivityLevel, Gender

ACTIVITY_FACTORS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

CHILD_MAX_AGE = 11
TEENAGER_MAX_AGE = 17
ADULT_MAX_AGE = 64


def age(birthdate: date, today: date | None = None) -> int:
    """Return whole years between birthdate and today."""
    current = today or date.today()
    years = current.year - birthdate.year
    if (current.month, current.day) < (birthdate.month, birthdate.day):
        years -= 1
    return years


def bmr(weight_kg: float, height_cm: float, age_years: int, gender: Gender) -> float:
    """Return basal metabolic rate in kcal/day."""
    if weight_kg <= 0 or height_cm <= 0 or age_years <= 0:
        raise ValidationError(
            f"Weight, height and age must be positive "
            f"(weight={weight_kg}, height={height_cm}, age={age_years})"
        )
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age_years
    if gender == Gender.MALE:
        return base + 5
    return base - 161


def activity_factor(level: ActivityLevel) -> float:
    """Return the TDEE multiplier for an activity level."""
    return ACTIVITY_FACTORS[level]


def activity_level_from_factor(factor: float) -> ActivityLevel:
    """Map a numeric activity factor to the smallest level that covers it."""
    for level, level_factor in ACTIVITY_FACTORS.items():
        if factor <= level_factor:
            return level
    return ActivityLevel.VERY_ACTIVE


def tdee(bmr_kcal: float, factor: float) -> float:
    """Return total daily energy expenditure in kcal/day."""
    if bmr_kcal <= 0 or factor <= 0:
        raise ValidationError(
            f"BMR and activity factor must be positive (bmr={bmr_kcal}, "
            f"factor={factor})"
        )
    return bmr_kcal * factor


def bmi(weight_kg: float, height_cm: float) -> float:
    """Return body mass index rounded to one decimal."""
    if weight_kg <= 0 or height_cm <= 0:
        raise ValidationError("Weight and height must be positive")
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 1)


def age_group(age_years: int) -> str:
    """Classify an age into child, teenager, adult or elderly."""
    if age_years <= CHILD_MAX_AGE:
        return "child"
    if age_years <= TEENAGER_MAX_AGE:
        return "teenager"
    if age_years <= ADULT_MAX_AGE:
        return "adult"
    return "elderly"
