"""Supabase implementation for member profiles, goals and allergies."""

from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client

from meal_planner.domain.errors import ValidationError
from meal_planner.domain.models import (
    ActivityLevel,
    Gender,
    GoalType,
    HealthGoal,
    MemberProfile,
)
from meal_planner.services.plans import AllergyRegistry, MemberProvider


@dataclass
class SupabaseMemberRepository(MemberProvider, AllergyRegistry):
    """Reads family member data used by the planner."""

    client: Client

    def get_profile(self, member_id: str) -> MemberProfile | None:
        """Return a member profile, ignoring soft-deleted members."""
        response = (
            self.client.table("family_members")
            .select("id, gender, birth_date, height, weight, activity_level")
            .eq("id", member_id)
            .is_("deleted_at", "null")
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return MemberProfile(
            id=str(row["id"]),
            weight_kg=_optional_float(row.get("weight")),
            height_cm=_optional_float(row.get("height")),
            birthdate=_parse_date(row.get("birth_date")),
            gender=_parse_gender(row.get("gender")),
            activity_level=_parse_activity_level(row.get("activity_level")),
        )

    def get_active_goal(self, member_id: str) -> HealthGoal | None:
        """Return the newest active goal for a member."""
        response = (
            self.client.table("health_goals")
            .select(
                "id, member_id, goal_type, carb_ratio, protein_ratio, fat_ratio, "
                "activity_factor"
            )
            .eq("member_id", member_id)
            .eq("status", "active")
            .is_("deleted_at", "null")
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return HealthGoal(
            id=str(row["id"]),
            member_id=str(row["member_id"]),
            goal_type=GoalType(str(row["goal_type"]).lower()),
            carb_ratio=_optional_float(row.get("carb_ratio")),
            protein_ratio=_optional_float(row.get("protein_ratio")),
            fat_ratio=_optional_float(row.get("fat_ratio")),
            activity_factor=_optional_float(row.get("activity_factor")),
        )

    def list_allergen_names(self, member_id: str) -> list[str]:
        """Return food allergen names declared for a member."""
        response = (
            self.client.table("allergies")
            .select("allergen_name")
            .eq("member_id", member_id)
            .eq("allergen_type", "food")
            .is_("deleted_at", "null")
            .execute()
        )
        return [str(row["allergen_name"]) for row in response.data or []]


def _parse_gender(value: object) -> Gender:
    try:
        return Gender(str(value or "male").lower())
    except ValueError as exc:
        raise ValidationError(f"Unsupported gender for BMR: {value}") from exc


def _parse_activity_level(value: object) -> ActivityLevel:
    try:
        return ActivityLevel(str(value or "moderate").lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown activity level: {value}") from exc


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)


def _parse_date(value: object) -> date | None:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value).date()
    return None
