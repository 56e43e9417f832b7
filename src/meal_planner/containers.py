"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from meal_planner.adapters.supabase_food_catalog import SupabaseFoodCatalog
from meal_planner.adapters.supabase_meal_plan_repository import (
    SupabaseMealPlanRepository,
)
from meal_planner.adapters.supabase_member_repository import SupabaseMemberRepository
from meal_planner.adapters.supabase_template_repository import (
    SupabaseTemplateRepository,
)
from meal_planner.config import Settings
from meal_planner.services.cache import InMemoryCache
from meal_planner.services.matching import TemplateMatcher
from meal_planner.services.nutrition import NutritionAggregator
from meal_planner.services.plans import MealPlanOrchestrator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    nutrition_aggregator: NutritionAggregator
    template_matcher: TemplateMatcher
    meal_plan_orchestrator: MealPlanOrchestrator


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    member_repository = SupabaseMemberRepository(supabase_client)
    nutrition_aggregator = NutritionAggregator(
        catalog=SupabaseFoodCatalog(supabase_client),
        cache=InMemoryCache(),
        food_ttl_seconds=resolved_settings.food_cache_ttl_seconds,
    )
    template_matcher = TemplateMatcher(
        repository=SupabaseTemplateRepository(supabase_client),
        aggregator=nutrition_aggregator,
        tolerance=resolved_settings.match_tolerance,
        allow_repeat_fallback=resolved_settings.allow_repeat_fallback,
    )
    orchestrator = MealPlanOrchestrator(
        members=member_repository,
        allergies=member_repository,
        matcher=template_matcher,
        repository=SupabaseMealPlanRepository(supabase_client),
        max_days=resolved_settings.plan_max_days,
        timeout_seconds=resolved_settings.generation_timeout_seconds,
    )
    return AppContainer(
        settings=resolved_settings,
        nutrition_aggregator=nutrition_aggregator,
        template_matcher=template_matcher,
        meal_plan_orchestrator=orchestrator,
    )
