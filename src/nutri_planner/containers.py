"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutri_planner.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from nutri_planner.adapters.supabase_plan_repository import SupabasePlanRepository
from nutri_planner.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from nutri_planner.adapters.supabase_settings_repository import (
    SupabaseSettingsRepository,
)
from nutri_planner.config import Settings
from nutri_planner.services.catalog import CatalogRepository
from nutri_planner.services.planner import MealPlannerService
from nutri_planner.services.plans import DailyPlanService, PlanRepository
from nutri_planner.services.structures import MealStructureService, ProfileRepository
from nutri_planner.services.swaps import SwapService
from nutri_planner.services.system_settings import (
    SettingsRepository,
    SystemSettingsService,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog: CatalogRepository
    settings_service: SystemSettingsService
    structure_service: MealStructureService
    swap_service: SwapService
    plan_service: DailyPlanService
    planner_service: MealPlannerService
    close_resources: Callable[[], Awaitable[None]]


def wire_container(  # noqa: PLR0913
    settings: Settings,
    catalog: CatalogRepository,
    settings_repository: SettingsRepository,
    profile_repository: ProfileRepository,
    plan_repository: PlanRepository,
    close_resources: Callable[[], Awaitable[None]],
) -> AppContainer:
    """Build services on top of the given repositories."""
    settings_service = SystemSettingsService(
        settings_repository,
        default_scaling_limits=settings.default_scaling_limits(),
    )
    plan_service = DailyPlanService(
        plan_repository, catalog, max_retries=settings.plan_write_retries
    )
    return AppContainer(
        settings=settings,
        catalog=catalog,
        settings_service=settings_service,
        structure_service=MealStructureService(profile_repository),
        swap_service=SwapService(
            catalog,
            settings_service,
            decay=settings.similarity_decay,
            limit=settings.swap_limit,
        ),
        plan_service=plan_service,
        planner_service=MealPlannerService(
            catalog,
            settings_service,
            plan_service,
            candidate_limit=settings.candidate_limit,
        ),
        close_resources=close_resources,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )

    async def close_resources() -> None:
        return None

    return wire_container(
        settings=resolved_settings,
        catalog=SupabaseCatalogRepository(supabase_client),
        settings_repository=SupabaseSettingsRepository(supabase_client),
        profile_repository=SupabaseProfileRepository(supabase_client),
        plan_repository=SupabasePlanRepository(supabase_client),
        close_resources=close_resources,
    )
