"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrilog.adapters.fdc_client import HttpxFdcClient
from nutrilog.adapters.supabase_food_log_repository import SupabaseFoodLogRepository
from nutrilog.adapters.supabase_food_repository import SupabaseFoodRepository
from nutrilog.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from nutrilog.config import Settings
from nutrilog.services.cache import InMemoryCache
from nutrilog.services.catalog import CatalogService
from nutrilog.services.food_logs import FoodLogService
from nutrilog.services.foods import FoodRecordResolver
from nutrilog.services.streaks import StreakService
from nutrilog.services.user_settings import UserSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog_service: CatalogService
    food_resolver: FoodRecordResolver
    food_log_service: FoodLogService
    streak_service: StreakService
    user_settings_service: UserSettingsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodRepository(supabase_client)
    food_log_repository = SupabaseFoodLogRepository(supabase_client)
    user_settings_repository = SupabaseUserSettingsRepository(supabase_client)

    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
    )
    catalog_service = CatalogService(
        fdc_client=fdc_client,
        cache=InMemoryCache(
            default_ttl_seconds=resolved_settings.catalog_cache_ttl_seconds,
            max_entries=resolved_settings.catalog_cache_max_entries,
        ),
        page_size=resolved_settings.catalog_search_page_size,
        debug=resolved_settings.debug,
    )
    food_resolver = FoodRecordResolver(
        repository=food_repository,
        catalog=catalog_service,
    )
    user_settings_service = UserSettingsService(
        user_settings_repository,
        default_timezone=resolved_settings.default_timezone,
    )
    food_log_service = FoodLogService(
        repository=food_log_repository,
        resolver=food_resolver,
        catalog=catalog_service,
        user_settings=user_settings_service,
    )
    streak_service = StreakService(
        repository=food_log_repository,
        user_settings=user_settings_service,
    )

    async def close_resources() -> None:
        await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        catalog_service=catalog_service,
        food_resolver=food_resolver,
        food_log_service=food_log_service,
        streak_service=streak_service,
        user_settings_service=user_settings_service,
        close_resources=close_resources,
    )
