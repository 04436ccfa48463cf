"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from food_catalog.adapters.open_food_facts_client import HttpxOpenFoodFactsClient
from food_catalog.adapters.supabase_food_repository import SupabaseFoodRepository
from food_catalog.config import Settings
from food_catalog.services.external import ExternalNutritionClient
from food_catalog.services.food_store import LocalFoodStore
from food_catalog.services.health import FoodsHealthService
from food_catalog.services.maintenance import CacheMaintenanceService
from food_catalog.services.resolver import FoodResolver
from food_catalog.services.usage import UsageTracker


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    food_resolver: FoodResolver
    usage_tracker: UsageTracker
    maintenance_service: CacheMaintenanceService
    health_service: FoodsHealthService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodRepository(supabase_client)
    store = LocalFoodStore(
        repository=food_repository,
        page_size=resolved_settings.local_page_size,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        user_agent=resolved_settings.off_user_agent,
        timeout_seconds=resolved_settings.off_timeout_seconds,
    )
    external = ExternalNutritionClient(
        client=off_client,
        page_size=resolved_settings.max_external_results,
        max_retries=resolved_settings.off_max_retries,
        retry_delay_seconds=resolved_settings.off_retry_delay_seconds,
    )
    food_resolver = FoodResolver(
        store=store,
        external=external,
        cache_threshold=resolved_settings.cache_threshold,
        max_external_results=resolved_settings.max_external_results,
    )
    maintenance_service = CacheMaintenanceService(
        repository=food_repository,
        retention_days=resolved_settings.cache_retention_days,
    )
    health_service = FoodsHealthService(
        external=external,
        maintenance=maintenance_service,
    )

    async def close_resources() -> None:
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        food_resolver=food_resolver,
        usage_tracker=UsageTracker(store),
        maintenance_service=maintenance_service,
        health_service=health_service,
        close_resources=close_resources,
    )
