"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from food_catalog.adapters.open_food_facts_client import OpenFoodFactsClient
from food_catalog.config import Settings
from food_catalog.containers import AppContainer
from food_catalog.domain.foods import (
    DEFAULT_SERVING_SIZE,
    FoodRecord,
    FoodSource,
    NutritionFacts,
    SearchResult,
)
from food_catalog.services.external import ExternalNutritionClient
from food_catalog.services.food_store import FoodRepository, LocalFoodStore
from food_catalog.services.health import FoodsHealthService
from food_catalog.services.maintenance import CacheMaintenanceService
from food_catalog.services.resolver import FoodResolver
from food_catalog.services.usage import UsageTracker


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food repository for tests."""

    foods: dict[UUID, FoodRecord] = field(default_factory=dict)
    fail_reads: bool = False
    fail_writes: bool = False
    create_calls: int = 0

    def add(  # noqa: PLR0913
        self,
        name: str,
        brand: str | None = None,
        barcode: str | None = None,
        calories: float = 100.0,
        usage_count: int = 0,
        updated_at: datetime | None = None,
    ) -> FoodRecord:
        record = FoodRecord(
            id=uuid4(),
            name=name,
            brand=brand,
            barcode=barcode,
            source=FoodSource.MANUAL,
            nutrition=NutritionFacts(calories=calories),
            usage_count=usage_count,
            created_at=updated_at or datetime.now(tz=UTC),
            updated_at=updated_at or datetime.now(tz=UTC),
        )
        self.foods[record.id] = record
        return record

    def search_foods(self, query: str, limit: int) -> list[FoodRecord]:
        self._check_reads()
        needle = query.lower()
        matches = [
            food
            for food in self.foods.values()
            if needle in food.name.lower() or needle in (food.brand or "").lower()
        ]
        return sorted(matches, key=lambda food: food.name)[:limit]

    def get_by_barcode(self, barcode: str) -> FoodRecord | None:
        self._check_reads()
        for food in self.foods.values():
            if food.barcode == barcode:
                return food
        return None

    def get_by_name_brand(self, name: str, brand: str) -> FoodRecord | None:
        self._check_reads()
        for food in self.foods.values():
            if food.name == name and (food.brand or "") == brand:
                return food
        return None

    def create_if_absent(self, payload: dict[str, object]) -> FoodRecord:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        self.create_calls += 1
        barcode = payload.get("barcode")
        existing = (self.get_by_barcode(str(barcode)) if barcode else None) or (
            self.get_by_name_brand(str(payload["name"]), str(payload.get("brand", "")))
        )
        if existing is not None:
            return existing
        now = datetime.now(tz=UTC)
        record = FoodRecord(
            id=uuid4(),
            name=str(payload["name"]),
            brand=payload.get("brand") or None,
            barcode=payload.get("barcode") or None,
            source=FoodSource(payload["source"]),
            nutrition=NutritionFacts(
                calories=float(payload["calories"]),
                protein=float(payload["protein"]),
                carbs=float(payload["carbs"]),
                fat=float(payload["fat"]),
                fiber=float(payload["fiber"]),
                sugar=float(payload["sugar"]),
                sodium=float(payload["sodium"]),
            ),
            serving_size=str(payload.get("serving_size") or DEFAULT_SERVING_SIZE),
            image_url=payload.get("image_url"),
            created_at=now,
            updated_at=now,
        )
        self.foods[record.id] = record
        return record

    def touch(self, food_id: UUID, used_at: datetime) -> None:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        current = self.foods[food_id]
        self.foods[food_id] = FoodRecord(
            id=current.id,
            name=current.name,
            brand=current.brand,
            barcode=current.barcode,
            source=current.source,
            nutrition=current.nutrition,
            serving_size=current.serving_size,
            image_url=current.image_url,
            usage_count=current.usage_count + 1,
            created_at=current.created_at,
            updated_at=used_at,
        )

    def list_used_since(self, cutoff: datetime, limit: int) -> list[FoodRecord]:
        self._check_reads()
        recent = [
            food
            for food in self.foods.values()
            if food.updated_at is not None and food.updated_at > cutoff
        ]
        return sorted(recent, key=lambda food: food.updated_at, reverse=True)[:limit]

    def delete_unused_before(self, cutoff: datetime) -> int:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        stale = [
            food.id
            for food in self.foods.values()
            if food.usage_count == 0
            and food.updated_at is not None
            and food.updated_at < cutoff
        ]
        for food_id in stale:
            del self.foods[food_id]
        return len(stale)

    def count_foods(self) -> int:
        self._check_reads()
        return len(self.foods)

    def count_used_since(self, cutoff: datetime) -> int:
        self._check_reads()
        return sum(
            1
            for food in self.foods.values()
            if food.updated_at is not None and food.updated_at > cutoff
        )

    def count_with_barcode(self) -> int:
        self._check_reads()
        return sum(1 for food in self.foods.values() if food.barcode)

    def _check_reads(self) -> None:
        if self.fail_reads:
            raise RuntimeError("database unavailable")


def off_product(  # noqa: PLR0913
    name: str,
    *,
    code: str = "",
    brands: str = "",
    kcal: float | None = 100,
    protein: float = 1,
    carbs: float = 10,
    fat: float = 1,
) -> dict[str, object]:
    """Build a raw Open Food Facts product payload."""
    nutriments: dict[str, object] = {
        "proteins_100g": protein,
        "carbohydrates_100g": carbs,
        "fat_100g": fat,
    }
    if kcal is not None:
        nutriments["energy-kcal_100g"] = kcal
    return {
        "code": code,
        "product_name": name,
        "brands": brands,
        "nutriments": nutriments,
    }


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake Open Food Facts client with in-memory responses."""

    products: list[dict[str, object]] = field(default_factory=list)
    barcodes: dict[str, dict[str, object]] = field(default_factory=dict)
    error: Exception | None = None
    search_calls: int = 0
    product_calls: int = 0

    async def search_products(
        self, query: str, page_size: int = 10
    ) -> dict[str, object]:
        self.search_calls += 1
        if self.error is not None:
            raise self.error
        return {"count": len(self.products), "products": self.products[:page_size]}

    async def get_product(self, barcode: str) -> dict[str, object] | None:
        self.product_calls += 1
        if self.error is not None:
            raise self.error
        product = self.barcodes.get(barcode)
        if product is None:
            return {"code": barcode, "status": 0, "status_verbose": "product not found"}
        return {"code": barcode, "status": 1, "product": product}


@dataclass
class StubExternalClient:
    """External client returning prepared candidates without HTTP."""

    candidates: list[SearchResult] = field(default_factory=list)
    barcode_result: SearchResult | None = None
    error: Exception | None = None
    name_calls: int = 0
    barcode_calls: int = 0

    async def search_by_name(self, query: str) -> list[SearchResult]:
        self.name_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.candidates)

    async def search_by_barcode(self, barcode: str) -> SearchResult | None:
        self.barcode_calls += 1
        if self.error is not None:
            raise self.error
        return self.barcode_result


def candidate(  # noqa: PLR0913
    name: str,
    *,
    brand: str | None = None,
    barcode: str | None = None,
    calories: float = 100.0,
    protein: float = 1.0,
    carbs: float = 10.0,
    fat: float = 1.0,
    confidence: float | None = 0.9,
) -> SearchResult:
    """Build an external search candidate."""
    return SearchResult(
        name=name,
        brand=brand,
        barcode=barcode,
        nutrition=NutritionFacts(
            calories=calories, protein=protein, carbs=carbs, fat=fat
        ),
        is_from_cache=False,
        confidence=confidence,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="test.service.key",
        admin_token="admin-token",
    )


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def off_client() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def container(
    settings: Settings,
    food_repository: InMemoryFoodRepository,
    off_client: FakeOpenFoodFactsClient,
) -> AppContainer:
    store = LocalFoodStore(food_repository)
    external = ExternalNutritionClient(client=off_client, retry_delay_seconds=0)
    maintenance_service = CacheMaintenanceService(food_repository)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        food_resolver=FoodResolver(store=store, external=external),
        usage_tracker=UsageTracker(store),
        maintenance_service=maintenance_service,
        health_service=FoodsHealthService(
            external=external, maintenance=maintenance_service
        ),
        close_resources=close_resources,
    )
