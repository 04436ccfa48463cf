"""Domain models for the food catalog."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

UNKNOWN_PRODUCT = "Unknown Product"
DEFAULT_SERVING_SIZE = "100g"


class FoodSource(str, Enum):
    """Provenance of a food record."""

    MANUAL = "manual"
    OPEN_FOOD_FACTS = "openfoodfacts"


@dataclass(frozen=True)
class NutritionFacts:
    """Nutrition values per 100 units of serving."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0


@dataclass(frozen=True)
class FoodRecord:
    """A food persisted in the local catalog."""

    id: UUID
    name: str
    brand: str | None
    barcode: str | None
    source: FoodSource
    nutrition: NutritionFacts
    serving_size: str = DEFAULT_SERVING_SIZE
    image_url: str | None = None
    usage_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class SearchResult:
    """A food returned to callers, cached or not."""

    name: str
    brand: str | None
    barcode: str | None
    nutrition: NutritionFacts
    serving_size: str = DEFAULT_SERVING_SIZE
    image_url: str | None = None
    is_from_cache: bool = False
    confidence: float | None = None
    id: UUID | None = None

    @classmethod
    def from_record(
        cls, record: FoodRecord, *, is_from_cache: bool, confidence: float = 1.0
    ) -> "SearchResult":
        """Build a search result from a persisted record."""
        return cls(
            id=record.id,
            name=record.name,
            brand=record.brand,
            barcode=record.barcode,
            nutrition=record.nutrition,
            serving_size=record.serving_size,
            image_url=record.image_url,
            is_from_cache=is_from_cache,
            confidence=confidence,
        )

    def persisted_as(self, record: FoodRecord) -> "SearchResult":
        """Return a copy carrying the id of the persisted record."""
        return replace(self, id=record.id, is_from_cache=False)

    def identity_key(self) -> str:
        """Key used to collapse duplicates across sources."""
        if self.barcode:
            return self.barcode
        return f"{self.name}-{self.brand or ''}"

    def to_dict(self) -> dict[str, object]:
        """Serialize for JSON responses."""
        return {
            "id": str(self.id) if self.id else None,
            "name": self.name,
            "brand": self.brand,
            "barcode": self.barcode,
            "calories": self.nutrition.calories,
            "protein": self.nutrition.protein,
            "carbs": self.nutrition.carbs,
            "fat": self.nutrition.fat,
            "fiber": self.nutrition.fiber,
            "sugar": self.nutrition.sugar,
            "sodium": self.nutrition.sodium,
            "serving_size": self.serving_size,
            "image_url": self.image_url,
            "is_from_cache": self.is_from_cache,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class CacheStats:
    """Summary of the local catalog's cache state."""

    total_cached_foods: int
    recently_used_foods: int
    foods_with_barcode: int
    cache_hit_rate: float
