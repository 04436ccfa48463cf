"""Access to the locally persisted food catalog."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from food_catalog.domain.errors import PersistenceError, UsageTrackingError
from food_catalog.domain.foods import (
    DEFAULT_SERVING_SIZE,
    UNKNOWN_PRODUCT,
    FoodRecord,
    FoodSource,
    SearchResult,
)

_logger = logging.getLogger(__name__)


class FoodRepository(Protocol):
    """Persistence interface for the food catalog."""

    def search_foods(self, query: str, limit: int) -> list[FoodRecord]:
        """Search foods by name or brand substring, ordered by name."""

    def get_by_barcode(self, barcode: str) -> FoodRecord | None:
        """Return a food by barcode, if present."""

    def get_by_name_brand(self, name: str, brand: str) -> FoodRecord | None:
        """Return a food by exact name and brand, if present."""

    def create_if_absent(self, payload: dict[str, object]) -> FoodRecord:
        """Insert a food unless one with the same identity exists; return the row."""

    def touch(self, food_id: UUID, used_at: datetime) -> None:
        """Bump usage counters for a food."""

    def list_used_since(self, cutoff: datetime, limit: int) -> list[FoodRecord]:
        """Return foods used after the cutoff, most recent first."""

    def delete_unused_before(self, cutoff: datetime) -> int:
        """Delete never-used foods untouched since the cutoff; return the count."""

    def count_foods(self) -> int:
        """Return the total number of foods."""

    def count_used_since(self, cutoff: datetime) -> int:
        """Return the number of foods touched after the cutoff."""

    def count_with_barcode(self) -> int:
        """Return the number of foods carrying a barcode."""


@dataclass
class LocalFoodStore:
    """Read/write access to the catalog with identity-based deduplication."""

    repository: FoodRepository
    page_size: int = 20

    def search_local(self, query: str) -> list[FoodRecord]:
        """Search the catalog by name or brand."""
        try:
            return self.repository.search_foods(query, self.page_size)
        except Exception as exc:
            raise PersistenceError(f"Local food search failed: {exc}") from exc

    def find_by_barcode(self, barcode: str) -> FoodRecord | None:
        """Find a food by its barcode."""
        try:
            return self.repository.get_by_barcode(barcode)
        except Exception as exc:
            raise PersistenceError(f"Barcode lookup failed: {exc}") from exc

    def upsert_by_identity(
        self,
        candidate: SearchResult,
        source: FoodSource = FoodSource.OPEN_FOOD_FACTS,
    ) -> FoodRecord:
        """Return the stored food matching the candidate, creating it if needed.

        Identity is the barcode when present, else the (name, brand) pair. An
        existing record is never overwritten.
        """
        try:
            existing = self._find_existing(candidate)
            if existing is not None:
                _logger.debug("Food already cached: %s", existing.name)
                return existing
            record = self.repository.create_if_absent(
                _candidate_payload(candidate, source)
            )
        except Exception as exc:
            raise PersistenceError(
                f"Failed to cache food {candidate.name}: {exc}"
            ) from exc
        _logger.debug("Cached new food: %s", record.name)
        return record

    def touch(self, food_id: UUID) -> None:
        """Mark a food as recently used; failures are logged, not raised."""
        try:
            self.record_use(food_id)
        except UsageTrackingError as exc:
            _logger.warning("%s", exc)

    def record_use(self, food_id: UUID) -> None:
        """Bump `updated_at` and the usage count of a food."""
        try:
            self.repository.touch(food_id, used_at=datetime.now(tz=UTC))
        except Exception as exc:
            raise UsageTrackingError(
                f"Failed to mark food {food_id} as used: {exc}"
            ) from exc
        _logger.debug("Marked food %s as recently used", food_id)

    def _find_existing(self, candidate: SearchResult) -> FoodRecord | None:
        if candidate.barcode:
            existing = self.repository.get_by_barcode(candidate.barcode)
            if existing is not None:
                return existing
        if candidate.name:
            return self.repository.get_by_name_brand(
                candidate.name, candidate.brand or ""
            )
        return None


def _candidate_payload(
    candidate: SearchResult, source: FoodSource
) -> dict[str, object]:
    """Build an insert payload, defaulting missing fields."""
    nutrition = candidate.nutrition
    return {
        "name": candidate.name or UNKNOWN_PRODUCT,
        "brand": candidate.brand or "",
        "barcode": candidate.barcode or None,
        "source": source.value,
        "calories": nutrition.calories or 0.0,
        "protein": nutrition.protein or 0.0,
        "carbs": nutrition.carbs or 0.0,
        "fat": nutrition.fat or 0.0,
        "fiber": nutrition.fiber or 0.0,
        "sugar": nutrition.sugar or 0.0,
        "sodium": nutrition.sodium or 0.0,
        "serving_size": candidate.serving_size or DEFAULT_SERVING_SIZE,
        "image_url": candidate.image_url,
    }
