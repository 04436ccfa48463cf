"""Housekeeping for the locally cached food catalog."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from food_catalog.domain.foods import CacheStats, FoodRecord
from food_catalog.services.food_store import FoodRepository

_logger = logging.getLogger(__name__)

_RECENT_DAYS = 7


@dataclass
class CacheMaintenanceService:
    """Reports on and prunes the food cache."""

    repository: FoodRepository
    retention_days: int = 30

    def get_frequently_used(self, limit: int = 20) -> list[FoodRecord]:
        """Return foods used within the retention window, most recent first."""
        return self.repository.list_used_since(self._cutoff(self.retention_days), limit)

    def cleanup_old_cache(self) -> int:
        """Delete never-used foods older than the retention window."""
        try:
            removed = self.repository.delete_unused_before(
                self._cutoff(self.retention_days)
            )
        except Exception:
            _logger.exception("Failed to clean up old cache")
            return 0
        if removed:
            _logger.info("Cleaned up %s old cached foods", removed)
        else:
            _logger.info("No old foods to clean up")
        return removed

    def get_cache_stats(self) -> CacheStats:
        """Summarize catalog size, recent use and barcode coverage."""
        try:
            total = self.repository.count_foods()
            recent = self.repository.count_used_since(self._cutoff(_RECENT_DAYS))
            with_barcode = self.repository.count_with_barcode()
        except Exception:
            _logger.exception("Failed to get cache stats")
            return CacheStats(
                total_cached_foods=0,
                recently_used_foods=0,
                foods_with_barcode=0,
                cache_hit_rate=0.0,
            )
        return CacheStats(
            total_cached_foods=total,
            recently_used_foods=recent,
            foods_with_barcode=with_barcode,
            cache_hit_rate=(recent / total) * 100 if total > 0 else 0.0,
        )

    @staticmethod
    def _cutoff(days: int) -> datetime:
        return datetime.now(tz=UTC) - timedelta(days=days)
