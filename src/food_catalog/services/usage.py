"""Usage tracking for cached foods."""

import logging
from dataclasses import dataclass
from uuid import UUID

from food_catalog.services.food_store import LocalFoodStore

_logger = logging.getLogger(__name__)


@dataclass
class UsageTracker:
    """Records food usage to keep frequently used foods warm."""

    store: LocalFoodStore

    def mark_used(self, food_id: UUID) -> None:
        """Record that a food was referenced; never raises."""
        try:
            self.store.touch(food_id)
        except Exception as exc:
            _logger.warning("Failed to mark food %s as used: %s", food_id, exc)
