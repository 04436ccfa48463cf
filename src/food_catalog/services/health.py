"""Health reporting for food lookups."""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from food_catalog.domain.errors import ExternalServiceError
from food_catalog.services.external import ExternalNutritionClient
from food_catalog.services.maintenance import CacheMaintenanceService

# A widely listed product used to check the external database.
CHECK_BARCODE = "8901030895390"


@dataclass
class FoodsHealthService:
    """Reports external API connectivity and cache state."""

    external: ExternalNutritionClient
    maintenance: CacheMaintenanceService
    check_barcode: str = CHECK_BARCODE

    async def get_health_status(self) -> dict[str, object]:
        """Return a health summary for the food lookup services."""
        api_status = await self._check_api()
        cache_stats = self.maintenance.get_cache_stats()
        healthy = api_status["status"] == "operational"
        return {
            "status": "healthy" if healthy else "degraded",
            "timestamp": _now_iso(),
            "services": {
                "open_food_facts_api": api_status,
                "cache": {**asdict(cache_stats), "status": "operational"},
            },
        }

    async def _check_api(self) -> dict[str, object]:
        try:
            result = await self.external.search_by_barcode(self.check_barcode)
        except ExternalServiceError as exc:
            return {"status": "error", "last_tested": _now_iso(), "error": str(exc)}
        return {
            "status": "operational" if result else "degraded",
            "last_tested": _now_iso(),
            "test_result": "found_test_product" if result else "no_test_result",
        }


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()
