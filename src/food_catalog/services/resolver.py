"""Food resolution across the local catalog and the external database."""

import logging
from dataclasses import dataclass

from food_catalog.domain.errors import ExternalServiceError, PersistenceError
from food_catalog.domain.foods import FoodSource, SearchResult
from food_catalog.services.admission import should_cache
from food_catalog.services.external import ExternalNutritionClient
from food_catalog.services.food_store import LocalFoodStore
from food_catalog.services.normalization import sanitize_barcode

_logger = logging.getLogger(__name__)


@dataclass
class FoodResolver:
    """Resolves foods by name or barcode, caching worthwhile external hits.

    Name searches are served from the local catalog when it already holds
    `cache_threshold` matches. Otherwise the external database is consulted,
    admitted candidates are persisted, and both sources are merged with local
    results first. An external outage degrades a name search to local-only
    results, while a barcode search surfaces the error.
    """

    store: LocalFoodStore
    external: ExternalNutritionClient
    cache_threshold: int = 5
    max_external_results: int = 10

    async def search_by_name(self, query: str) -> list[SearchResult]:
        """Search foods by name."""
        _logger.info("Searching foods by name: %s", query)
        local_results = [
            SearchResult.from_record(food, is_from_cache=True)
            for food in self.store.search_local(query)
        ]
        if len(local_results) >= self.cache_threshold:
            _logger.info("Returning %s local results", len(local_results))
            return local_results

        _logger.info(
            "Local results insufficient (%s), searching external API",
            len(local_results),
        )
        try:
            candidates = await self.external.search_by_name(query)
        except ExternalServiceError as exc:
            _logger.warning(
                "External search failed, returning local results only: %s", exc
            )
            return local_results

        external_results = self._cache_candidates(candidates)
        combined = rank_results(deduplicate_results(local_results + external_results))
        _logger.info("Combined search returned %s results", len(combined))
        return combined

    async def search_by_barcode(self, barcode: str) -> SearchResult | None:
        """Look up a food by barcode, caching external hits unconditionally."""
        barcode = sanitize_barcode(barcode)
        _logger.info("Searching foods by barcode: %s", barcode)
        if not barcode:
            return None
        food = self.store.find_by_barcode(barcode)
        if food is not None:
            _logger.info("Found food in local cache: %s", food.name)
            return SearchResult.from_record(food, is_from_cache=True)

        _logger.info("Food not in cache, searching external API")
        candidate = await self.external.search_by_barcode(barcode)
        if candidate is None:
            _logger.warning("No food found for barcode: %s", barcode)
            return None

        record = self.store.upsert_by_identity(candidate, FoodSource.OPEN_FOOD_FACTS)
        _logger.info("Cached new food from external API: %s", record.name)
        return SearchResult.from_record(record, is_from_cache=False)

    def _cache_candidates(self, candidates: list[SearchResult]) -> list[SearchResult]:
        """Persist admitted candidates; keep the rest as transient results."""
        results: list[SearchResult] = []
        for candidate in candidates[: self.max_external_results]:
            if not should_cache(candidate):
                _logger.debug("Skipping cache for low quality food: %s", candidate.name)
                results.append(candidate)
                continue
            try:
                record = self.store.upsert_by_identity(
                    candidate, FoodSource.OPEN_FOOD_FACTS
                )
            except PersistenceError as exc:
                _logger.warning("Failed to cache food %s: %s", candidate.name, exc)
                results.append(candidate)
                continue
            results.append(candidate.persisted_as(record))
        return results


def deduplicate_results(results: list[SearchResult]) -> list[SearchResult]:
    """Drop later results sharing a barcode or (name, brand) with an earlier one."""
    seen: set[str] = set()
    deduplicated: list[SearchResult] = []
    for result in results:
        key = result.identity_key()
        if key in seen:
            continue
        seen.add(key)
        deduplicated.append(result)
    return deduplicated


def rank_results(results: list[SearchResult]) -> list[SearchResult]:
    """Order cached results first, then by confidence; ties keep their order."""
    return sorted(
        results,
        key=lambda result: (not result.is_from_cache, -(result.confidence or 0.0)),
    )
