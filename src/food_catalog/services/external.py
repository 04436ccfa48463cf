"""External nutrition lookups backed by Open Food Facts."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from food_catalog.adapters.open_food_facts_client import OpenFoodFactsClient
from food_catalog.domain.errors import ExternalServiceError
from food_catalog.domain.foods import UNKNOWN_PRODUCT, SearchResult
from food_catalog.services.normalization import (
    normalize_product,
    sanitize_barcode,
    sanitize_query,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

_FOUND_STATUS = 1
_TOO_MANY_REQUESTS = 429
_SERVER_ERROR = 500


@dataclass
class ExternalNutritionClient:
    """Searches the external nutrition database and normalizes its products."""

    client: OpenFoodFactsClient
    page_size: int = 10
    max_retries: int = 3
    retry_delay_seconds: float = 0.3

    async def search_by_name(self, query: str) -> list[SearchResult]:
        """Search products by name, best matches first."""
        sanitized = sanitize_query(query)
        _logger.info("Searching Open Food Facts for: %s", sanitized)
        payload = await self._call_with_retry(
            lambda: self.client.search_products(sanitized, page_size=self.page_size),
            action=f"search:{sanitized}",
        )
        products = payload.get("products") if isinstance(payload, dict) else None
        if not isinstance(products, list):
            _logger.warning("No products found for query: %s", sanitized)
            return []

        results = [
            normalize_product(product, search_term=query)
            for product in products
            if isinstance(product, dict)
        ]
        results = [
            result
            for result in results
            if result.name and result.name != UNKNOWN_PRODUCT
        ]
        results.sort(key=lambda result: result.confidence or 0.0, reverse=True)
        _logger.info("Found %s products for query: %s", len(results), sanitized)
        return results

    async def search_by_barcode(self, barcode: str) -> SearchResult | None:
        """Look up a single product by barcode."""
        sanitized = sanitize_barcode(barcode)
        _logger.info("Searching Open Food Facts by barcode: %s", sanitized)
        if not sanitized:
            return None
        payload = await self._call_with_retry(
            lambda: self.client.get_product(sanitized),
            action=f"barcode:{sanitized}",
        )
        if not payload or payload.get("status") != _FOUND_STATUS:
            _logger.warning("No product found for barcode: %s", sanitized)
            return None
        product = payload.get("product")
        if not isinstance(product, dict):
            return None
        result = normalize_product(
            {**product, "code": product.get("code") or sanitized}
        )
        _logger.info("Found product by barcode %s: %s", sanitized, result.name)
        return result

    async def _call_with_retry(
        self,
        func: "Callable[[], Awaitable[dict[str, object] | None]]",
        *,
        action: str,
    ) -> dict[str, object] | None:
        """Call the API, retrying transient failures a bounded number of times."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                status_code = _status_code_from_exception(exc)
                retryable = _is_transient(exc)
                _logger.warning(
                    "Open Food Facts %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.max_retries + 1,
                    status_code if status_code is not None else "n/a",
                    exc,
                )
                if not retryable or attempt > self.max_retries:
                    raise ExternalServiceError(
                        f"Open Food Facts {action} failed: {exc}",
                        status_code=status_code,
                    ) from exc
                await asyncio.sleep(self.retry_delay_seconds)


def _is_transient(exc: Exception) -> bool:
    """Return True for failures worth retrying."""
    if isinstance(exc, httpx.TransportError):
        return True
    status_code = _status_code_from_exception(exc)
    if status_code is None:
        return False
    return status_code == _TOO_MANY_REQUESTS or status_code >= _SERVER_ERROR


def _status_code_from_exception(exc: Exception) -> int | None:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    return None
