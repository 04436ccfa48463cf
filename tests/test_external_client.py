"""Tests for the external nutrition client."""

import asyncio

import httpx
import pytest

from food_catalog.domain.errors import ExternalServiceError
from food_catalog.services.external import ExternalNutritionClient
from tests.conftest import FakeOpenFoodFactsClient, off_product


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://off.test/cgi/search.pl")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("upstream error", request=request, response=response)


def test_search_by_name_scores_and_sorts() -> None:
    off = FakeOpenFoodFactsClient(
        products=[
            off_product("Apple Pie", code="1"),
            off_product("Apple", code="2"),
            off_product("", code="3"),
        ]
    )
    client = ExternalNutritionClient(off, retry_delay_seconds=0)

    results = asyncio.run(client.search_by_name("apple"))

    assert [result.name for result in results] == ["Apple", "Apple Pie"]
    assert results[0].confidence == 1.0
    assert results[0].confidence > results[1].confidence


def test_search_without_products_returns_empty() -> None:
    off = FakeOpenFoodFactsClient()
    client = ExternalNutritionClient(off, retry_delay_seconds=0)

    assert asyncio.run(client.search_by_name("mango")) == []


def test_transient_failures_are_retried_then_raised() -> None:
    off = FakeOpenFoodFactsClient(error=httpx.ConnectTimeout("timed out"))
    client = ExternalNutritionClient(off, max_retries=3, retry_delay_seconds=0)

    with pytest.raises(ExternalServiceError):
        asyncio.run(client.search_by_name("mango"))

    assert off.search_calls == 4


def test_server_errors_are_retried() -> None:
    off = FakeOpenFoodFactsClient(error=_status_error(503))
    client = ExternalNutritionClient(off, max_retries=2, retry_delay_seconds=0)

    with pytest.raises(ExternalServiceError) as exc_info:
        asyncio.run(client.search_by_name("mango"))

    assert off.search_calls == 3
    assert exc_info.value.status_code == 503


def test_client_errors_fail_fast() -> None:
    off = FakeOpenFoodFactsClient(error=_status_error(400))
    client = ExternalNutritionClient(off, max_retries=3, retry_delay_seconds=0)

    with pytest.raises(ExternalServiceError):
        asyncio.run(client.search_by_name("mango"))

    assert off.search_calls == 1


def test_barcode_lookup_found() -> None:
    off = FakeOpenFoodFactsClient(
        barcodes={"3017620422003": off_product("Nutella", brands="Ferrero")}
    )
    client = ExternalNutritionClient(off, retry_delay_seconds=0)

    result = asyncio.run(client.search_by_barcode("3017-6204-22003"))

    assert result is not None
    assert result.name == "Nutella"
    assert result.barcode == "3017620422003"
    assert result.confidence == 1.0


def test_barcode_not_found_returns_none() -> None:
    client = ExternalNutritionClient(FakeOpenFoodFactsClient(), retry_delay_seconds=0)

    assert asyncio.run(client.search_by_barcode("0000000000")) is None


def test_barcode_transport_failure_raises() -> None:
    off = FakeOpenFoodFactsClient(error=httpx.ConnectError("refused"))
    client = ExternalNutritionClient(off, max_retries=1, retry_delay_seconds=0)

    with pytest.raises(ExternalServiceError):
        asyncio.run(client.search_by_barcode("3017620422003"))

    assert off.product_calls == 2
