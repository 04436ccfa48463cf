"""Normalization of Open Food Facts products into catalog shapes."""

import math
import re

from food_catalog.domain.foods import (
    DEFAULT_SERVING_SIZE,
    UNKNOWN_PRODUCT,
    NutritionFacts,
    SearchResult,
)
from food_catalog.services.scoring import compute_confidence

MAX_QUERY_LENGTH = 100
MAX_NAME_LENGTH = 200
MAX_BRAND_LENGTH = 100
MAX_IMAGE_URL_LENGTH = 500
MAX_NUTRIENT_VALUE = 9999.0
KJ_PER_KCAL = 4.184

_QUERY_DISALLOWED = re.compile(r"[^\w\s-]")
_NON_DIGITS = re.compile(r"[^0-9]")
_WHITESPACE = re.compile(r"\s+")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def sanitize_query(query: str) -> str:
    """Strip characters the search endpoint should never see."""
    return _QUERY_DISALLOWED.sub("", query.strip())[:MAX_QUERY_LENGTH].strip()


def sanitize_barcode(barcode: str) -> str:
    """Keep digits only."""
    return _NON_DIGITS.sub("", barcode)


def normalize_product(
    product: dict[str, object], search_term: str | None = None
) -> SearchResult:
    """Map a raw product into a search result.

    Products looked up by barcode carry confidence 1.0; text search results
    are scored against the search term.
    """
    name = _clean_name(product.get("product_name") or product.get("generic_name"))
    brand = _clean_brand(product.get("brands"))
    nutriments = product.get("nutriments")
    nutrition = normalize_nutriments(nutriments if isinstance(nutriments, dict) else {})
    confidence = (
        compute_confidence(name, brand, search_term) if search_term else 1.0
    )
    serving_size = product.get("serving_size")
    return SearchResult(
        name=name,
        brand=brand or None,
        barcode=str(product.get("code") or "") or None,
        nutrition=nutrition,
        serving_size=str(serving_size) if serving_size else DEFAULT_SERVING_SIZE,
        image_url=_clean_image_url(product.get("image_url")),
        is_from_cache=False,
        confidence=confidence,
    )


def normalize_nutriments(nutriments: dict[str, object]) -> NutritionFacts:
    """Extract per-100g nutrition values, coercing bad data to zero."""
    calories = _nutrient(nutriments, "energy-kcal_100g")
    if not calories:
        calories = _nutrient(nutriments, "energy_100g") / KJ_PER_KCAL
    return NutritionFacts(
        calories=calories,
        protein=_nutrient(nutriments, "proteins_100g"),
        carbs=_nutrient(nutriments, "carbohydrates_100g"),
        fat=_nutrient(nutriments, "fat_100g"),
        fiber=_nutrient(nutriments, "fiber_100g"),
        sugar=_nutrient(nutriments, "sugars_100g"),
        # grams to milligrams
        sodium=_nutrient(nutriments, "sodium_100g") * 1000,
    )


def _nutrient(nutriments: dict[str, object], key: str) -> float:
    raw = nutriments.get(key)
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return min(value, MAX_NUTRIENT_VALUE)


def _clean_name(raw: object) -> str:
    if not isinstance(raw, str) or not raw.strip():
        return UNKNOWN_PRODUCT
    cleaned = _CONTROL_CHARS.sub("", _WHITESPACE.sub(" ", raw.strip()))
    return cleaned[:MAX_NAME_LENGTH] or UNKNOWN_PRODUCT


def _clean_brand(raw: object) -> str:
    if not isinstance(raw, str) or not raw:
        return ""
    return raw.split(",")[0].strip()[:MAX_BRAND_LENGTH]


def _clean_image_url(raw: object) -> str | None:
    if not isinstance(raw, str) or not raw.startswith("http"):
        return None
    return raw[:MAX_IMAGE_URL_LENGTH]
