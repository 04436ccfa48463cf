"""Quality gate deciding which external candidates enter the local catalog."""

from food_catalog.domain.foods import UNKNOWN_PRODUCT, SearchResult

MIN_CONFIDENCE = 0.3


def should_cache(candidate: SearchResult) -> bool:
    """Return True when an external candidate is worth persisting.

    Candidates whose primary macros are all zero are treated as incomplete
    upstream data. This also rejects genuinely empty foods such as water.
    """
    if not candidate.name or candidate.name == UNKNOWN_PRODUCT:
        return False
    nutrition = candidate.nutrition
    if (
        nutrition.calories == 0
        and nutrition.protein == 0
        and nutrition.carbs == 0
        and nutrition.fat == 0
    ):
        return False
    return candidate.confidence is None or candidate.confidence >= MIN_CONFIDENCE
