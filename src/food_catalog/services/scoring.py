"""Relevance scoring for text search candidates."""

EXACT_MATCH = 1.0
PREFIX_MATCH = 0.8
SUBSTRING_MATCH = 0.6
BRAND_BONUS = 0.2
WORD_OVERLAP_BONUS = 0.3
# Keeps every non-exact match strictly below an exact one.
NON_EXACT_CEILING = 0.95


def compute_confidence(name: str, brand: str | None, query: str) -> float:
    """Score how well a candidate name and brand match a query, in [0, 1].

    Exact matches beat prefix matches, which beat substring matches. Brand
    hits and query words found inside name words add bonuses on top.
    """
    needle = query.strip().lower()
    if not needle:
        return 0.0
    lowered_name = name.lower()
    lowered_brand = (brand or "").lower()

    exact = lowered_name == needle
    if exact:
        score = EXACT_MATCH
    elif lowered_name.startswith(needle):
        score = PREFIX_MATCH
    elif needle in lowered_name:
        score = SUBSTRING_MATCH
    else:
        score = 0.0

    if lowered_brand and needle in lowered_brand:
        score += BRAND_BONUS

    score += WORD_OVERLAP_BONUS * word_overlap(lowered_name, needle)

    ceiling = EXACT_MATCH if exact else NON_EXACT_CEILING
    return max(0.0, min(score, ceiling))


def word_overlap(name: str, query: str) -> float:
    """Fraction of query words contained in some word of the name."""
    query_words = query.split()
    if not query_words:
        return 0.0
    name_words = name.split()
    matched = [
        word
        for word in query_words
        if any(word in candidate for candidate in name_words)
    ]
    return len(matched) / len(query_words)
