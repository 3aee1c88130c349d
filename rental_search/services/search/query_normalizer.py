"""
Query normalization for the resolution tiers.
"""

import re


_HTML_ENTITY = re.compile(r'&(?:#\d+|[a-zA-Z]+);')
# Keep letters, digits, whitespace and hyphens for structured location matches
_LOCATION_UNSAFE = re.compile(r'[^\w\s-]', re.UNICODE)
_WHITESPACE = re.compile(r'\s+')
# Punctuation or encoded entities (e.g. &quot;) at either end of the query
_EDGE_NOISE = re.compile(
    r'^(?:&(?:#\d+|[a-zA-Z]+);|[\W_])+|(?:&(?:#\d+|[a-zA-Z]+);|[\W_])+$',
    re.UNICODE
)


def normalize_location_term(query: str) -> str:
    """
    Normalize a query for the Column Match and geocoding tiers.

    Trims, drops encoded HTML entities left by sanitization, removes
    characters that would break a structured match (quotes, commas, wildcards,
    parentheses) and collapses whitespace.

    Args:
        query: Sanitized free-text query

    Returns:
        Normalized term, possibly empty
    """
    cleaned = _HTML_ENTITY.sub(' ', query or '')
    cleaned = _LOCATION_UNSAFE.sub(' ', cleaned)
    cleaned = cleaned.replace('_', ' ')
    return _WHITESPACE.sub(' ', cleaned).strip()


def trim_punctuation(query: str) -> str:
    """
    Trim leading/trailing punctuation and encoded entities for the Text
    Fallback tier.

    Inner punctuation is kept so phrases like "2-BHK near D-Mart" still match.
    """
    trimmed = _EDGE_NOISE.sub('', (query or '').strip())
    return _WHITESPACE.sub(' ', trimmed)


def escape_like(term: str) -> str:
    """Escape LIKE/ILIKE wildcards so the term matches literally."""
    return (
        term.replace('\\', '\\\\')
        .replace('%', '\\%')
        .replace('_', '\\_')
    )
