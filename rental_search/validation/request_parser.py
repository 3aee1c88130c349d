"""
Boundary parsing of inbound search bodies into a typed SearchRequest.

Each field is validated for its declared kind and sanitized before it is
accepted; anything malformed aborts the request with a ValidationError.
"""

import re
from typing import Any, Dict, FrozenSet, Optional

from rental_search.error_handling import ValidationError
from rental_search.models.search import PropertyType, SearchRequest, SortKey
from .input_validator import InputKind, is_number, sanitize, validate


_NUMERIC_STRING = re.compile(r'^\s*\d+(\.\d+)?\s*$')

DEFAULT_LIMIT = 24
MAX_LIMIT = 50


def _reject(field: str) -> ValidationError:
    return ValidationError(f"Security Alert: Invalid {field} parameter", field=field)


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_text(payload: Dict[str, Any], field: str) -> Optional[str]:
    value = payload.get(field)
    if value is None:
        return None
    if not validate(value, InputKind.STRING):
        raise _reject(field)
    cleaned = sanitize(value).strip()
    return cleaned or None


def _parse_price(payload: Dict[str, Any], field: str) -> Optional[float]:
    value = payload.get(field)
    if _is_absent(value):
        return None
    if isinstance(value, str):
        if not _NUMERIC_STRING.match(value):
            raise _reject(field)
        value = float(value)
    if not validate(value, InputKind.NUMBER) or value < 0:
        raise _reject(field)
    return float(value)


def _parse_limit(payload: Dict[str, Any], default: int, maximum: int) -> int:
    value = payload.get("limit")
    if _is_absent(value):
        return default
    if isinstance(value, str):
        if not _NUMERIC_STRING.match(value):
            raise _reject("limit")
        value = float(value)
    if not is_number(value):
        raise _reject("limit")
    return int(min(max(value, 1), maximum))


def _parse_sort_key(payload: Dict[str, Any]) -> SortKey:
    value = payload.get("sortKey")
    if value is None:
        return SortKey.RELEVANCE
    if not validate(value, InputKind.STRING):
        raise _reject("sortKey")
    try:
        return SortKey(value)
    except ValueError:
        raise _reject("sortKey")


def _parse_reverse(payload: Dict[str, Any]) -> bool:
    value = payload.get("reverse")
    if value is None:
        return False
    if not validate(value, InputKind.BOOLEAN):
        raise _reject("reverse")
    return value


def _parse_property_type(payload: Dict[str, Any]) -> Optional[PropertyType]:
    value = payload.get("propertyType")
    if _is_absent(value):
        return None
    if not validate(value, InputKind.STRING):
        raise _reject("propertyType")
    try:
        return PropertyType(value)
    except ValueError:
        raise _reject("propertyType")


def _parse_amenities(payload: Dict[str, Any]) -> FrozenSet[str]:
    value = payload.get("amenities")
    if value is None:
        return frozenset()
    if not validate(value, InputKind.ARRAY):
        raise _reject("amenities")

    amenities = set()
    for item in value:
        if not validate(item, InputKind.STRING):
            raise _reject("amenities")
        cleaned = sanitize(item).strip()
        if cleaned:
            amenities.add(cleaned)
    return frozenset(amenities)


def parse_search_request(
    payload: Any,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT
) -> SearchRequest:
    """Validate and sanitize a raw POST body into a SearchRequest.

    Args:
        payload: Decoded JSON body (``None`` means an empty body)
        default_limit: Page size when ``limit`` is absent
        max_limit: Upper clamp for ``limit``

    Returns:
        Immutable, validated SearchRequest

    Raises:
        ValidationError: If any declared field fails its check
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Security Alert: Malformed request body", field="body")

    min_price = _parse_price(payload, "minPrice")
    max_price = _parse_price(payload, "maxPrice")

    return SearchRequest(
        query=_parse_text(payload, "query"),
        sort_key=_parse_sort_key(payload),
        reverse=_parse_reverse(payload),
        min_price=min_price,
        max_price=max_price,
        location=_parse_text(payload, "location"),
        property_type=_parse_property_type(payload),
        amenities=_parse_amenities(payload),
        limit=_parse_limit(payload, default_limit, max_limit),
    )
