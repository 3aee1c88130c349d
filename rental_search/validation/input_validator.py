"""
Input validation and sanitization.

Every field that reaches the listing store or the geocoding provider passes
through ``validate`` for its declared kind and ``sanitize`` before use.
"""

import math
import re
from enum import Enum
from typing import Any, Union
from urllib.parse import urlparse


MAX_STRING_LENGTH = 1000
MAX_EMAIL_LENGTH = 254


class InputKind(str, Enum):
    """Declared kinds accepted by ``validate``."""
    STRING = "string"
    NUMBER = "number"
    EMAIL = "email"
    URL = "url"
    UUID = "uuid"
    BOOLEAN = "boolean"
    ARRAY = "array"


_SCRIPT_OPENING = re.compile(r'<\s*script\b', re.IGNORECASE)

_EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

_UUID_RE = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

# Removal patterns, applied repeatedly until the string stops changing
_DANGEROUS_PATTERNS = [
    re.compile(r'<script\b[^>]*>[\s\S]*?</script\s*>', re.IGNORECASE),
    re.compile(r'<iframe\b[^>]*>[\s\S]*?</iframe\s*>', re.IGNORECASE),
    re.compile(r'<object\b[^>]*>[\s\S]*?</object\s*>', re.IGNORECASE),
    re.compile(r'<embed\b[^>]*>', re.IGNORECASE),
    re.compile(r'<form\b[^>]*>[\s\S]*?</form\s*>', re.IGNORECASE),
    re.compile(r'javascript:', re.IGNORECASE),
    re.compile(r'vbscript:', re.IGNORECASE),
    re.compile(r'data:', re.IGNORECASE),
    re.compile(r'\bon\w+\s*=', re.IGNORECASE),
]

_HTML_ENTITIES = {
    '<': '&lt;',
    '>': '&gt;',
    "'": '&#39;',
    '"': '&quot;',
}
_ENTITY_CHARS = re.compile(r"[<>'\"]")


def is_number(value: Any) -> bool:
    """True for finite int/float values; booleans are not numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def validate(value: Any, kind: Union[InputKind, str]) -> bool:
    """Check ``value`` against a declared kind.

    Never raises: unknown kinds and unexpected values simply fail.

    Args:
        value: Raw inbound value
        kind: One of the ``InputKind`` values (enum or its string)

    Returns:
        True if the value is acceptable for the kind
    """
    try:
        kind = InputKind(kind)
    except ValueError:
        return False

    if kind is InputKind.STRING:
        return (
            isinstance(value, str)
            and len(value) <= MAX_STRING_LENGTH
            and not _SCRIPT_OPENING.search(value)
        )
    if kind is InputKind.NUMBER:
        return is_number(value)
    if kind is InputKind.EMAIL:
        return (
            isinstance(value, str)
            and len(value) <= MAX_EMAIL_LENGTH
            and bool(_EMAIL_RE.match(value))
        )
    if kind is InputKind.URL:
        if not isinstance(value, str):
            return False
        try:
            parsed = urlparse(value)
        except ValueError:
            return False
        return bool(parsed.scheme) and bool(parsed.netloc)
    if kind is InputKind.UUID:
        return isinstance(value, str) and bool(_UUID_RE.match(value))
    if kind is InputKind.BOOLEAN:
        return isinstance(value, bool)
    if kind is InputKind.ARRAY:
        return isinstance(value, (list, tuple))
    return False


def sanitize(value: Any) -> Any:
    """Neutralize dangerous content in free text.

    Strings have script-capable blocks and prefixes stripped, the HTML
    metacharacters ``< > ' "`` entity-encoded, and are truncated to 1000
    characters. Lists and dicts are sanitized element-wise (dict keys too).
    Anything else is returned unchanged. ``sanitize(sanitize(x)) == sanitize(x)``.
    """
    if isinstance(value, str):
        return _sanitize_string(value)
    if isinstance(value, (list, tuple)):
        return [sanitize(item) for item in value]
    if isinstance(value, dict):
        return {sanitize(key): sanitize(item) for key, item in value.items()}
    return value


def _sanitize_string(text: str) -> str:
    previous = None
    while previous != text:
        previous = text
        for pattern in _DANGEROUS_PATTERNS:
            text = pattern.sub('', text)

    text = _ENTITY_CHARS.sub(lambda match: _HTML_ENTITIES[match.group(0)], text)

    if len(text) > MAX_STRING_LENGTH:
        text = text[:MAX_STRING_LENGTH]
    return text
