"""
Validation module for inbound search fields.

Provides type/shape validation, free-text sanitization and boundary parsing of
search request bodies.
"""

from .input_validator import InputKind, is_number, sanitize, validate
from .request_parser import parse_search_request

__all__ = ['InputKind', 'is_number', 'sanitize', 'validate', 'parse_search_request']
