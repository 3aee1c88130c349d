"""Caller identity resolution for rate limiting."""

import ipaddress
from typing import Mapping, Optional


UNKNOWN_IDENTITY = "unknown"


def is_valid_ip(value: str) -> bool:
    """Basic IPv4/IPv6 shape check."""
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def resolve_identity(headers: Mapping[str, str], client_host: Optional[str] = None) -> str:
    """
    Derive the caller's network identity.

    Precedence:
    1) cf-connecting-ip
    2) first entry of x-forwarded-for
    3) x-real-ip
    4) socket peer address

    The first non-empty candidate must look like an IP address; otherwise all
    unidentifiable callers share the ``unknown`` bucket.
    """
    forwarded_for = headers.get("x-forwarded-for") or ""
    candidates = [
        headers.get("cf-connecting-ip"),
        forwarded_for.split(",")[0],
        headers.get("x-real-ip"),
        client_host,
    ]

    for candidate in candidates:
        if candidate and candidate.strip():
            ip = candidate.strip()
            if not is_valid_ip(ip):
                return UNKNOWN_IDENTITY
            return str(ipaddress.ip_address(ip))

    return UNKNOWN_IDENTITY
