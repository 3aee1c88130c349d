"""
Geocoding client - resolves free text to a single coordinate via a
Nominatim-compatible search endpoint.

Best-effort: one attempt, bounded timeout, no retries. Failures come back as a
tagged result instead of an exception so callers can fall through.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import aiohttp

from rental_search.config import GeocodingConfig
from rental_search.error_handling import GeocodingUnavailable
from rental_search.models import LocationCandidate


logger = logging.getLogger(__name__)


class GeocodeStatus(str, Enum):
    """Outcome of a geocoding lookup"""
    RESOLVED = "resolved"
    NO_MATCH = "no_match"
    FAILED = "failed"


@dataclass(frozen=True)
class GeocodeResult:
    """Tagged geocoding outcome"""
    status: GeocodeStatus
    candidate: Optional[LocationCandidate] = None
    error: Optional[str] = None

    @classmethod
    def resolved(cls, candidate: LocationCandidate) -> 'GeocodeResult':
        return cls(GeocodeStatus.RESOLVED, candidate=candidate)

    @classmethod
    def no_match(cls) -> 'GeocodeResult':
        return cls(GeocodeStatus.NO_MATCH)

    @classmethod
    def failed(cls, error: str) -> 'GeocodeResult':
        return cls(GeocodeStatus.FAILED, error=error)


class GeocodingClient:
    """
    Single-lookup geocoding client.

    Every request carries ``Cache-Control: no-cache`` so the provider always
    performs a fresh lookup, and a total timeout so a hung provider cannot
    stall the search request.
    """

    def __init__(
        self,
        config: Optional[GeocodingConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.config = config or GeocodingConfig()
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an open session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self):
        """Close the session if this client created it"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def geocode(self, text: str) -> GeocodeResult:
        """
        Resolve free text to the provider's single best match.

        Args:
            text: Place name or address to look up

        Returns:
            RESOLVED with a candidate, NO_MATCH when the provider found nothing,
            FAILED when the provider errored, timed out or is disabled
        """
        if not self.config.enabled:
            return GeocodeResult.failed("geocoding disabled")
        if not text or not text.strip():
            return GeocodeResult.no_match()

        try:
            payload = await self._fetch(text.strip())
            candidate = self._parse_candidate(payload)
        except asyncio.TimeoutError:
            logger.warning(
                f"Geocoding timed out after {self.config.timeout_seconds}s for '{text}'"
            )
            return GeocodeResult.failed("timeout")
        except (aiohttp.ClientError, GeocodingUnavailable) as e:
            logger.warning(f"Geocoding failed for '{text}': {e}")
            return GeocodeResult.failed(str(e))

        if candidate is None:
            logger.info(f"Geocoding found no match for '{text}'")
            return GeocodeResult.no_match()

        logger.info(
            f"Geocoded '{text}' to ({candidate.latitude}, {candidate.longitude})"
        )
        return GeocodeResult.resolved(candidate)

    async def _fetch(self, text: str) -> Any:
        """Issue the provider request and return the decoded JSON body."""
        session = await self._ensure_session()

        params = {
            "q": text,
            "format": "json",
            "limit": "1",
        }
        if self.config.country_codes:
            params["countrycodes"] = self.config.country_codes

        headers = {
            "Cache-Control": "no-cache",
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)

        async with session.get(
            self.config.base_url,
            params=params,
            headers=headers,
            timeout=timeout
        ) as response:
            if response.status != 200:
                error_text = await response.text()
                raise GeocodingUnavailable(
                    f"Geocoding provider error: {response.status} - {error_text[:200]}"
                )
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise GeocodingUnavailable(f"Malformed geocoding response: {e}")

    def _parse_candidate(self, payload: Any) -> Optional[LocationCandidate]:
        """Extract the first result; None means the provider found nothing."""
        if not isinstance(payload, list):
            raise GeocodingUnavailable("Malformed geocoding response: expected a list")
        if not payload:
            return None

        first = payload[0]
        if not isinstance(first, dict):
            raise GeocodingUnavailable("Malformed geocoding response: bad result entry")

        try:
            latitude = float(first["lat"])
            longitude = float(first["lon"])
        except (KeyError, TypeError, ValueError):
            raise GeocodingUnavailable("Malformed geocoding response: missing coordinates")

        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            raise GeocodingUnavailable("Malformed geocoding response: coordinates out of range")

        return LocationCandidate(
            latitude=latitude,
            longitude=longitude,
            display_name=str(first.get("display_name", "")),
        )
