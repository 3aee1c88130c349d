"""
Listing search routes.
"""

import json
import logging
import math
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from rental_search.error_handling import ValidationError
from rental_search.rate_limiting import EndpointClass, resolve_identity
from rental_search.services.search import SearchService, serialize_listings
from rental_search.validation import parse_search_request

logger = logging.getLogger(__name__)

router = APIRouter()


def get_search_service(request: Request) -> SearchService:
    """Return the application's long-lived search service"""
    return request.app.state.search_service


def enforce_rate_limit(request: Request, service: SearchService, endpoint_class: EndpointClass):
    client_host = request.client.host if request.client else None
    identity = resolve_identity(request.headers, client_host)
    service.check_rate(identity, endpoint_class)


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_coordinates(lat: Optional[str], lng: Optional[str]) -> Optional[Tuple[float, float]]:
    """Return (lat, lng) when both are present and in range, else None"""
    latitude = _parse_float(lat)
    longitude = _parse_float(lng)
    if latitude is None or longitude is None:
        return None
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        return None
    return latitude, longitude


def parse_radius(radius: Optional[str], default_km: float, max_km: float) -> float:
    """Radius in km; invalid or non-positive values fall back to the default"""
    value = _parse_float(radius)
    if value is None or value <= 0:
        return default_km
    return min(value, max_km)


def json_response(payload: str) -> Response:
    return Response(content=payload, media_type="application/json")


@router.get("/products")
async def list_products(
    request: Request,
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    radius: Optional[str] = None,
    mode: Optional[str] = None,
    service: SearchService = Depends(get_search_service)
):
    """
    List available listings.

    With valid ``lat``/``lng``: listings within ``radius`` km (default 20),
    or in ``mode=areas`` the top localities as ``{name, city, count}``.
    Without coordinates: the cached list of newest available listings.
    """
    enforce_rate_limit(request, service, EndpointClass.GENERAL)

    coordinates = parse_coordinates(lat, lng)
    if coordinates is None:
        return json_response(await service.available_listings_payload())

    search_settings = service.settings.search
    radius_km = parse_radius(radius, search_settings.radius_km, search_settings.max_radius_km)
    latitude, longitude = coordinates

    if mode == "areas":
        areas = await service.popular_areas(latitude, longitude, radius_km)
        return json_response(json.dumps([area.model_dump() for area in areas]))

    listings = await service.nearby_listings(latitude, longitude, radius_km)
    logger.info(f"Found {len(listings)} listings within {radius_km}km of ({latitude}, {longitude})")
    return json_response(serialize_listings(listings))


@router.post("/products")
async def search_products(
    request: Request,
    service: SearchService = Depends(get_search_service)
):
    """
    Search listings.

    Body: ``{query?, limit?, sortKey?, reverse?, minPrice?, maxPrice?,
    location?, propertyType?, amenities?}``. Returns listing projections
    ordered by the tier that resolved the query.
    """
    enforce_rate_limit(request, service, EndpointClass.GENERAL)

    body = await request.body()
    payload = None
    if body.strip():
        try:
            payload = json.loads(body)
        except ValueError:
            raise ValidationError("Security Alert: Malformed request body", field="body")

    search_settings = service.settings.search
    search_request = parse_search_request(
        payload,
        default_limit=search_settings.default_limit,
        max_limit=search_settings.max_limit
    )

    outcome = await service.search(search_request)
    logger.info(
        f"Search resolved via {outcome.tier.value} with {len(outcome.listings)} listings"
    )
    return json_response(serialize_listings(outcome.listings))
