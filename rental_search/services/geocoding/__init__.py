"""Geocoding services"""

from .geocoding_client import GeocodeResult, GeocodeStatus, GeocodingClient

__all__ = ["GeocodeResult", "GeocodeStatus", "GeocodingClient"]
