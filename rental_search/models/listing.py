"""Listing data models"""

import math
import re
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional


_NUMERIC_AMOUNT = re.compile(r'^\s*\d+(\.\d+)?\s*$')


def coerce_price(amount: Any) -> float:
    """Coerce a stored money amount to a number.

    Accepts finite non-negative numbers and plain decimal strings such as
    ``"12000"`` or ``"12000.50"``; anything else counts as zero.
    """
    if isinstance(amount, bool):
        return 0.0
    if isinstance(amount, (int, float)):
        if math.isfinite(amount) and amount >= 0:
            return float(amount)
        return 0.0
    if isinstance(amount, str) and _NUMERIC_AMOUNT.match(amount):
        return float(amount)
    return 0.0


class ListingSummary(BaseModel):
    """Read-only projection of a stored listing"""
    id: str
    handle: Optional[str] = None
    title: str
    description: Optional[str] = ""
    price_range: Dict[str, Any] = Field(default_factory=dict)
    currency_code: Optional[str] = "INR"
    featured_image: Optional[Dict[str, Any]] = None
    images: List[Dict[str, Any]] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    available_for_sale: bool = True
    user_id: Optional[str] = None
    contact_number: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    locality: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None
    distance_meters: Optional[float] = None

    class Config:
        from_attributes = True
        frozen = True

    @classmethod
    def from_row(cls, row: Any) -> 'ListingSummary':
        """Create a summary from a store row (asyncpg Record or mapping).

        NULL array/json columns are dropped so model defaults apply; UUID
        identifiers are stringified.
        """
        data = {key: value for key, value in dict(row).items() if value is not None}
        for key in ("id", "user_id"):
            if key in data:
                data[key] = str(data[key])
        return cls(**data)

    def min_price_value(self) -> float:
        """Minimum variant price as a number (non-numeric counts as zero)."""
        min_variant = self.price_range.get("minVariantPrice") or {}
        if not isinstance(min_variant, dict):
            return 0.0
        return coerce_price(min_variant.get("amount"))

    def to_projection(self) -> dict:
        """Convert to the external camelCase JSON projection."""
        projection = {
            "id": self.id,
            "handle": self.handle,
            "title": self.title,
            "description": self.description,
            "priceRange": self.price_range,
            "currencyCode": self.currency_code,
            "featuredImage": self.featured_image,
            "images": self.images,
            "tags": self.tags,
            "amenities": self.amenities,
            "availableForSale": self.available_for_sale,
            "userId": self.user_id,
            "contactNumber": self.contact_number,
            "state": self.state,
            "city": self.city,
            "locality": self.locality,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if self.distance_meters is not None:
            projection["distanceMeters"] = self.distance_meters
        return projection


class AreaSummary(BaseModel):
    """Locality aggregate for the nearby-areas view"""
    name: str
    city: Optional[str] = None
    count: int
