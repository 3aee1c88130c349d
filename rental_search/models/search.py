"""Search data models"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import FrozenSet, Optional


class SortKey(str, Enum):
    """Supported result orderings"""
    PRICE = "PRICE"
    CREATED_AT = "CREATED_AT"
    RELEVANCE = "RELEVANCE"


class PropertyType(str, Enum):
    """Fixed property type labels, matched against listing tags"""
    PG = "PG"
    FLAT = "Flat"
    ROOM = "Room"
    HOSTEL = "Hostel"
    ONE_BHK = "1BHK"
    TWO_BHK = "2BHK"
    THREE_BHK = "3BHK"


class SearchRequest(BaseModel):
    """Validated search parameters; immutable once constructed"""
    query: Optional[str] = None
    sort_key: SortKey = SortKey.RELEVANCE
    reverse: bool = False
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = None
    property_type: Optional[PropertyType] = None
    amenities: FrozenSet[str] = frozenset()
    limit: int = Field(default=24, ge=1, le=50)

    class Config:
        frozen = True

    @property
    def has_price_bounds(self) -> bool:
        return self.min_price is not None or self.max_price is not None


class LocationCandidate(BaseModel):
    """Geocoded place for the current request only"""
    latitude: float
    longitude: float
    display_name: str = ""

    class Config:
        frozen = True


class ResolutionTier(str, Enum):
    """Which resolution strategy produced a result set"""
    BROWSE = "browse"
    COLUMN_MATCH = "column_match"
    SPATIAL_MATCH = "spatial_match"
    TEXT_FALLBACK = "text_fallback"
