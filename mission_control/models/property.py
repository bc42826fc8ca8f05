"""Pydantic models representing MLS listings and CMA subjects."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class ListingStatus(str, Enum):
    ACTIVE = "Active"
    ACTIVE_UNDER_CONTRACT = "Active Under Contract"
    PENDING = "Pending"
    CLOSED = "Closed"
    EXPIRED = "Expired"
    CANCELED = "Canceled"
    WITHDRAWN = "Withdrawn"


# Repliers reports some closed listings as "Sold" rather than "Closed".
SOLD_STATUSES = frozenset({ListingStatus.CLOSED.value, "Sold"})

DEFAULT_SEARCH_STATUSES: List[str] = [ListingStatus.ACTIVE.value, ListingStatus.CLOSED.value]


class AddressComponents(BaseModel):
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    street_suffix: Optional[str] = None
    unit: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None

    @property
    def street_line(self) -> str:
        """Street number, name and suffix joined with spaces."""
        parts = [self.street_number, self.street_name, self.street_suffix]
        return " ".join(p for p in parts if p)


class Property(BaseModel):
    """A listing as returned by the MLS search, in portal field names."""

    address: str = ""
    components: Optional[AddressComponents] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    beds: Optional[float] = None
    baths: Optional[float] = None
    sqft: Optional[float] = None
    property_type: Optional[str] = None
    status: Optional[str] = None
    sold_date: Optional[Union[datetime, date]] = None
    list_price: Optional[float] = None
    sold_price: Optional[float] = None

    mls_number: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    lot_size_acres: Optional[float] = None
    year_built: Optional[int] = None
    list_date: Optional[str] = None
    days_on_market: Optional[int] = None
    photos: List[str] = Field(default_factory=list)
    subdivision: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def effective_price(self) -> float:
        return self.sold_price or self.list_price or 0.0


class SubjectProperty(Property):
    """The home being valued. Any field may be missing."""


class ScoredProperty(BaseModel):
    property: Property
    score: float
