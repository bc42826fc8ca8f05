"""Pydantic schemas for CMA search, scoring and statistics payloads."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .property import Property, ScoredProperty, SubjectProperty

MAX_RESULTS_PER_PAGE = 50
DEFAULT_RESULTS_PER_PAGE = 25


class SearchRequest(BaseModel):
    search: Optional[str] = None
    subject_property: Optional[SubjectProperty] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    county: Optional[str] = None
    mls_numbers: List[str] = Field(default_factory=list)
    statuses: List[str] = Field(default_factory=list)
    property_type: Optional[str] = None
    min_beds: Optional[float] = None
    min_baths: Optional[float] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_sqft: Optional[float] = None
    max_sqft: Optional[float] = None
    page: int = Field(1, ge=1)
    limit: Optional[int] = Field(None, ge=1, le=MAX_RESULTS_PER_PAGE)
    date_sold_days: Optional[int] = Field(None, ge=1)


class SearchResponse(BaseModel):
    listings: List[Property]
    scores: List[float] = Field(default_factory=list)
    total: int
    page: int = 1
    total_pages: int = 0
    results_per_page: int
    search_strategy: Literal["exact_match", "fallback_search", "criteria"] = "criteria"
    matched_query: Optional[str] = None
    message: Optional[str] = None


class ScoreRequest(BaseModel):
    property: Property
    subject_property: Optional[SubjectProperty] = None


class Adjustment(BaseModel):
    factor: str
    rule: str
    points: float


class ScoreResponse(BaseModel):
    score: float
    adjustments: List[Adjustment]


class RankRequest(BaseModel):
    properties: List[Property]
    subject_property: Optional[SubjectProperty] = None


class RankResponse(BaseModel):
    items: List[ScoredProperty]
    total: int


class StatsRequest(BaseModel):
    properties: List[Property]
    subject_property: Optional[SubjectProperty] = None


class PriceRange(BaseModel):
    min: float = 0.0
    max: float = 0.0


class CMAStats(BaseModel):
    count: int = 0
    average_price: float = 0.0
    median_price: float = 0.0
    average_price_per_sqft: float = 0.0
    average_days_on_market: float = 0.0
    price_range: PriceRange = Field(default_factory=PriceRange)
    average_distance_miles: Optional[float] = None
