"""Relevance scoring of MLS listings against a CMA subject property."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Union

from ..models.property import SOLD_STATUSES, Property, ScoredProperty, SubjectProperty
from .geo import distance_miles

BASE_SCORE = 100.0
DAYS_PER_MONTH = 30.0


class MissingFieldPolicy(str, Enum):
    """How missing bed/bath counts take part in similarity scoring.

    ZERO counts a missing value as 0, so two listings that both lack beds still
    earn the bed bonus. SKIP disables the contribution when either side is
    missing the value.
    """

    ZERO = "zero"
    SKIP = "skip"


def _policy_from_env() -> MissingFieldPolicy:
    raw = os.getenv("CMA_MISSING_FIELD_POLICY", MissingFieldPolicy.ZERO.value).strip().lower()
    try:
        return MissingFieldPolicy(raw)
    except ValueError:
        return MissingFieldPolicy.ZERO


DEFAULT_POLICY = _policy_from_env()


@dataclass(frozen=True)
class BandRule:
    """One row of a threshold table: award ``bonus`` when ``predicate`` holds."""

    label: str
    predicate: Callable[[float], bool]
    bonus: float


def first_match(bands: Sequence[BandRule], value: float) -> Optional[BandRule]:
    """Return the first band whose predicate accepts ``value``."""
    for band in bands:
        if band.predicate(value):
            return band
    return None


# ---------------------------------------------------------------------------
# Threshold tables, evaluated top to bottom
# ---------------------------------------------------------------------------

DISTANCE_BANDS: List[BandRule] = [
    BandRule("within_0_5_mi", lambda miles: miles <= 0.5, 50),
    BandRule("within_1_mi", lambda miles: miles <= 1, 30),
    BandRule("within_2_mi", lambda miles: miles <= 2, 10),
    BandRule("beyond_5_mi", lambda miles: miles > 5, -20),
]

SQFT_BANDS: List[BandRule] = [
    BandRule("within_30_pct", lambda diff: diff <= 0.3, 20),
    BandRule("within_50_pct", lambda diff: diff <= 0.5, 10),
    BandRule("beyond_100_pct", lambda diff: diff > 1.0, -15),
]

RECENCY_BANDS: List[BandRule] = [
    BandRule("sold_within_3_months", lambda months: months <= 3, 20),
    BandRule("sold_within_6_months", lambda months: months <= 6, 15),
    BandRule("sold_within_12_months", lambda months: months <= 12, 5),
]

BED_BATH_TOLERANCE = 1
BEDS_BONUS = 25
BATHS_BONUS = 25
TYPE_MATCH_BONUS = 15
SOLD_BONUS = 30


@dataclass(frozen=True)
class ScoreAdjustment:
    factor: str
    rule: str
    points: float


@dataclass(frozen=True)
class ScoreBreakdown:
    score: float
    adjustments: List[ScoreAdjustment]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def score_breakdown(
    prop: Property,
    subject: Optional[SubjectProperty] = None,
    *,
    now: Optional[datetime] = None,
    policy: Optional[MissingFieldPolicy] = None,
) -> ScoreBreakdown:
    """Score ``prop`` against ``subject`` and list every adjustment applied."""

    if subject is None:
        return ScoreBreakdown(score=BASE_SCORE, adjustments=[])

    policy = policy or DEFAULT_POLICY
    adjustments: List[ScoreAdjustment] = []

    if prop.has_coordinates and subject.has_coordinates:
        miles = distance_miles(subject.latitude, subject.longitude, prop.latitude, prop.longitude)
        _apply_band(adjustments, "distance", DISTANCE_BANDS, miles)

    if _counts_similar(prop.beds, subject.beds, policy):
        adjustments.append(ScoreAdjustment("beds", "within_1", BEDS_BONUS))
    if _counts_similar(prop.baths, subject.baths, policy):
        adjustments.append(ScoreAdjustment("baths", "within_1", BATHS_BONUS))

    subject_sqft = subject.sqft or 0
    prop_sqft = prop.sqft or 0
    if subject_sqft > 0 and prop_sqft > 0:
        diff = abs(prop_sqft - subject_sqft) / subject_sqft
        _apply_band(adjustments, "sqft", SQFT_BANDS, diff)

    if prop.property_type and subject.property_type and prop.property_type == subject.property_type:
        adjustments.append(ScoreAdjustment("property_type", "exact_match", TYPE_MATCH_BONUS))

    if prop.status in SOLD_STATUSES:
        adjustments.append(ScoreAdjustment("status", "sold", SOLD_BONUS))

    if prop.sold_date is not None:
        months = months_since(prop.sold_date, now)
        _apply_band(adjustments, "recency", RECENCY_BANDS, months)

    total = BASE_SCORE + sum(adj.points for adj in adjustments)
    return ScoreBreakdown(score=total, adjustments=adjustments)


def score_property(
    prop: Property,
    subject: Optional[SubjectProperty] = None,
    *,
    now: Optional[datetime] = None,
    policy: Optional[MissingFieldPolicy] = None,
) -> float:
    return score_breakdown(prop, subject, now=now, policy=policy).score


def rank_properties(
    properties: Iterable[Property],
    subject: Optional[SubjectProperty] = None,
    *,
    now: Optional[datetime] = None,
    policy: Optional[MissingFieldPolicy] = None,
) -> List[ScoredProperty]:
    """Wrap each property with its score, highest first.

    ``sorted`` is stable, so equal scores keep their input order.
    """

    now = now or _utcnow()
    scored = [
        ScoredProperty(property=prop, score=score_property(prop, subject, now=now, policy=policy))
        for prop in properties
    ]
    return sorted(scored, key=lambda item: item.score, reverse=True)


def months_since(sold: Union[datetime, date], now: Optional[datetime] = None) -> float:
    """Elapsed months (30-day blocks) between ``sold`` and ``now``."""

    now = now or _utcnow()
    if not isinstance(sold, datetime):
        sold = datetime(sold.year, sold.month, sold.day, tzinfo=timezone.utc)
    if sold.tzinfo is None:
        sold = sold.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - sold) / timedelta(days=DAYS_PER_MONTH)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _apply_band(adjustments: List[ScoreAdjustment], factor: str, bands: Sequence[BandRule], value: float) -> None:
    band = first_match(bands, value)
    if band is not None:
        adjustments.append(ScoreAdjustment(factor, band.label, band.bonus))


def _counts_similar(a: Optional[float], b: Optional[float], policy: MissingFieldPolicy) -> bool:
    if policy == MissingFieldPolicy.SKIP and (a is None or b is None):
        return False
    return abs((a or 0) - (b or 0)) <= BED_BATH_TOLERANCE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


__all__ = [
    "BASE_SCORE",
    "BandRule",
    "DISTANCE_BANDS",
    "MissingFieldPolicy",
    "RECENCY_BANDS",
    "SQFT_BANDS",
    "ScoreAdjustment",
    "ScoreBreakdown",
    "first_match",
    "months_since",
    "rank_properties",
    "score_breakdown",
    "score_property",
]
