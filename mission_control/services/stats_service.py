"""Aggregate statistics over a set of CMA comparables."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ..models.property import ListingStatus, Property, SubjectProperty
from ..models.search import CMAStats, PriceRange
from .geo import distances_from

_STATUS_DISPLAY_NAMES = {ListingStatus.ACTIVE_UNDER_CONTRACT.value: "Under Contract"}


def status_display_name(status: Optional[str]) -> str:
    if not status:
        return ""
    return _STATUS_DISPLAY_NAMES.get(status, status)


def comps_frame(properties: Sequence[Property]) -> pd.DataFrame:
    """One row per comparable with the numeric columns the statistics need."""

    rows = [
        {
            "price": prop.effective_price,
            "sqft": prop.sqft or 0.0,
            "dom": prop.days_on_market or 0,
            "latitude": prop.latitude,
            "longitude": prop.longitude,
        }
        for prop in properties
    ]
    df = pd.DataFrame(rows, columns=["price", "sqft", "dom", "latitude", "longitude"])
    for column in ("price", "sqft", "dom", "latitude", "longitude"):
        df[column] = pd.to_numeric(df[column], errors="coerce")
    df["price_per_sqft"] = np.where(df["sqft"] > 0, df["price"] / df["sqft"].where(df["sqft"] > 0, 1), 0.0)
    return df


def calculate_cma_stats(properties: Sequence[Property], subject: Optional[SubjectProperty] = None) -> CMAStats:
    """Average, median, price per sqft, days on market and price range.

    A comparable's price is its sold price, falling back to list price, then 0.
    Price per sqft counts as 0 for listings without square footage.
    """

    if not properties:
        return CMAStats()

    df = comps_frame(properties)
    stats = CMAStats(
        count=len(df),
        average_price=float(df["price"].mean()),
        median_price=float(df["price"].median()),
        average_price_per_sqft=float(df["price_per_sqft"].mean()),
        average_days_on_market=float(df["dom"].mean()),
        price_range=PriceRange(min=float(df["price"].min()), max=float(df["price"].max())),
    )

    if subject is not None and subject.has_coordinates:
        miles = distances_from(subject.latitude, subject.longitude, df["latitude"], df["longitude"])
        if np.isfinite(miles).any():
            stats.average_distance_miles = float(np.nanmean(miles))
    return stats


__all__ = ["calculate_cma_stats", "comps_frame", "status_display_name"]
