"""Great-circle distance helpers."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

EARTH_RADIUS_MILES = 3959.0


def distance_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in miles between two points given in degrees.

    Inputs are not range-checked.
    """

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def distances_from(lat: float, lon: float, lats: Sequence[float], lons: Sequence[float]) -> np.ndarray:
    """Vectorised haversine from one origin to many points.

    Missing coordinates (None or NaN) produce NaN in the output.
    """

    lat_arr = np.radians(np.asarray(lats, dtype=float))
    lon_arr = np.radians(np.asarray(lons, dtype=float))
    lat0 = math.radians(lat)
    lon0 = math.radians(lon)

    a = np.sin((lat_arr - lat0) / 2) ** 2 + math.cos(lat0) * np.cos(lat_arr) * np.sin((lon_arr - lon0) / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


__all__ = ["EARTH_RADIUS_MILES", "distance_miles", "distances_from"]
