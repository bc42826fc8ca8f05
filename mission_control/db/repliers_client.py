"""Thin HTTP client for the Repliers MLS listings API."""

from __future__ import annotations

import os
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import requests

from ..utils.logging import get_logger, kv

LOGGER = get_logger("db.repliers")

REPLIERS_BASE_URL = os.getenv("REPLIERS_BASE_URL", "https://api.repliers.io/listings")
REPLIERS_TIMEOUT = float(os.getenv("REPLIERS_TIMEOUT", "30"))

ParamValue = Union[str, int, float]
Params = Union[Mapping[str, ParamValue], Sequence[Tuple[str, ParamValue]]]


class MLSConfigError(RuntimeError):
    """Raised when the listings API key is not configured."""


class MLSSearchError(RuntimeError):
    """Raised when an MLS search request fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _api_key_from_env() -> Optional[str]:
    return os.getenv("REPLIERS_API_KEY") or os.getenv("IDX_GRID_API_KEY")


class RepliersClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        key = (api_key or _api_key_from_env() or "").strip()
        if not key:
            raise MLSConfigError("Listings API not configured")
        self.api_key = key
        self.base_url = (base_url or REPLIERS_BASE_URL).rstrip("/")
        self.timeout = timeout or REPLIERS_TIMEOUT
        self.session = session or requests.Session()

    def _get(self, params: Params) -> Dict:
        headers = {"Accept": "application/json", "REPLIERS-API-KEY": self.api_key}
        try:
            r = self.session.get(self.base_url, params=params, headers=headers, timeout=self.timeout)
            r.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            LOGGER.error(kv("mls_search_failed", status=status))
            raise MLSSearchError(f"MLS search failed with HTTP {status}", status_code=status) from exc
        except requests.RequestException as exc:
            LOGGER.error(kv("mls_search_failed", error=exc))
            raise MLSSearchError(f"MLS search request failed: {exc}") from exc
        try:
            return r.json()
        except ValueError as exc:
            raise MLSSearchError("MLS search returned a malformed payload") from exc

    def search_listings(self, params: Params) -> Tuple[List[Dict], int]:
        """Run one listings query; return the raw listings and the reported total."""

        data = self._get(params)
        if not isinstance(data, dict):
            raise MLSSearchError("MLS search returned a malformed payload")
        listings = data.get("listings") or []
        total = data.get("count") or data.get("total") or len(listings)
        LOGGER.debug(kv("mls_search_ok", listings=len(listings), total=total))
        return list(listings), int(total)


__all__ = ["MLSConfigError", "MLSSearchError", "RepliersClient", "REPLIERS_BASE_URL"]
