"""CMA comparable search against the MLS listings API."""

from __future__ import annotations

import math
import os
from datetime import date, datetime, timedelta
from itertools import chain, zip_longest
from typing import Dict, List, Optional, Sequence, Tuple

from ..db.mappers import map_listing_row
from ..db.repliers_client import RepliersClient
from ..models.property import DEFAULT_SEARCH_STATUSES, ListingStatus, Property
from ..models.search import DEFAULT_RESULTS_PER_PAGE, MAX_RESULTS_PER_PAGE, SearchRequest, SearchResponse
from ..utils.coerce import to_int
from ..utils.logging import get_logger, kv
from .address import AddressFallback, normalize_address
from .scoring import MissingFieldPolicy, rank_properties

LOGGER = get_logger("services.search")

FALLBACK_DATE_SOLD_DAYS = 180


def _sold_days_from_env() -> int:
    days = to_int(os.getenv("CMA_DATE_SOLD_DAYS"))
    return days if days and days > 0 else FALLBACK_DATE_SOLD_DAYS


DEFAULT_DATE_SOLD_DAYS = _sold_days_from_env()

Param = Tuple[str, str]


class SearchService:
    """Fetches candidate listings, scores them against the subject and ranks them.

    The MLS client is expected to expose ``search_listings(params)`` returning
    ``(raw_listings, total)`` and to raise on upstream failure. Failures are not
    retried here.
    """

    def __init__(self, client, policy: Optional[MissingFieldPolicy] = None) -> None:
        self.client = client
        self.policy = policy

    def search(self, request: SearchRequest, now: Optional[datetime] = None) -> SearchResponse:
        statuses = list(request.statuses) or list(DEFAULT_SEARCH_STATUSES)
        sold_days = request.date_sold_days or DEFAULT_DATE_SOLD_DAYS
        today = (now or datetime.now()).date()

        if request.search and request.search.strip() and not request.mls_numbers:
            return self._address_search(request, statuses, sold_days, today, now)
        return self._criteria_search(request, statuses, sold_days, today, now)

    # ------------------------------------------------------------------
    # Address search
    def _address_search(
        self,
        request: SearchRequest,
        statuses: Sequence[str],
        sold_days: int,
        today: date,
        now: Optional[datetime],
    ) -> SearchResponse:
        results_per_page = request.limit or DEFAULT_RESULTS_PER_PAGE
        normalized = normalize_address(request.search)
        LOGGER.info(kv("address_search", query=normalized.raw, fallbacks=len(normalized.fallbacks)))

        shares = [(status, MAX_RESULTS_PER_PAGE) for status in statuses]
        raw_listings: List[Dict] = []
        used: Optional[AddressFallback] = None
        for index, fallback in enumerate(normalized.fallbacks, start=1):
            raw_listings, _ = self._fetch_statuses(list(fallback.params.items()), shares, 1, sold_days, today)
            LOGGER.info(kv("address_fallback", index=index, level=fallback.level, listings=len(raw_listings)))
            if raw_listings:
                used = fallback
                break

        if used is None:
            return SearchResponse(
                listings=[],
                total=0,
                page=1,
                total_pages=0,
                results_per_page=results_per_page,
                search_strategy="fallback_search",
                message="No properties found for the specified address",
            )

        listings = [map_listing_row(row) for row in raw_listings]
        exact = _has_exact_match(listings, normalized.components.street_line)
        scored = rank_properties(listings, request.subject_property, now=now, policy=self.policy)[:results_per_page]
        LOGGER.info(kv("address_search_done", returned=len(scored), exact=exact))

        return SearchResponse(
            listings=[item.property for item in scored],
            scores=[item.score for item in scored],
            total=len(scored),
            page=1,
            total_pages=1,
            results_per_page=len(scored),
            search_strategy="exact_match" if exact else "fallback_search",
            matched_query=used.query,
        )

    # ------------------------------------------------------------------
    # Criteria search
    def _criteria_search(
        self,
        request: SearchRequest,
        statuses: Sequence[str],
        sold_days: int,
        today: date,
        now: Optional[datetime],
    ) -> SearchResponse:
        results_per_page = request.limit or DEFAULT_RESULTS_PER_PAGE
        criteria = _criteria_params(request)

        if request.mls_numbers:
            raw_listings, total = self.client.search_listings(
                _base_params(results_per_page, request.page) + criteria
            )
            total_pages = math.ceil(total / results_per_page) if total else 0
        else:
            shares = _split_page(results_per_page, statuses)
            raw_listings, counts = self._fetch_statuses(criteria, shares, request.page, sold_days, today)
            total = sum(counts)
            total_pages = max(
                (math.ceil(count / size) for (_, size), count in zip(shares, counts) if count),
                default=0,
            )

        listings = [map_listing_row(row) for row in raw_listings]
        scored = rank_properties(listings, request.subject_property, now=now, policy=self.policy)[:results_per_page]
        LOGGER.info(kv("criteria_search_done", page=request.page, returned=len(scored), total=total, pages=total_pages))

        return SearchResponse(
            listings=[item.property for item in scored],
            scores=[item.score for item in scored],
            total=total,
            page=request.page,
            total_pages=total_pages,
            results_per_page=results_per_page,
            search_strategy="criteria",
        )

    # ------------------------------------------------------------------
    def _fetch_statuses(
        self,
        extra: List[Param],
        shares: Sequence[Tuple[str, int]],
        page: int,
        sold_days: int,
        today: date,
    ) -> Tuple[List[Dict], List[int]]:
        """Query each status for its share of the page.

        Returns the batches interleaved round-robin, so no status is pushed
        behind another when scores tie, and the upstream total per status.
        """

        batches: List[List[Dict]] = []
        counts: List[int] = []
        for status, size in shares:
            params = _base_params(size, page) + extra + _status_params(status, sold_days, today)
            batch, count = self.client.search_listings(params)
            batches.append(list(batch))
            counts.append(count)
        return _interleave(batches), counts


def _split_page(results_per_page: int, statuses: Sequence[str]) -> List[Tuple[str, int]]:
    """Divide one page between the statuses; earlier statuses take the remainder.

    A status whose share would be zero (more statuses than results) is not queried.
    """

    share, extra = divmod(results_per_page, len(statuses))
    sizes = [(status, share + (1 if index < extra else 0)) for index, status in enumerate(statuses)]
    return [(status, size) for status, size in sizes if size > 0]


def _interleave(batches: Sequence[List[Dict]]) -> List[Dict]:
    merged: List[Dict] = []
    for row in chain.from_iterable(zip_longest(*batches)):
        if row is not None:
            merged.append(row)
    return merged


def _base_params(results_per_page: int, page: int) -> List[Param]:
    return [
        ("listings", "true"),
        ("type", "Sale"),
        ("resultsPerPage", str(results_per_page)),
        ("pageNum", str(page)),
        ("sortBy", "createdOnDesc"),
    ]


def _status_params(status: str, sold_days: int, today: date) -> List[Param]:
    if status == ListingStatus.CLOSED.value:
        min_closed = today - timedelta(days=sold_days)
        return [("status", "U"), ("lastStatus", "Sld"), ("minClosedDate", min_closed.isoformat())]
    return [("standardStatus", status)]


def _criteria_params(request: SearchRequest) -> List[Param]:
    params: List[Param] = []
    for key, value in (
        ("city", request.city),
        ("zip", request.zip),
        ("county", request.county),
        ("minBeds", request.min_beds),
        ("minBaths", request.min_baths),
        ("minPrice", request.min_price),
        ("maxPrice", request.max_price),
        ("style", request.property_type),
        ("minSqft", request.min_sqft),
        ("maxSqft", request.max_sqft),
    ):
        if value not in (None, ""):
            params.append((key, _fmt(value)))
    params.extend(("mlsNumber", number) for number in request.mls_numbers)
    return params


def _fmt(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _has_exact_match(listings: Sequence[Property], street_line: str) -> bool:
    if not street_line:
        return False
    target = street_line.lower()
    for prop in listings:
        candidate = prop.components.street_line if prop.components else prop.address
        if target in candidate.lower():
            return True
    return False


_service_singleton: Optional[SearchService] = None


def get_search_service() -> SearchService:
    """Shared service backed by the Repliers client; raises MLSConfigError without an API key."""

    global _service_singleton
    if _service_singleton is None:
        _service_singleton = SearchService(RepliersClient())
    return _service_singleton


def reset_search_service() -> None:
    global _service_singleton
    _service_singleton = None


__all__ = ["DEFAULT_DATE_SOLD_DAYS", "SearchService", "get_search_service", "reset_search_service"]
