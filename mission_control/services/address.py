"""Free-text address parsing and MLS search fallbacks."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..models.property import AddressComponents

STREET_SUFFIXES = [
    "St", "Street", "Ave", "Avenue", "Blvd", "Boulevard", "Dr", "Drive", "Rd", "Road",
    "Ln", "Lane", "Ct", "Court", "Pl", "Place", "Cir", "Circle", "Way", "Pkwy", "Parkway",
    "Trl", "Trail", "Path", "Pass", "Loop", "Bend", "Ridge", "Hill", "Creek", "Run",
    "Ter", "Terrace", "Sq", "Square", "Plaza", "Alley", "Walk", "Commons", "Green",
]

_SUFFIX_RE = re.compile(r"\b(" + "|".join(STREET_SUFFIXES) + r")\b\.?", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^(\d+[A-Za-z]?)\s*")
_UNIT_RE = re.compile(
    r"(?:\b(?:apt|apartment|unit|ste|suite)(?:\.\s*|\s+)|#\s*)([A-Za-z0-9-]+)\s*$", re.IGNORECASE
)
_STATE_ZIP_RE = re.compile(r"\s*\b([A-Z]{2})\s+(\d{5}(?:-\d{4})?)$")
# After a comma the state may be typed in any case: "austin, tx 78704".
_LOCALITY_RE = re.compile(_STATE_ZIP_RE.pattern, re.IGNORECASE)
_ZIP_ONLY_RE = re.compile(r"^(\d{5}(?:-\d{4})?)$")


class AddressFallback(BaseModel):
    """One step of the search ladder: a query string and its Repliers params."""

    level: str
    query: str
    params: Dict[str, str] = Field(default_factory=dict)


class NormalizedAddress(BaseModel):
    raw: str = ""
    components: AddressComponents = Field(default_factory=AddressComponents)
    fallbacks: List[AddressFallback] = Field(default_factory=list)

    @property
    def fallback_queries(self) -> List[str]:
        return [fb.query for fb in self.fallbacks]


def parse_address(raw: Optional[str]) -> AddressComponents:
    """Best-effort split of ``raw`` into address components.

    "2402 Rockingham Cir, Austin, TX 78704" yields number 2402, name Rockingham,
    suffix Cir, city Austin, state TX and postal code 78704.
    """

    if not raw or not raw.strip():
        return AddressComponents()

    parts = [p.strip() for p in raw.strip().split(",") if p.strip()]
    if not parts:
        return AddressComponents()
    if len(parts) == 1:
        return _parse_single_line(parts[0])

    city, state, postal_code = _parse_locality(parts[-1])
    components = _parse_street(parts[0])

    for piece in parts[1:-1]:
        unit = _UNIT_RE.match(piece)
        if unit and not components.unit:
            components.unit = unit.group(1)
        elif not city:
            city = piece

    components.city = city or None
    # "Austin, TX 78704": the first part is a city, not a street.
    _street_name_as_city(components)
    components.state = state or None
    components.postal_code = postal_code or None
    return components


def normalize_address(raw: Optional[str]) -> NormalizedAddress:
    """Parse ``raw`` and build fallbacks ordered from most to least specific.

    Exact address, then street with city/state, then city/state/zip, then zip.
    Missing levels are skipped and repeated queries are dropped.
    """

    text = (raw or "").strip()
    components = parse_address(text)
    fallbacks: List[AddressFallback] = []
    seen = set()

    def add(level: str, query: str, params: Dict[str, Optional[str]]) -> None:
        query = query.strip().strip(",").strip()
        if not query or query.lower() in seen:
            return
        seen.add(query.lower())
        clean = {key: value for key, value in params.items() if value}
        fallbacks.append(AddressFallback(level=level, query=query, params=clean))

    if not text:
        return NormalizedAddress(raw="", components=components, fallbacks=[])

    street = components.street_line
    if components.street_number and components.street_name and components.postal_code:
        exact_params = {
            "streetNumber": components.street_number,
            "streetName": components.street_name,
            "streetSuffix": components.street_suffix,
            "unitNumber": components.unit,
            "zip": components.postal_code,
        }
    else:
        exact_params = {"search": text}
    add("exact", text, exact_params)

    city_state = _join(", ", components.city, components.state)
    if street and components.street_name and (components.city or components.state):
        add(
            "street_city",
            _join(", ", street, city_state),
            {"streetName": components.street_name, "city": components.city},
        )

    locality = _join(" ", city_state, components.postal_code)
    if (components.city or components.state) and components.postal_code:
        add("city_state_zip", locality, {"city": components.city, "zip": components.postal_code})

    if components.postal_code:
        add("zip", components.postal_code, {"zip": components.postal_code})

    return NormalizedAddress(raw=text, components=components, fallbacks=fallbacks)


def _parse_locality(part: str) -> Tuple[str, str, str]:
    match = _LOCALITY_RE.search(part)
    if match:
        city = part[: match.start()].strip()
        return city, match.group(1).upper(), match.group(2)
    state_only = re.match(r"^(.*?)\s*\b([A-Z]{2})$", part)
    if state_only:
        return state_only.group(1).strip(), state_only.group(2), ""
    zip_only = _ZIP_ONLY_RE.match(part)
    if zip_only:
        return "", "", zip_only.group(1)
    return part, "", ""


def _parse_single_line(line: str) -> AddressComponents:
    zip_only = _ZIP_ONLY_RE.match(line)
    if zip_only:
        return AddressComponents(postal_code=zip_only.group(1))

    state = postal_code = None
    match = _STATE_ZIP_RE.search(line)
    if match:
        state, postal_code = match.group(1), match.group(2)
        line = line[: match.start()].strip()

    components = _parse_street(line, trailing_city=True)
    components.state = state
    components.postal_code = postal_code
    # "Austin TX 78704"
    _street_name_as_city(components)
    return components


def _street_name_as_city(components: AddressComponents) -> None:
    """Without a number, suffix or unit there is no street; the leftover text is the city."""
    if components.city or components.street_number or components.street_suffix or components.unit:
        return
    components.city = components.street_name
    components.street_name = None


def _parse_street(part: str, trailing_city: bool = False) -> AddressComponents:
    street = part.strip()
    if not street:
        return AddressComponents()

    unit = None
    unit_match = _UNIT_RE.search(street)
    if unit_match:
        unit = unit_match.group(1)
        street = street[: unit_match.start()].strip()

    number_match = _NUMBER_RE.match(street)
    number = number_match.group(1) if number_match else None
    remaining = street[number_match.end():] if number_match else street

    suffix = None
    city = None
    name = remaining
    # The last suffix word wins so "Oak Hill Dr" keeps "Oak Hill" as the name.
    suffix_matches = [m for m in _SUFFIX_RE.finditer(remaining) if m.start() > 0]
    if suffix_matches:
        last = suffix_matches[-1]
        suffix = last.group(1)
        tail = remaining[last.end():].strip()
        name = remaining[: last.start()]
        if trailing_city:
            city = tail or None
        else:
            name = f"{name} {tail}"
    name = re.sub(r"\s+", " ", name).strip()

    return AddressComponents(
        street_number=number,
        street_name=name or None,
        street_suffix=suffix,
        unit=unit,
        city=city,
    )


def _join(sep: str, *values: Optional[str]) -> str:
    return sep.join(v for v in values if v)


__all__ = ["AddressFallback", "NormalizedAddress", "STREET_SUFFIXES", "normalize_address", "parse_address"]
