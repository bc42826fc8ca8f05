from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from ..models.property import AddressComponents, Property
from ..utils.coerce import first_present, to_float, to_int, to_str

DEFAULT_STATE = "TX"
SQFT_PER_ACRE = 43560

_PHOTO_FIELDS = ("photo", "imageUrl", "primaryPhoto", "coverPhoto")
REPLIERS_CDN = "https://cdn.repliers.io/"


def _photo_url(img: Any) -> Optional[str]:
    if not img:
        return None
    if isinstance(img, dict):
        img = img.get("url") or img.get("src") or img.get("href")
    if not isinstance(img, str) or not img.strip():
        return None
    path = img.strip()
    if path.startswith(("http://", "https://")):
        return path
    if path.startswith("//"):
        return f"https:{path}"
    return REPLIERS_CDN + path.lstrip("/")


def extract_photos(r: Dict[str, Any]) -> List[str]:
    """Photos from a listing: ``images`` first, then ``photos``, then single fields."""

    for key in ("images", "photos"):
        values = r.get(key)
        if isinstance(values, list):
            urls = [u for u in (_photo_url(v) for v in values) if u]
            if urls:
                return urls
    for key in _PHOTO_FIELDS:
        url = _photo_url(r.get(key))
        if url:
            return [url]
    return []


def _parse_date(v) -> Optional[Union[datetime, date]]:
    text = to_str(v)
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def map_listing_row(r: Dict[str, Any]) -> Property:
    address = r.get("address") or {}
    details = r.get("details") or {}
    geo = r.get("map") or {}
    lot = r.get("lot") or {}
    timestamps = r.get("timestamps") or {}

    street_number = to_str(address.get("streetNumber"))
    street_name = to_str(address.get("streetName"))
    street_suffix = to_str(address.get("streetSuffix"))
    unit = to_str(address.get("unitNumber"))
    city = to_str(address.get("city"))
    state = to_str(address.get("state")) or DEFAULT_STATE
    postal_code = to_str(first_present(address.get("zip"), address.get("postalCode")))

    street = " ".join(p for p in (street_number, street_name, street_suffix) if p)
    locality = f"{state} {postal_code}".strip()
    full_address = ", ".join(p for p in (street, city, locality) if p)

    lot_acres = to_float(lot.get("acres"))
    if lot_acres is None:
        lot_area = to_float(r.get("lotSizeArea"))
        lot_acres = lot_area / SQFT_PER_ACRE if lot_area else None

    return Property(
        address=full_address,
        components=AddressComponents(
            street_number=street_number or None,
            street_name=street_name or None,
            street_suffix=street_suffix or None,
            unit=unit or None,
            city=city or None,
            state=state or None,
            postal_code=postal_code or None,
        ),
        latitude=to_float(first_present(geo.get("latitude"), address.get("latitude"))),
        longitude=to_float(first_present(geo.get("longitude"), address.get("longitude"))),
        beds=to_float(first_present(details.get("numBedrooms"), r.get("bedroomsTotal"))),
        baths=to_float(first_present(details.get("numBathrooms"), r.get("bathroomsTotal"))),
        sqft=to_float(first_present(details.get("sqft"), r.get("livingArea"))),
        property_type=to_str(first_present(details.get("style"), details.get("propertyType"), r.get("propertyType"))) or None,
        status=to_str(first_present(r.get("standardStatus"), r.get("status"))) or None,
        sold_date=_parse_date(first_present(r.get("soldDate"), r.get("closeDate"))),
        list_price=to_float(r.get("listPrice")),
        sold_price=to_float(first_present(r.get("soldPrice"), r.get("closePrice"))),
        mls_number=to_str(first_present(r.get("mlsNumber"), r.get("listingId"))) or None,
        city=city or None,
        state=state or None,
        zip=postal_code or None,
        lot_size_acres=lot_acres,
        year_built=to_int(details.get("yearBuilt")),
        list_date=to_str(r.get("listDate")) or None,
        days_on_market=to_int(first_present(r.get("daysOnMarket"), r.get("dom"), timestamps.get("dom"))),
        photos=extract_photos(r),
        subdivision=to_str(first_present(address.get("neighborhood"), address.get("area"))) or None,
    )
