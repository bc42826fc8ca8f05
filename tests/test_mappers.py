from datetime import datetime

from mission_control.db.mappers import extract_photos, map_listing_row


def _listing() -> dict:
    return {
        "mlsNumber": "ACT1234",
        "listPrice": 650000,
        "soldPrice": 640000,
        "standardStatus": "Closed",
        "soldDate": "2026-09-01T00:00:00Z",
        "address": {
            "streetNumber": "2402",
            "streetName": "Rockingham",
            "streetSuffix": "Cir",
            "city": "Austin",
            "state": "TX",
            "zip": "78704",
            "neighborhood": "Barton Hills",
        },
        "details": {"numBedrooms": 3, "numBathrooms": "2", "sqft": "1,800", "style": "Single Family", "yearBuilt": "1978"},
        "map": {"latitude": "30.2511", "longitude": "-97.7782"},
        "lotSizeArea": 8712,
        "daysOnMarket": 14,
        "images": ["IMG-ACT1234_1.jpg", {"url": "https://cdn.example.com/2.jpg"}, None],
    }


def test_map_listing_row_fields():
    prop = map_listing_row(_listing())
    assert prop.address == "2402 Rockingham Cir, Austin, TX 78704"
    assert prop.mls_number == "ACT1234"
    assert prop.beds == 3
    assert prop.baths == 2
    assert prop.property_type == "Single Family"
    assert prop.status == "Closed"
    assert prop.sold_price == 640000
    assert prop.latitude == 30.2511
    assert prop.longitude == -97.7782
    assert prop.year_built == 1978
    assert prop.days_on_market == 14
    assert prop.subdivision == "Barton Hills"
    assert round(prop.lot_size_acres, 2) == 0.2
    assert isinstance(prop.sold_date, datetime)
    assert prop.components.street_line == "2402 Rockingham Cir"


def test_unparseable_numbers_become_none():
    # "1,800" is not a number the coercion helpers accept
    prop = map_listing_row(_listing())
    assert prop.sqft is None


def test_sparse_listing_defaults():
    prop = map_listing_row({"address": {"city": "Austin"}})
    assert prop.address == "Austin, TX"
    assert prop.state == "TX"
    assert prop.latitude is None
    assert prop.beds is None
    assert prop.sold_date is None
    assert prop.photos == []


def test_photos_prefer_images_then_single_fields():
    assert extract_photos(_listing()) == [
        "https://cdn.repliers.io/IMG-ACT1234_1.jpg",
        "https://cdn.example.com/2.jpg",
    ]
    assert extract_photos({"images": [], "coverPhoto": "//cdn.example.com/c.jpg"}) == ["https://cdn.example.com/c.jpg"]
    assert extract_photos({}) == []
