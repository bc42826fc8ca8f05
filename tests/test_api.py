from fastapi.testclient import TestClient

from mission_control import api
from mission_control.db.repliers_client import MLSConfigError, MLSSearchError
from mission_control.services.search_service import SearchService

client = TestClient(api.app)

SUBJECT = {"beds": 3, "baths": 2, "sqft": 1800, "latitude": 30.27, "longitude": -97.74, "property_type": "residential"}


class _StaticClient:
    def __init__(self, rows=None, fail=False):
        self.rows = rows or []
        self.fail = fail

    def search_listings(self, params):
        if self.fail:
            raise MLSSearchError("MLS search failed with HTTP 500", status_code=500)
        if dict(params).get("standardStatus") == "Active":
            return self.rows, len(self.rows)
        return [], 0


def _raise_config():
    raise MLSConfigError("Listings API not configured")


def test_health():
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_score_endpoint_returns_breakdown():
    prop = dict(SUBJECT, status="Closed")
    resp = client.post("/api/cma/score", json={"property": prop, "subject_property": SUBJECT})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["score"] == 265
    assert {a["factor"] for a in payload["adjustments"]} == {"distance", "beds", "baths", "sqft", "property_type", "status"}


def test_score_without_subject_is_base():
    resp = client.post("/api/cma/score", json={"property": {"beds": 3}})
    assert resp.json() == {"score": 100, "adjustments": []}


def test_rank_endpoint_orders_by_score():
    props = [{"address": "far", "latitude": 31.5, "longitude": -97.74}, dict(SUBJECT, address="near")]
    resp = client.post("/api/cma/rank", json={"properties": props, "subject_property": SUBJECT})
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert [item["property"]["address"] for item in items] == ["near", "far"]
    assert items[0]["score"] > items[1]["score"]


def test_normalize_endpoint():
    resp = client.get("/api/address/normalize", params={"address": "2402 Rockingham Cir, Austin, TX 78704"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["components"]["postal_code"] == "78704"
    assert payload["fallback_queries"][0] == "2402 Rockingham Cir, Austin, TX 78704"
    assert payload["fallback_queries"][-1] == "78704"


def test_stats_endpoint():
    props = [{"list_price": 300000, "sqft": 1500}, {"sold_price": 500000, "sqft": 2500}]
    resp = client.post("/api/cma/stats", json={"properties": props})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["average_price"] == 400000
    assert payload["average_price_per_sqft"] == 200


def test_search_endpoint_uses_service(monkeypatch):
    rows = [{"mlsNumber": "A1", "standardStatus": "Active", "address": {"streetNumber": "2402", "streetName": "Rockingham", "streetSuffix": "Cir", "zip": "78704"}}]
    service = SearchService(_StaticClient(rows))
    monkeypatch.setattr(api, "get_search_service", lambda: service)
    resp = client.post("/api/cma/search-properties", json={"search": "2402 Rockingham Cir, Austin, TX 78704"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["search_strategy"] == "exact_match"
    assert [item["mls_number"] for item in payload["listings"]] == ["A1"]


def test_search_endpoint_maps_upstream_failure_to_502(monkeypatch):
    service = SearchService(_StaticClient(fail=True))
    monkeypatch.setattr(api, "get_search_service", lambda: service)
    resp = client.post("/api/cma/search-properties", json={"city": "Austin"})
    assert resp.status_code == 502


def test_search_endpoint_without_api_key_is_503(monkeypatch):
    monkeypatch.setattr(api, "get_search_service", _raise_config)
    resp = client.post("/api/cma/search-properties", json={"city": "Austin"})
    assert resp.status_code == 503
