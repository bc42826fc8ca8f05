import math

from mission_control.models.property import Property, SubjectProperty
from mission_control.services.stats_service import calculate_cma_stats, status_display_name


def _comps():
    return [
        Property(sold_price=400000, list_price=420000, sqft=2000, days_on_market=10, latitude=30.27, longitude=-97.74),
        Property(list_price=600000, sqft=2000, days_on_market=30, latitude=30.28, longitude=-97.74),
        Property(sold_price=500000, sqft=0, days_on_market=20),
    ]


def test_empty_set_is_all_zero():
    stats = calculate_cma_stats([])
    assert stats.count == 0
    assert stats.average_price == 0
    assert stats.median_price == 0
    assert stats.price_range.min == 0 and stats.price_range.max == 0
    assert stats.average_distance_miles is None


def test_price_statistics_use_sold_then_list_price():
    stats = calculate_cma_stats(_comps())
    assert stats.count == 3
    assert stats.average_price == 500000
    assert stats.median_price == 500000
    assert stats.price_range.min == 400000
    assert stats.price_range.max == 600000
    assert stats.average_days_on_market == 20


def test_price_per_sqft_counts_missing_sqft_as_zero():
    stats = calculate_cma_stats(_comps())
    assert math.isclose(stats.average_price_per_sqft, (200 + 300 + 0) / 3)


def test_median_of_even_count():
    comps = [Property(list_price=p) for p in (100, 400, 200, 300)]
    assert calculate_cma_stats(comps).median_price == 250


def test_average_distance_ignores_comps_without_coordinates():
    subject = SubjectProperty(latitude=30.27, longitude=-97.74)
    stats = calculate_cma_stats(_comps(), subject)
    assert 0.3 < stats.average_distance_miles < 0.4


def test_status_display_name():
    assert status_display_name("Active Under Contract") == "Under Contract"
    assert status_display_name("Closed") == "Closed"
    assert status_display_name(None) == ""
