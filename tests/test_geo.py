import math

from mission_control.services.geo import distance_miles, distances_from

AUSTIN = (30.2672, -97.7431)
ROUND_ROCK = (30.5083, -97.6789)


def test_identical_points_are_zero():
    assert distance_miles(*AUSTIN, *AUSTIN) == 0
    assert distance_miles(0.0, 0.0, 0.0, 0.0) == 0


def test_distance_is_symmetric():
    there = distance_miles(*AUSTIN, *ROUND_ROCK)
    back = distance_miles(*ROUND_ROCK, *AUSTIN)
    assert math.isclose(there, back)


def test_known_distance():
    # Austin to Round Rock is about 17 miles as the crow flies
    assert 16 < distance_miles(*AUSTIN, *ROUND_ROCK) < 18


def test_one_degree_of_latitude():
    assert math.isclose(distance_miles(0, 0, 1, 0), 3959 * math.pi / 180, rel_tol=1e-9)


def test_vectorised_matches_scalar_and_propagates_missing():
    result = distances_from(*AUSTIN, [ROUND_ROCK[0], None], [ROUND_ROCK[1], None])
    assert math.isclose(result[0], distance_miles(*AUSTIN, *ROUND_ROCK))
    assert math.isnan(result[1])
