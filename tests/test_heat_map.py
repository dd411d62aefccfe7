from decimal import Decimal
from types import SimpleNamespace

import pytest

from eatoff.services.heat_map import (
    HeatMapFilters,
    Location,
    build_heat_map,
    filter_options,
    haversine_km,
    heat_bucket,
    placeholder_coordinates,
    recommend_for_guest,
    recommendation_score,
    to_intensity,
)

ORIGIN = Location(44.4268, 26.1025)
# Roughly one kilometre of latitude.
KM_LAT = 1 / 111.195


def _restaurant(restaurant_id: int, km_north: float | None, **fields):
    latitude = None if km_north is None else ORIGIN.latitude + km_north * KM_LAT
    longitude = None if km_north is None else ORIGIN.longitude
    data = {
        "id": restaurant_id,
        "name": f"Restaurant {restaurant_id}",
        "cuisine": "Romanian",
        "price_range": "$$",
        "rating": 4.0,
        "review_count": 50,
        "is_popular": False,
        "latitude": latitude,
        "longitude": longitude,
    }
    data.update(fields)
    return SimpleNamespace(**data)


def test_popular_nearby_restaurant_scores_high() -> None:
    score = recommendation_score(4.8, True, 0.5, 5, 150)
    assert score == pytest.approx(0.963)
    intensity = to_intensity(score)
    assert intensity == 96
    assert heat_bucket(intensity) == ("high", "#ff4444")


def test_edge_of_radius_restaurant_is_minimal() -> None:
    score = recommendation_score(3.0, False, 4.9, 5, 5)
    assert score == pytest.approx(0.32)
    intensity = to_intensity(score)
    assert intensity == 32
    assert heat_bucket(intensity) == ("minimal", "#88cc88")


def test_bucket_thresholds() -> None:
    assert heat_bucket(80)[0] == "high"
    assert heat_bucket(79)[0] == "medium"
    assert heat_bucket(60)[0] == "medium"
    assert heat_bucket(40)[0] == "low"
    assert heat_bucket(39)[0] == "minimal"


def test_score_grows_with_rating_and_shrinks_with_distance() -> None:
    assert recommendation_score(4.5, False, 1, 5, 20) > recommendation_score(4.0, False, 1, 5, 20)
    assert recommendation_score(4.0, False, 1, 5, 20) > recommendation_score(4.0, False, 3, 5, 20)
    assert recommendation_score(4.0, True, 1, 5, 20) > recommendation_score(4.0, False, 1, 5, 20)


def test_review_score_saturates_at_one_hundred() -> None:
    assert recommendation_score(4.0, False, 1, 5, 100) == recommendation_score(4.0, False, 1, 5, 900)


def test_intensity_rounds_half_up() -> None:
    assert to_intensity(0.125) == 13
    assert to_intensity(0.0) == 0
    assert to_intensity(1.0) == 100
    # 0.285 * 100 is 28.499999999999996 in binary floating point.
    assert to_intensity(0.285) == 29


def test_haversine_one_degree_of_latitude() -> None:
    assert haversine_km(0, 0, 1, 0) == pytest.approx(111.195, rel=1e-3)
    assert haversine_km(ORIGIN.latitude, ORIGIN.longitude, ORIGIN.latitude, ORIGIN.longitude) == 0


def test_restaurants_outside_radius_are_dropped() -> None:
    restaurants = [_restaurant(1, 1.0), _restaurant(2, 12.0)]
    points = build_heat_map(restaurants, ORIGIN, HeatMapFilters(radius_km=5))
    assert [point.restaurant_id for point in points] == [1]
    assert points[0].distance_km == pytest.approx(1.0, abs=0.05)


def test_min_intensity_drops_weak_points() -> None:
    strong = _restaurant(1, 0.2, rating=4.9, review_count=200, is_popular=True)
    weak = _restaurant(2, 4.5, rating=2.0, review_count=1)
    points = build_heat_map([weak, strong], ORIGIN, HeatMapFilters(radius_km=5, min_intensity=70))
    assert [point.restaurant_id for point in points] == [1]
    assert all(point.intensity >= 70 for point in points)


def test_points_sorted_strongest_first_and_ties_keep_order() -> None:
    restaurants = [
        _restaurant(1, 2.0),
        _restaurant(2, 0.5, rating=4.9, is_popular=True),
        _restaurant(3, 2.0),
    ]
    points = build_heat_map(restaurants, ORIGIN, HeatMapFilters(radius_km=5))
    assert [point.restaurant_id for point in points] == [2, 1, 3]


def test_cuisine_and_price_filters() -> None:
    restaurants = [
        _restaurant(1, 1.0, cuisine="Italian", price_range="$$$"),
        _restaurant(2, 1.0, cuisine="Romanian", price_range="$"),
    ]
    italian = build_heat_map(restaurants, ORIGIN, HeatMapFilters(cuisine="Italian"))
    assert [point.restaurant_id for point in italian] == [1]
    cheap = build_heat_map(restaurants, ORIGIN, HeatMapFilters(price_range="$"))
    assert [point.restaurant_id for point in cheap] == [2]
    everything = build_heat_map(restaurants, ORIGIN, HeatMapFilters(cuisine="all", price_range="all"))
    assert len(everything) == 2


def test_missing_coordinates_are_stable_and_flagged() -> None:
    first = build_heat_map([_restaurant(7, None)], ORIGIN, HeatMapFilters(radius_km=10))
    second = build_heat_map([_restaurant(7, None)], ORIGIN, HeatMapFilters(radius_km=10))
    assert first == second
    assert first[0].approximate_location is True
    assert placeholder_coordinates(7, ORIGIN) != placeholder_coordinates(8, ORIGIN)
    lat, lng = placeholder_coordinates(7, ORIGIN)
    assert abs(lat - ORIGIN.latitude) <= 0.05
    assert abs(lng - ORIGIN.longitude) <= 0.05


def test_missing_rating_uses_default() -> None:
    points = build_heat_map(
        [
            _restaurant(1, 1.0, rating=None),
            _restaurant(2, 1.0, rating="not-a-number"),
            _restaurant(3, 1.0, rating="NaN"),
            _restaurant(4, 1.0, rating="inf"),
            _restaurant(5, 1.0, rating=Decimal("NaN")),
        ],
        ORIGIN,
        HeatMapFilters(),
    )
    assert len(points) == 5
    assert {point.rating for point in points} == {3.5}
    assert len({point.intensity for point in points}) == 1


def test_plain_dicts_are_accepted() -> None:
    row = vars(_restaurant(4, 1.0))
    points = build_heat_map([row], ORIGIN, HeatMapFilters())
    assert points[0].restaurant_id == 4


def test_guest_recommendations_are_limited() -> None:
    restaurants = [_restaurant(index, 0.5 * index) for index in range(1, 8)]
    points = recommend_for_guest(restaurants, ORIGIN, radius_km=5, limit=3)
    assert [point.restaurant_id for point in points] == [1, 2, 3]


def test_filter_options_are_sorted_and_unique() -> None:
    restaurants = [
        _restaurant(1, 1.0, cuisine="Italian"),
        _restaurant(2, 1.0, cuisine="Asian", price_range="$"),
        _restaurant(3, 1.0, cuisine="Italian", price_range=None),
    ]
    options = filter_options(restaurants)
    assert options == {"cuisines": ["Asian", "Italian"], "price_ranges": ["$", "$$"]}
