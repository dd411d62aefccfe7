from __future__ import annotations

import math
import random
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

EARTH_RADIUS_KM = 6371.0
# Restaurants without stored coordinates are placed within this many degrees of the user.
PLACEHOLDER_JITTER_DEG = 0.05

DEFAULT_RATING = 3.5
DEFAULT_REVIEW_COUNT = 10
REVIEW_SATURATION = 100

WEIGHT_RATING = 0.30
WEIGHT_POPULARITY = 0.25
WEIGHT_PROXIMITY = 0.25
WEIGHT_REVIEWS = 0.20

# (minimum intensity, bucket, color), highest first.
HEAT_BUCKETS = (
    (80, "high", "#ff4444"),
    (60, "medium", "#ff8800"),
    (40, "low", "#ffcc00"),
    (0, "minimal", "#88cc88"),
)

ALL = "all"


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class HeatMapFilters:
    radius_km: float = 5.0
    cuisine: str | None = None
    price_range: str | None = None
    min_intensity: int = 0


@dataclass(frozen=True)
class HeatMapPoint:
    restaurant_id: int
    name: str
    lat: float
    lng: float
    distance_km: float
    score: float
    intensity: int
    bucket: str
    color: str
    cuisine: str | None = None
    price_range: str | None = None
    rating: float | None = None
    review_count: int | None = None
    is_popular: bool = False
    approximate_location: bool = False


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def placeholder_coordinates(restaurant_id: int, origin: Location) -> tuple[float, float]:
    """Approximate position for an ungeocoded restaurant, stable per restaurant id."""
    rng = random.Random(restaurant_id)
    lat = origin.latitude + (rng.random() - 0.5) * 2 * PLACEHOLDER_JITTER_DEG
    lng = origin.longitude + (rng.random() - 0.5) * 2 * PLACEHOLDER_JITTER_DEG
    return lat, lng


def parse_rating(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return DEFAULT_RATING
    try:
        if isinstance(value, (int, float, Decimal)):
            rating = float(value)
        else:
            rating = float(str(value).strip())
    except ValueError:
        return DEFAULT_RATING
    # NaN and infinities count as unparseable.
    return rating if math.isfinite(rating) else DEFAULT_RATING


def recommendation_score(
    rating: float,
    is_popular: bool,
    distance_km: float,
    radius_km: float,
    review_count: int | None,
) -> float:
    reviews = DEFAULT_REVIEW_COUNT if review_count is None else review_count
    rating_score = rating / 5
    popularity_score = 1.0 if is_popular else 0.5
    proximity_score = max(0.0, 1 - distance_km / radius_km) if radius_km > 0 else 0.0
    review_score = min(1.0, max(reviews, 0) / REVIEW_SATURATION)
    return (
        WEIGHT_RATING * rating_score
        + WEIGHT_POPULARITY * popularity_score
        + WEIGHT_PROXIMITY * proximity_score
        + WEIGHT_REVIEWS * review_score
    )


def to_intensity(score: float) -> int:
    # Half-up rounding; round() would send 0.5 to the even neighbour. The first
    # round() absorbs float noise such as 0.285 * 100 == 28.499999999999996.
    return int(math.floor(round(score * 100, 9) + 0.5))


def heat_bucket(intensity: float) -> tuple[str, str]:
    for threshold, bucket, color in HEAT_BUCKETS:
        if intensity >= threshold:
            return bucket, color
    return HEAT_BUCKETS[-1][1], HEAT_BUCKETS[-1][2]


def _field(restaurant: Any, name: str, default: Any = None) -> Any:
    if isinstance(restaurant, dict):
        return restaurant.get(name, default)
    return getattr(restaurant, name, default)


def score_restaurant(restaurant: Any, origin: Location, radius_km: float) -> HeatMapPoint:
    restaurant_id = int(_field(restaurant, "id"))
    lat = _field(restaurant, "latitude")
    lng = _field(restaurant, "longitude")
    approximate = lat is None or lng is None
    if approximate:
        lat, lng = placeholder_coordinates(restaurant_id, origin)

    distance = haversine_km(origin.latitude, origin.longitude, lat, lng)
    rating = parse_rating(_field(restaurant, "rating"))
    review_count = _field(restaurant, "review_count")
    is_popular = bool(_field(restaurant, "is_popular", False))
    score = recommendation_score(rating, is_popular, distance, radius_km, review_count)
    intensity = to_intensity(score)
    bucket, color = heat_bucket(intensity)
    return HeatMapPoint(
        restaurant_id=restaurant_id,
        name=_field(restaurant, "name", ""),
        lat=lat,
        lng=lng,
        distance_km=round(distance, 1),
        score=score,
        intensity=intensity,
        bucket=bucket,
        color=color,
        cuisine=_field(restaurant, "cuisine"),
        price_range=_field(restaurant, "price_range"),
        rating=rating,
        review_count=review_count,
        is_popular=is_popular,
        approximate_location=approximate,
    )


def _matches(selected: str | None, value: str | None) -> bool:
    return not selected or selected == ALL or selected == value


def build_heat_map(
    restaurants: Iterable[Any],
    origin: Location,
    filters: HeatMapFilters,
) -> list[HeatMapPoint]:
    """Scored points inside the radius that pass every filter, strongest first."""
    points = []
    for restaurant in restaurants:
        point = score_restaurant(restaurant, origin, filters.radius_km)
        exact_distance = haversine_km(origin.latitude, origin.longitude, point.lat, point.lng)
        if exact_distance > filters.radius_km:
            continue
        if not _matches(filters.cuisine, point.cuisine):
            continue
        if not _matches(filters.price_range, point.price_range):
            continue
        if point.intensity < filters.min_intensity:
            continue
        points.append(point)
    # sorted() is stable, so equal intensities keep input order.
    return sorted(points, key=lambda point: point.intensity, reverse=True)


def recommend_for_guest(
    restaurants: Iterable[Any],
    origin: Location,
    radius_km: float,
    limit: int = 10,
) -> list[HeatMapPoint]:
    points = build_heat_map(restaurants, origin, HeatMapFilters(radius_km=radius_km))
    return points[: max(limit, 0)]


def filter_options(restaurants: Iterable[Any]) -> dict[str, list[str]]:
    items = list(restaurants)
    cuisines = {_field(item, "cuisine") for item in items}
    price_ranges = {_field(item, "price_range") for item in items}
    return {
        "cuisines": sorted(value for value in cuisines if value),
        "price_ranges": sorted(value for value in price_ranges if value),
    }
