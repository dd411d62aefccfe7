from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_serializer


class RestaurantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    cuisine: str
    price_range: str
    location: str | None = None
    address: str | None = None
    image_url: str | None = None
    rating: float | None = None
    review_count: int | None = None
    is_popular: bool = False
    latitude: float | None = None
    longitude: float | None = None


class HeatMapPointOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    restaurant_id: int
    name: str
    lat: float
    lng: float
    distance_km: float
    intensity: int
    bucket: str
    color: str
    cuisine: str | None = None
    price_range: str | None = None
    rating: float | None = None
    review_count: int | None = None
    is_popular: bool = False
    approximate_location: bool = False
    score: float

    @field_serializer("score")
    def round_score(self, value: float) -> float:
        return round(value, 4)


class HeatMapResponse(BaseModel):
    latitude: float
    longitude: float
    radius_km: float
    min_intensity: int
    points: list[HeatMapPointOut]
    cuisines: list[str]
    price_ranges: list[str]
