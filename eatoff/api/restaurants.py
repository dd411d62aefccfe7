from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.core.config import settings
from eatoff.core.database import get_session
from eatoff.models.restaurant import Restaurant
from eatoff.schemas.restaurant import HeatMapPointOut, HeatMapResponse, RestaurantOut
from eatoff.services.heat_map import (
    HeatMapFilters,
    Location,
    build_heat_map,
    filter_options,
    recommend_for_guest,
)

router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])


async def _active_restaurants(session: AsyncSession) -> list[Restaurant]:
    result = await session.execute(
        select(Restaurant).where(Restaurant.is_active.is_(True)).order_by(Restaurant.id)
    )
    return list(result.scalars().all())


def _origin(lat: float | None, lng: float | None) -> Location:
    if lat is None or lng is None:
        return Location(settings.DEFAULT_LATITUDE, settings.DEFAULT_LONGITUDE)
    return Location(lat, lng)


@router.get("", response_model=list[RestaurantOut])
async def list_restaurants(session: AsyncSession = Depends(get_session)) -> list[RestaurantOut]:
    return [RestaurantOut.model_validate(item) for item in await _active_restaurants(session)]


@router.get("/heat-map", response_model=HeatMapResponse)
async def heat_map(
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius: float = Query(settings.HEAT_MAP_RADIUS_KM, gt=0, le=100),
    cuisine: str | None = None,
    price_range: str | None = None,
    min_intensity: int = Query(settings.HEAT_MAP_MIN_INTENSITY, ge=0, le=100),
    session: AsyncSession = Depends(get_session),
) -> HeatMapResponse:
    origin = _origin(lat, lng)
    restaurants = await _active_restaurants(session)
    filters = HeatMapFilters(
        radius_km=radius,
        cuisine=cuisine,
        price_range=price_range,
        min_intensity=min_intensity,
    )
    points = build_heat_map(restaurants, origin, filters)
    options = filter_options(restaurants)
    return HeatMapResponse(
        latitude=origin.latitude,
        longitude=origin.longitude,
        radius_km=radius,
        min_intensity=min_intensity,
        points=[HeatMapPointOut.model_validate(point) for point in points],
        cuisines=options["cuisines"],
        price_ranges=options["price_ranges"],
    )


@router.get("/recommendations", response_model=list[HeatMapPointOut])
async def guest_recommendations(
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius: float = Query(settings.HEAT_MAP_RADIUS_KM, gt=0, le=100),
    limit: int = Query(10, ge=1, le=50),
    session: AsyncSession = Depends(get_session),
) -> list[HeatMapPointOut]:
    points = recommend_for_guest(await _active_restaurants(session), _origin(lat, lng), radius, limit)
    return [HeatMapPointOut.model_validate(point) for point in points]
