import asyncio
from decimal import Decimal

from eatoff.core.config import settings
from eatoff.models.knowledge_article import KnowledgeArticle
from eatoff.models.restaurant import Restaurant

KM_LAT = 1 / 111.195


async def _seed_articles(factory) -> tuple[int, int]:
    async with factory() as session:
        public = KnowledgeArticle(
            title="How vouchers work", content="Buy, then redeem.", category="vouchers"
        )
        internal = KnowledgeArticle(
            title="Agent macro", content="Internal only.", category="internal", is_public=False
        )
        session.add_all([public, internal])
        await session.commit()
        return public.id, internal.id


def test_help_center_lists_public_articles_only(api_client) -> None:
    async def scenario():
        async with api_client() as (client, factory):
            public_id, internal_id = await _seed_articles(factory)
            listed = await client.get("/api/help/articles")
            filtered = await client.get("/api/help/articles", params={"category": "payments"})
            hidden = await client.get(f"/api/help/articles/{internal_id}")
            return public_id, listed.json(), filtered.json(), hidden

    public_id, listed, filtered, hidden = asyncio.run(scenario())
    assert [item["id"] for item in listed] == [public_id]
    assert filtered == []
    assert hidden.status_code == 404


def test_article_views_and_feedback_are_counted(api_client) -> None:
    async def scenario():
        async with api_client() as (client, factory):
            public_id, _ = await _seed_articles(factory)
            await client.get(f"/api/help/articles/{public_id}")
            await client.post(f"/api/help/articles/{public_id}/feedback", json={"helpful": True})
            await client.post(f"/api/help/articles/{public_id}/feedback", json={"helpful": False})
            async with factory() as session:
                article = await session.get(KnowledgeArticle, public_id)
                return article.view_count, article.helpful_count, article.not_helpful_count

    assert asyncio.run(scenario()) == (1, 1, 1)


async def _seed_restaurants(factory) -> None:
    origin_lat, origin_lng = settings.DEFAULT_LATITUDE, settings.DEFAULT_LONGITUDE
    async with factory() as session:
        session.add_all(
            [
                Restaurant(
                    name="Caru' cu Bere",
                    cuisine="Romanian",
                    price_range="$$",
                    rating=Decimal("4.8"),
                    review_count=150,
                    is_popular=True,
                    latitude=origin_lat + 0.5 * KM_LAT,
                    longitude=origin_lng,
                ),
                Restaurant(
                    name="Far Away Bistro",
                    cuisine="French",
                    price_range="$$$",
                    rating=Decimal("4.9"),
                    review_count=300,
                    is_popular=True,
                    latitude=origin_lat + 20 * KM_LAT,
                    longitude=origin_lng,
                ),
                Restaurant(
                    name="Corner Shawarma",
                    cuisine="Lebanese",
                    price_range="$",
                    rating=Decimal("3.0"),
                    review_count=5,
                    latitude=origin_lat + 4.9 * KM_LAT,
                    longitude=origin_lng,
                ),
                Restaurant(
                    name="Closed Place",
                    cuisine="Romanian",
                    price_range="$$",
                    is_active=False,
                    latitude=origin_lat,
                    longitude=origin_lng,
                ),
            ]
        )
        await session.commit()


def test_heat_map_defaults_to_bucharest_and_strong_points(api_client) -> None:
    async def scenario():
        async with api_client() as (client, factory):
            await _seed_restaurants(factory)
            return (await client.get("/api/restaurants/heat-map")).json()

    body = asyncio.run(scenario())
    assert body["latitude"] == settings.DEFAULT_LATITUDE
    assert body["min_intensity"] == settings.HEAT_MAP_MIN_INTENSITY
    assert [point["name"] for point in body["points"]] == ["Caru' cu Bere"]
    point = body["points"][0]
    assert point["intensity"] == 96
    assert point["bucket"] == "high"
    assert point["color"] == "#ff4444"
    assert point["distance_km"] == 0.5
    assert body["cuisines"] == ["French", "Lebanese", "Romanian"]


def test_heat_map_without_intensity_floor_keeps_weak_points(api_client) -> None:
    async def scenario():
        async with api_client() as (client, factory):
            await _seed_restaurants(factory)
            response = await client.get(
                "/api/restaurants/heat-map", params={"min_intensity": 0, "radius": 5}
            )
            return response.json()["points"]

    points = asyncio.run(scenario())
    assert [point["name"] for point in points] == ["Caru' cu Bere", "Corner Shawarma"]
    assert points[1]["intensity"] == 32
    assert points[1]["bucket"] == "minimal"


def test_recommendations_and_listing(api_client) -> None:
    async def scenario():
        async with api_client() as (client, factory):
            await _seed_restaurants(factory)
            recommendations = await client.get(
                "/api/restaurants/recommendations", params={"radius": 50, "limit": 2}
            )
            listing = await client.get("/api/restaurants")
            return recommendations.json(), listing.json()

    recommendations, listing = asyncio.run(scenario())
    assert len(recommendations) == 2
    assert recommendations[0]["name"] == "Caru' cu Bere"
    assert "Closed Place" not in [item["name"] for item in listing]
    assert len(listing) == 3


def test_health(api_client) -> None:
    async def scenario():
        async with api_client() as (client, _factory):
            return await client.get("/health", headers={"X-Request-ID": "req-123"})

    response = asyncio.run(scenario())
    assert response.json() == {"status": "ok"}
    assert response.headers["x-request-id"] == "req-123"
