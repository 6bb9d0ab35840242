import pytest

from tests.conftest import api_client
from tests.helpers import seed_potions


def _by_id(rows: list[dict]) -> dict:
    return {row["_id"]: row for row in rows}


@pytest.mark.asyncio
async def test_search_average_price_by_vendor():
    seed_potions(
        {"name": "A", "vendor_id": "v1", "price": 10},
        {"name": "B", "vendor_id": "v1", "price": 20},
        {"name": "C", "vendor_id": "v2", "price": 5},
    )
    async with api_client() as client:
        resp = await client.get("/analytics/search", params={"groupBy": "vendor_id", "metric": "avg", "field": "price"})
    assert resp.status_code == 200
    assert sorted(resp.json(), key=lambda r: r["_id"]) == [
        {"_id": "v1", "avg": 15},
        {"_id": "v2", "avg": 5},
    ]


@pytest.mark.asyncio
async def test_search_count_ignores_field_value():
    seed_potions(
        {"name": "A", "category": "healing"},
        {"name": "B", "category": "healing", "price": 4},
        {"name": "C", "category": "poison"},
    )
    async with api_client() as client:
        resp = await client.get("/analytics/search", params={"groupBy": "category", "metric": "count", "field": "price"})
    assert _by_id(resp.json()) == {
        "healing": {"_id": "healing", "count": 2},
        "poison": {"_id": "poison", "count": 1},
    }


@pytest.mark.asyncio
async def test_search_sum_over_rating_alias():
    seed_potions(
        {"name": "A", "category": "healing", "ratings": {"strength": 3}},
        {"name": "B", "category": "healing", "ratings": {"strength": 4}},
    )
    async with api_client() as client:
        resp = await client.get("/analytics/search", params={"groupBy": "categories", "metric": "sum", "field": "strength"})
    assert resp.json() == [{"_id": "healing", "sum": 7}]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"metric": "avg", "field": "price"},
        {"groupBy": "vendor_id", "field": "price"},
        {"groupBy": "vendor_id", "metric": "avg"},
        {"groupBy": "vendor_id", "metric": "max", "field": "price"},
        {"groupBy": "name", "metric": "avg", "field": "price"},
        {"groupBy": "vendor_id", "metric": "avg", "field": "$price"},
        {"groupBy": "vendor_id", "metric": "avg", "field": "price\"}, {\"$where"},
    ],
)
async def test_search_rejects_missing_or_unknown_parameters(params):
    async with api_client() as client:
        resp = await client.get("/analytics/search", params=params)
    assert resp.status_code == 400
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_average_score_reports():
    seed_potions(
        {"name": "A", "vendor_id": "v1", "category": "healing", "score": 6},
        {"name": "B", "vendor_id": "v1", "category": "poison", "score": 8},
        {"name": "C", "vendor_id": "v2", "category": "healing", "score": 10},
    )
    async with api_client() as client:
        by_vendor = (await client.get("/analytics/average_score_by_vendor")).json()
        by_category = (await client.get("/analytics/average_score_by_category")).json()
    assert _by_id(by_vendor) == {
        "v1": {"_id": "v1", "averageScore": 7},
        "v2": {"_id": "v2", "averageScore": 10},
    }
    assert _by_id(by_category) == {
        "healing": {"_id": "healing", "averageScore": 8},
        "poison": {"_id": "poison", "averageScore": 8},
    }


@pytest.mark.asyncio
async def test_reports_on_empty_collection():
    async with api_client() as client:
        for path in ("average_score_by_vendor", "average_score_by_category", "strength_flavor_ratio", "group"):
            resp = await client.get(f"/analytics/{path}")
            assert resp.status_code == 200
            assert resp.json() == []


@pytest.mark.asyncio
async def test_strength_flavor_ratio_tolerates_bad_denominators():
    ids = seed_potions(
        {"name": "Even", "ratings": {"strength": 6, "flavor": 3}},
        {"name": "Bland", "ratings": {"strength": 6, "flavor": 0}},
        {"name": "NoFlavor", "ratings": {"strength": 6}},
        {"name": "NoRatings"},
    )
    async with api_client() as client:
        resp = await client.get("/analytics/strength_flavor_ratio")
    assert resp.status_code == 200
    assert resp.json() == [
        {"_id": ids[0], "name": "Even", "strengthFlavorRatio": 2},
        {"_id": ids[1], "name": "Bland", "strengthFlavorRatio": None},
        {"_id": ids[2], "name": "NoFlavor", "strengthFlavorRatio": None},
        {"_id": ids[3], "name": "NoRatings", "strengthFlavorRatio": None},
    ]


@pytest.mark.asyncio
async def test_vendor_price_group():
    seed_potions(
        {"name": "A", "vendor_id": "v1", "price": 10},
        {"name": "B", "vendor_id": "v1", "price": 30},
        {"name": "C", "vendor_id": "v2", "price": 7},
    )
    async with api_client() as client:
        resp = await client.get("/analytics/group")
    assert _by_id(resp.json()) == {
        "v1": {"_id": "v1", "averagePrice": 20, "totalCount": 2},
        "v2": {"_id": "v2", "averagePrice": 7, "totalCount": 1},
    }
