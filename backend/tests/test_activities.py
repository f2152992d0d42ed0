"""
Activity catalogue and availability endpoint tests.
"""

import pytest
from httpx import AsyncClient

from tests.conftest import FUTURE_DATE, headers_for, make_activity, make_user


def activity_payload(vendor_id: int, **overrides) -> dict:
    payload = {
        "vendor_id": vendor_id,
        "title": "Pottery Workshop",
        "description": "Wheel throwing for beginners",
        "short_description": "Pottery class",
        "category": "arts",
        "city": "Riyadh",
        "base_price": 180.0,
        "max_participants": 8,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_activity(client: AsyncClient, vendor_headers, test_vendor):
    response = await client.post(
        "/api/v1/activities/", json=activity_payload(test_vendor.id), headers=vendor_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "pottery-workshop"
    assert data["max_participants"] == 8
    assert data["currency"] == "SAR"
    assert data["status"] == "active"


@pytest.mark.asyncio
async def test_create_activity_duplicate_title_gets_new_slug(
    client: AsyncClient, vendor_headers, test_vendor,
):
    await client.post("/api/v1/activities/", json=activity_payload(test_vendor.id), headers=vendor_headers)
    response = await client.post(
        "/api/v1/activities/", json=activity_payload(test_vendor.id), headers=vendor_headers,
    )
    assert response.json()["slug"] == "pottery-workshop-2"


@pytest.mark.asyncio
async def test_create_activity_not_owner(client: AsyncClient, auth_headers, test_vendor):
    response = await client.post(
        "/api/v1/activities/", json=activity_payload(test_vendor.id), headers=auth_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_activity_bad_capacity_range(client: AsyncClient, vendor_headers, test_vendor):
    response = await client.post(
        "/api/v1/activities/",
        json=activity_payload(test_vendor.id, min_participants=10, max_participants=4),
        headers=vendor_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_activities_hides_inactive(client: AsyncClient, test_activity, inactive_activity):
    response = await client.get("/api/v1/activities/")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["activities"][0]["id"] == test_activity.id
    assert data["cached"] is False


@pytest.mark.asyncio
async def test_list_activities_filters(client: AsyncClient, db_session, test_vendor, test_activity):
    await make_activity(
        db_session,
        test_vendor,
        title="Sunrise Yoga",
        description="Morning flow on the rooftop",
        category="wellness",
        city="Riyadh",
        base_price=60.0,
    )

    by_category = await client.get("/api/v1/activities/?category=wellness")
    assert [a["title"] for a in by_category.json()["activities"]] == ["Sunrise Yoga"]

    by_city = await client.get("/api/v1/activities/?city=jeddah")
    assert [a["title"] for a in by_city.json()["activities"]] == ["Coral Reef Dive"]

    by_price = await client.get("/api/v1/activities/?max_price=80")
    assert by_price.json()["total"] == 1

    by_search = await client.get("/api/v1/activities/?search=reef")
    assert by_search.json()["total"] == 1


@pytest.mark.asyncio
async def test_get_activity(client: AsyncClient, test_activity):
    response = await client.get(f"/api/v1/activities/{test_activity.id}")
    assert response.status_code == 200
    assert response.json()["title"] == "Coral Reef Dive"


@pytest.mark.asyncio
async def test_get_inactive_activity_is_not_found(client: AsyncClient, inactive_activity):
    response = await client.get(f"/api/v1/activities/{inactive_activity.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_activity(client: AsyncClient, vendor_headers, test_activity):
    response = await client.patch(
        f"/api/v1/activities/{test_activity.id}",
        json={"max_participants": 20, "base_price": 120.0},
        headers=vendor_headers,
    )
    assert response.status_code == 200
    assert response.json()["max_participants"] == 20
    assert response.json()["base_price"] == 120.0


@pytest.mark.asyncio
async def test_update_activity_min_above_max(client: AsyncClient, vendor_headers, test_activity):
    response = await client.patch(
        f"/api/v1/activities/{test_activity.id}",
        json={"min_participants": 12},
        headers=vendor_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["max_participants", "title", "base_price", "status"])
async def test_update_activity_rejects_null(client: AsyncClient, vendor_headers, test_activity, field):
    response = await client.patch(
        f"/api/v1/activities/{test_activity.id}", json={field: None}, headers=vendor_headers,
    )
    assert response.status_code == 422

    unchanged = await client.get(f"/api/v1/activities/{test_activity.id}")
    assert unchanged.json()["max_participants"] == 10
    assert unchanged.json()["title"] == "Coral Reef Dive"


@pytest.mark.asyncio
async def test_update_activity_can_clear_optional_fields(client: AsyncClient, vendor_headers, test_activity):
    response = await client.patch(
        f"/api/v1/activities/{test_activity.id}", json={"city": None}, headers=vendor_headers,
    )
    assert response.status_code == 200
    assert response.json()["city"] is None


@pytest.mark.asyncio
async def test_admin_can_update_any_activity(client: AsyncClient, admin_headers, test_activity):
    response = await client.patch(
        f"/api/v1/activities/{test_activity.id}", json={"status": "suspended"}, headers=admin_headers,
    )
    assert response.status_code == 200

    public = await client.get(f"/api/v1/activities/{test_activity.id}")
    assert public.status_code == 404


@pytest.mark.asyncio
async def test_update_activity_by_stranger(client: AsyncClient, db_session, test_activity):
    stranger = await make_user(db_session, "stranger@example.com", role="vendor")
    response = await client.patch(
        f"/api/v1/activities/{test_activity.id}", json={"title": "Hijacked"}, headers=headers_for(stranger),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_availability_counts_bookings(client: AsyncClient, auth_headers, test_activity):
    url = f"/api/v1/activities/{test_activity.id}/availability?date={FUTURE_DATE}"

    empty = await client.get(url)
    assert empty.status_code == 200
    assert empty.json()["booked"] == 0
    assert empty.json()["remaining"] == 10
    assert empty.json()["granularity"] == "date"

    await client.post("/api/v1/bookings/", json={
        "activity_id": test_activity.id,
        "booking_date": FUTURE_DATE.isoformat(),
        "participants_total": 7,
    }, headers=auth_headers)

    after = await client.get(url)
    assert after.json()["booked"] == 7
    assert after.json()["remaining"] == 3


@pytest.mark.asyncio
async def test_availability_requires_date(client: AsyncClient, test_activity):
    response = await client.get(f"/api/v1/activities/{test_activity.id}/availability")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_availability_inactive_activity(client: AsyncClient, inactive_activity):
    response = await client.get(
        f"/api/v1/activities/{inactive_activity.id}/availability?date={FUTURE_DATE}",
    )
    assert response.status_code == 404
