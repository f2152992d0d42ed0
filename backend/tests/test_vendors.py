"""
Vendor profile, moderation and booking ledger tests.
"""

import pytest
from httpx import AsyncClient

from tests.conftest import FUTURE_DATE

VENDOR_PAYLOAD = {
    "business_name": "Najd Climbing Club",
    "description": "Indoor bouldering and outdoor trips",
    "contact_email": "team@najdclimbing.sa",
    "contact_phone": "+966511111111",
    "city": "Riyadh",
}


@pytest.mark.asyncio
async def test_create_vendor_promotes_user(client: AsyncClient, auth_headers):
    response = await client.post("/api/v1/vendors/", json=VENDOR_PAYLOAD, headers=auth_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "najd-climbing-club"
    assert data["is_active"] is True
    assert data["is_verified"] is False

    me = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert me.json()["role"] == "vendor"


@pytest.mark.asyncio
async def test_create_vendor_requires_auth(client: AsyncClient):
    response = await client.post("/api/v1/vendors/", json=VENDOR_PAYLOAD)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_vendor(client: AsyncClient, test_vendor):
    response = await client.get(f"/api/v1/vendors/{test_vendor.id}")
    assert response.status_code == 200
    assert response.json()["business_name"] == "Red Sea Divers"

    missing = await client.get("/api/v1/vendors/9999")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_admin_updates_vendor_status(client: AsyncClient, admin_headers, test_vendor):
    response = await client.patch(
        f"/api/v1/vendors/{test_vendor.id}/status",
        json={"is_verified": True},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["is_verified"] is True
    assert response.json()["is_active"] is True


@pytest.mark.asyncio
async def test_non_admin_cannot_update_vendor_status(client: AsyncClient, vendor_headers, test_vendor):
    response = await client.patch(
        f"/api/v1/vendors/{test_vendor.id}/status",
        json={"is_active": False},
        headers=vendor_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_deactivated_vendor_blocks_bookings(
    client: AsyncClient, admin_headers, auth_headers, test_vendor, test_activity,
):
    await client.patch(
        f"/api/v1/vendors/{test_vendor.id}/status", json={"is_active": False}, headers=admin_headers,
    )
    response = await client.post("/api/v1/bookings/", json={
        "activity_id": test_activity.id,
        "booking_date": FUTURE_DATE.isoformat(),
        "participants_total": 1,
    }, headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_vendor_booking_ledger(
    client: AsyncClient, auth_headers, vendor_headers, test_vendor, test_activity,
):
    for participants in (2, 3):
        await client.post("/api/v1/bookings/", json={
            "activity_id": test_activity.id,
            "booking_date": FUTURE_DATE.isoformat(),
            "participants_total": participants,
        }, headers=auth_headers)

    response = await client.get(
        f"/api/v1/vendors/{test_vendor.id}/bookings?date={FUTURE_DATE}", headers=vendor_headers,
    )
    assert response.status_code == 200
    assert sorted(b["participants_total"] for b in response.json()) == [2, 3]

    forbidden = await client.get(f"/api/v1/vendors/{test_vendor.id}/bookings", headers=auth_headers)
    assert forbidden.status_code == 403
