"""
Health and metrics endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_reports_database_and_admission(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"
    assert data["admission"] == {"strategy": "local", "capacity_granularity": "date"}
    assert data["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_metrics_exposes_booking_series(client: AsyncClient):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "ludus_booking_attempts" in response.text
