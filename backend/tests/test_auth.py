"""
Tests for authentication endpoints: registration, login and /me.
"""

import pytest
from httpx import AsyncClient

from ludus.core.security import create_access_token, decode_access_token, hash_password, verify_password


def test_password_hash_roundtrip():
    hashed = hash_password("securepassword123")
    assert hashed != "securepassword123"
    assert verify_password("securepassword123", hashed)
    assert not verify_password("wrongpassword", hashed)


def test_token_carries_subject():
    token = create_access_token(data={"sub": "42"})
    assert decode_access_token(token)["sub"] == "42"


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    """Successful registration returns user data."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "New@Example.com",
        "password": "securepassword123",
        "first_name": "Faisal",
        "last_name": "Harbi",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new@example.com"
    assert data["first_name"] == "Faisal"
    assert data["role"] == "user"
    assert "hashed_password" not in data  # Never expose password hash


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user):
    """Duplicate email returns 409."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "test@example.com",
        "password": "securepassword123",
        "first_name": "Other",
        "last_name": "Person",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    """Password under 8 chars returns 422."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "weak@example.com",
        "password": "short",
        "first_name": "Weak",
        "last_name": "Password",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_missing_name(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "email": "noname@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, test_user):
    """Valid credentials return JWT token."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    """Wrong password returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_nonexistent_email(client: AsyncClient):
    """Non-existent email returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "nobody@example.com",
        "password": "anypassword123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_returns_current_user(client: AsyncClient, test_user, auth_headers):
    response = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["id"] == test_user.id
    assert response.json()["last_name"] == "Saleh"


@pytest.mark.asyncio
async def test_me_rejects_bad_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_deactivated_user_is_forbidden(client: AsyncClient, db_session, test_user, auth_headers):
    test_user.is_active = False
    await db_session.commit()

    response = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 403
