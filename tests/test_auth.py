"""Tests for staff authentication."""

import pytest

from salonbook.services.auth import create_access_token, decode_access_token, hash_password, verify_password


def test_password_hashing():
    """Password hashing should be one-way and verifiable."""
    password = "supersecret123"
    hashed = hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed) is True
    assert verify_password("wrongpassword", hashed) is False


def test_long_passwords_are_truncated_consistently():
    password = "x" * 100
    assert verify_password(password, hash_password(password)) is True


def test_token_round_trip():
    token = create_access_token(data={"sub": "abc"})
    assert decode_access_token(token)["sub"] == "abc"
    assert decode_access_token("not-a-token") is None


@pytest.mark.asyncio
async def test_login_success(client, owner):
    resp = await client.post("/api/v1/auth/login", json={
        "email": "owner@studiobela.com",
        "password": "testpass123",
    })

    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["email"] == "owner@studiobela.com"
    assert decode_access_token(data["access_token"])["sub"] == str(owner.id)


@pytest.mark.asyncio
async def test_login_wrong_password(client, owner):
    resp = await client.post("/api/v1/auth/login", json={
        "email": "owner@studiobela.com",
        "password": "wrongpass",
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_user(client, db, owner):
    owner.is_active = False
    await db.commit()

    resp = await client.post("/api/v1/auth/login", json={
        "email": "owner@studiobela.com",
        "password": "testpass123",
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_protected_route_rejects_bad_token(client, salon):
    resp = await client.get(
        "/api/v1/appointments",
        params={"salon_id": str(salon.id)},
        headers={"Authorization": "Bearer garbage"},
    )
    assert resp.status_code == 401

    resp = await client.get("/api/v1/appointments", params={"salon_id": str(salon.id)})
    assert resp.status_code in (401, 403)
