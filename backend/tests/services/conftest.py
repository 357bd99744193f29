"""Service test fixtures — fresh Marketplace + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory Marketplace (no state shared between tests)
    - get_marketplace dependency overridden to return that instance
    - Password hashing uses a low iteration count so signups stay fast

Design Decisions:
    - httpx ASGITransport drives the app in-process; lifespan does not run, so the
      dependency override is the only Marketplace the routes ever see
    - signup fixture returns (account_id, auth headers) to keep scenario tests short
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from chore_match.config import Settings
from chore_match.main import app
from chore_match.services.marketplace import Marketplace, build_marketplace, get_marketplace

PASSWORD = "s3cret-pass"


@pytest.fixture
def settings() -> Settings:
    return Settings(password_hash_iterations=1_000, rate_limit_enabled=False)


@pytest.fixture
def market(settings) -> Marketplace:
    return build_marketplace(settings)


@pytest.fixture
async def client(market):
    """FastAPI test client bound to the per-test Marketplace."""
    app.dependency_overrides[get_marketplace] = lambda: market

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    """Register + login through the API. Returns (account_id, headers)."""

    async def _signup(role: str, latitude=None, longitude=None, email=None):
        email = email or f"{role}-{uuid4().hex[:8]}@example.com"
        body = {"name": role.title(), "email": email, "password": PASSWORD, "role": role}
        if latitude is not None:
            body.update(latitude=latitude, longitude=longitude)
        res = await client.post("/api/register", json=body)
        assert res.status_code == 201, res.text

        res = await client.post(
            "/api/login", json={"email": email, "password": PASSWORD, "role": role},
        )
        assert res.status_code == 200, res.text
        data = res.json()
        return data["account"]["id"], {"Authorization": f"Bearer {data['token']}"}

    return _signup
