"""Chore routes — lifecycle, proximity listing and authorization over HTTP.

Tests cover:
    - End-to-end: create, pay, discover nearby, claim, complete; second claim rejected
    - Proximity: chores 50 km away not listed by default; radius_km widens the search
    - 401 without/with bad token, 403 wrong role or foreign ownerId, 404 unknown id
    - GET by id: unpaid or taken chores only readable by requester and assignee
    - 400 on invalid body, lone lat, radius above the cap
    - Concurrent claims: exactly one provider wins
    - Rate limiting: 429 with Retry-After
"""

import asyncio

import pytest

from chore_match.config import Settings
from chore_match.core.rate_limit import RateLimiter
from chore_match.main import app
from chore_match.services.marketplace import build_marketplace, get_marketplace

CHORE = {
    "title": "Mow lawn", "description": "Front and back yard",
    "payment_amount": 20, "latitude": 40.0, "longitude": -73.0,
}


async def _create_paid(client, headers, **overrides) -> dict:
    res = await client.post("/api/chores", json={**CHORE, **overrides}, headers=headers)
    assert res.status_code == 201, res.text
    chore_id = res.json()["id"]
    res = await client.post(f"/api/chores/{chore_id}/pay", headers=headers)
    assert res.status_code == 200, res.text
    return res.json()


# --- Lifecycle ----------------------------------------------------------------

async def test_full_lifecycle(client, signup, market):
    requester_id, r_headers = await signup("requester", 40.0, -73.0)
    provider_id, p_headers = await signup("provider", 40.01, -73.01)
    _, q_headers = await signup("provider", 40.02, -73.0)

    res = await client.post("/api/chores", json=CHORE, headers=r_headers)
    assert res.status_code == 201
    chore = res.json()
    assert chore["status"] == "pending"
    assert chore["requester_id"] == requester_id
    assert chore["assigned_provider_id"] is None

    # pending chores are not visible to providers
    res = await client.get(
        "/api/chores", params={"lat": 40.01, "lon": -73.01}, headers=p_headers,
    )
    assert res.json() == []

    res = await client.post(f"/api/chores/{chore['id']}/pay", headers=r_headers)
    assert res.json()["status"] == "paid"

    res = await client.get(
        "/api/chores", params={"lat": 40.01, "lon": -73.01}, headers=p_headers,
    )
    assert [c["id"] for c in res.json()] == [chore["id"]]

    res = await client.post(f"/api/chores/{chore['id']}/assign", headers=p_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "assigned"
    assert res.json()["assigned_provider_id"] == provider_id

    res = await client.post(f"/api/chores/{chore['id']}/complete", headers=p_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "completed"
    assert res.json()["assigned_provider_id"] == provider_id

    res = await client.post(f"/api/chores/{chore['id']}/assign", headers=q_headers)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_TRANSITION"

    assert market.settlement.pending == [chore["id"]]


async def test_get_chore_by_id(client, signup):
    _, headers = await signup("requester")
    created = (await client.post("/api/chores", json=CHORE, headers=headers)).json()
    res = await client.get(f"/api/chores/{created['id']}", headers=headers)
    assert res.status_code == 200
    assert res.json()["title"] == "Mow lawn"


async def test_create_accepts_legacy_payment_field(client, signup):
    _, headers = await signup("requester")
    body = {"title": "Walk dog", "description": "30 minutes", "payment": 12.5}
    res = await client.post("/api/chores", json=body, headers=headers)
    assert res.status_code == 201
    assert res.json()["payment_amount"] == 12.5
    assert res.json()["latitude"] is None


@pytest.mark.parametrize("body", [
    {**CHORE, "payment_amount": 0},
    {**CHORE, "payment_amount": -5},
    {**CHORE, "title": "   "},
    {k: v for k, v in CHORE.items() if k != "description"},
    {**CHORE, "latitude": 91},
    {k: v for k, v in CHORE.items() if k != "longitude"},
])
async def test_create_invalid_body_is_400(client, signup, body):
    _, headers = await signup("requester")
    res = await client.post("/api/chores", json=body, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_complete_by_other_provider_is_403(client, signup):
    _, r_headers = await signup("requester")
    _, p_headers = await signup("provider")
    _, q_headers = await signup("provider")
    chore = await _create_paid(client, r_headers)
    await client.post(f"/api/chores/{chore['id']}/assign", headers=p_headers)

    res = await client.post(f"/api/chores/{chore['id']}/complete", headers=q_headers)
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


async def test_pay_twice_is_400(client, signup):
    _, headers = await signup("requester")
    chore = await _create_paid(client, headers)
    res = await client.post(f"/api/chores/{chore['id']}/pay", headers=headers)
    assert res.status_code == 400


# --- Proximity ----------------------------------------------------------------

async def test_distant_chores_excluded_by_default_radius(client, signup):
    _, r_headers = await signup("requester")
    _, p_headers = await signup("provider")
    near = await _create_paid(client, r_headers)
    # ~50 km north of the provider
    far = await _create_paid(client, r_headers, latitude=40.45, longitude=-73.0)

    params = {"lat": 40.0, "lon": -73.0}
    res = await client.get("/api/chores", params=params, headers=p_headers)
    assert [c["id"] for c in res.json()] == [near["id"]]

    res = await client.get(
        "/api/chores", params={**params, "radius_km": 60}, headers=p_headers,
    )
    assert {c["id"] for c in res.json()} == {near["id"], far["id"]}


async def test_listing_without_location_returns_all_paid(client, signup):
    _, r_headers = await signup("requester")
    _, p_headers = await signup("provider")
    paid = await _create_paid(client, r_headers, latitude=-33.9, longitude=151.2)
    await client.post("/api/chores", json=CHORE, headers=r_headers)

    res = await client.get("/api/chores", headers=p_headers)
    assert [c["id"] for c in res.json()] == [paid["id"]]


async def test_chores_without_coordinates_are_always_listed(client, signup):
    _, r_headers = await signup("requester")
    _, p_headers = await signup("provider")
    chore = await _create_paid(client, r_headers, latitude=None, longitude=None)

    res = await client.get(
        "/api/chores", params={"lat": 10.0, "lon": 10.0}, headers=p_headers,
    )
    assert [c["id"] for c in res.json()] == [chore["id"]]


async def test_lone_lat_is_400(client, signup):
    _, headers = await signup("provider")
    res = await client.get("/api/chores", params={"lat": 40.0}, headers=headers)
    assert res.status_code == 400


async def test_radius_above_cap_is_400(client, signup):
    _, headers = await signup("provider")
    res = await client.get(
        "/api/chores", params={"lat": 40.0, "lon": -73.0, "radius_km": 5000},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


# --- Owner listing ------------------------------------------------------------

async def test_owner_listing_returns_all_statuses(client, signup):
    requester_id, headers = await signup("requester")
    other_id, other_headers = await signup("requester")
    paid = await _create_paid(client, headers)
    pending = (await client.post("/api/chores", json=CHORE, headers=headers)).json()
    await client.post("/api/chores", json=CHORE, headers=other_headers)

    res = await client.get("/api/chores", params={"ownerId": requester_id}, headers=headers)
    assert [c["id"] for c in res.json()] == [paid["id"], pending["id"]]


async def test_foreign_owner_listing_is_403(client, signup):
    _, headers = await signup("requester")
    other_id, _ = await signup("requester")
    res = await client.get("/api/chores", params={"ownerId": other_id}, headers=headers)
    assert res.status_code == 403


# --- AuthN / AuthZ ------------------------------------------------------------

@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer not-a-real-token"}])
async def test_missing_or_bad_token_is_401(client, headers):
    for method, path in [
        ("get", "/api/chores"),
        ("post", "/api/chores"),
        ("get", "/api/chores/abc"),
        ("post", "/api/chores/abc/pay"),
        ("post", "/api/chores/abc/assign"),
        ("post", "/api/chores/abc/complete"),
    ]:
        kwargs = {"json": CHORE} if path == "/api/chores" and method == "post" else {}
        res = await getattr(client, method)(path, headers=headers, **kwargs)
        assert res.status_code == 401, path
        assert res.json()["error"]["code"] == "UNAUTHENTICATED"


async def test_provider_cannot_create(client, signup):
    _, headers = await signup("provider")
    res = await client.post("/api/chores", json=CHORE, headers=headers)
    assert res.status_code == 403


async def test_requester_cannot_claim(client, signup):
    _, headers = await signup("requester")
    chore = await _create_paid(client, headers)
    res = await client.post(f"/api/chores/{chore['id']}/assign", headers=headers)
    assert res.status_code == 403


async def test_non_owner_cannot_pay(client, signup):
    _, owner = await signup("requester")
    _, other = await signup("requester")
    chore = (await client.post("/api/chores", json=CHORE, headers=owner)).json()
    res = await client.post(f"/api/chores/{chore['id']}/pay", headers=other)
    assert res.status_code == 403


@pytest.mark.parametrize("action", ["pay", "assign", "complete"])
async def test_unknown_chore_is_404(client, signup, action):
    role = "requester" if action == "pay" else "provider"
    _, headers = await signup(role)
    res = await client.post(f"/api/chores/does-not-exist/{action}", headers=headers)
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_get_unknown_chore_is_404(client, signup):
    _, headers = await signup("provider")
    assert (await client.get("/api/chores/nope", headers=headers)).status_code == 404


async def test_pending_chore_hidden_from_other_accounts(client, signup):
    _, r_headers = await signup("requester")
    _, p_headers = await signup("provider")
    _, other_requester = await signup("requester")
    chore = (await client.post("/api/chores", json=CHORE, headers=r_headers)).json()

    for headers in (p_headers, other_requester):
        res = await client.get(f"/api/chores/{chore['id']}", headers=headers)
        assert res.status_code == 403
        assert res.json()["error"]["code"] == "FORBIDDEN"

    res = await client.get(f"/api/chores/{chore['id']}", headers=r_headers)
    assert res.status_code == 200


async def test_taken_chore_visible_only_to_requester_and_assignee(client, signup):
    _, r_headers = await signup("requester")
    _, p_headers = await signup("provider")
    _, q_headers = await signup("provider")
    chore = await _create_paid(client, r_headers)

    # paid chores are open to every provider
    res = await client.get(f"/api/chores/{chore['id']}", headers=q_headers)
    assert res.status_code == 200

    await client.post(f"/api/chores/{chore['id']}/assign", headers=p_headers)
    for headers, expected in ((r_headers, 200), (p_headers, 200), (q_headers, 403)):
        res = await client.get(f"/api/chores/{chore['id']}", headers=headers)
        assert res.status_code == expected


# --- Concurrency --------------------------------------------------------------

async def test_concurrent_claims_have_single_winner(client, signup, market):
    _, r_headers = await signup("requester")
    providers = [await signup("provider") for _ in range(8)]
    chore = await _create_paid(client, r_headers)

    responses = await asyncio.gather(*(
        client.post(f"/api/chores/{chore['id']}/assign", headers=headers)
        for _, headers in providers
    ))

    codes = sorted(r.status_code for r in responses)
    assert codes == [200] + [400] * 7
    winner = next(r.json() for r in responses if r.status_code == 200)
    assert winner["assigned_provider_id"] in {pid for pid, _ in providers}
    assert market.chores.get(chore["id"]).assigned_provider_id == winner["assigned_provider_id"]


# --- Rate limiting ------------------------------------------------------------

async def test_rate_limit_returns_429_with_retry_after(client):
    limited = build_marketplace(Settings(
        password_hash_iterations=1_000, rate_limit_enabled=False,
    ))
    limited.rate_limiter = RateLimiter(window_seconds=60, max_requests=2)
    app.dependency_overrides[get_marketplace] = lambda: limited

    codes = [(await client.get("/api/chores")).status_code for _ in range(2)]
    assert codes == [401, 401]

    res = await client.get("/api/chores")
    assert res.status_code == 429
    assert res.json()["error"]["code"] == "RATE_LIMITED"
    assert res.headers["Retry-After"] == "60"

    # health probe is exempt
    assert (await client.get("/api/health/")).status_code == 200
