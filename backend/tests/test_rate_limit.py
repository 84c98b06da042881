"""Rate limiting tests."""

import pytest
from httpx import AsyncClient

from vcnotebook.core.rate_limit import limiter


@pytest.fixture
def rate_limiting():
    limiter.reset()
    limiter.enabled = True
    yield limiter
    limiter.enabled = False
    limiter.reset()


@pytest.mark.asyncio
async def test_checkout_rate_limit(client: AsyncClient, rate_limiting):
    """Checkout creation is limited to 10/minute per client."""
    responses = []
    for _ in range(12):
        resp = await client.post("/api/checkout/create", json={"userEmail": "ada@example.com"})
        responses.append(resp.status_code)

    assert responses[:10] == [400] * 10
    assert 429 in responses, "Rate limiting should block excessive checkout attempts"


@pytest.mark.asyncio
async def test_health_not_rate_limited(client: AsyncClient, rate_limiting):
    for _ in range(20):
        resp = await client.get("/healthz")
        assert resp.status_code == 200
