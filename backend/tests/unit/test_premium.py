"""Tests for premium status and checkout redirect."""

import pytest

from vcnotebook.client.premium import PremiumController


@pytest.fixture
def premium(session, notifier):
    return PremiumController(session.proxy, notifier)


@pytest.mark.asyncio
async def test_refresh_premium(premium, proxy):
    proxy.subscription = {
        "is_premium": True,
        "subscription_status": "active",
        "updated_at": "2026-05-01T12:00:00+00:00",
    }
    assert await premium.refresh("uid-1") is True
    assert premium.subscription_status == "active"
    assert premium.updated_at.year == 2026
    request = proxy.requests[-1]
    assert request.url.params["userId"] == "uid-1"


@pytest.mark.asyncio
async def test_refresh_failure_reads_as_free(premium, proxy, notifier):
    premium.is_premium = True
    proxy.failing["/api/user/subscription-status"] = 500

    assert await premium.refresh("uid-1") is False
    assert premium.is_premium is False
    assert notifier.last.text == "Could not check premium status"


@pytest.mark.asyncio
async def test_start_checkout_returns_url(premium, proxy):
    url = await premium.start_checkout("ada@example.com", "uid-1")
    assert url == "https://checkout.dodopayments.com/pay/abc"
    assert proxy.requests[-1].url.path == "/api/checkout/create"


@pytest.mark.asyncio
async def test_start_checkout_server_error(premium, proxy, notifier):
    proxy.failing["/api/checkout/create"] = 500
    assert await premium.start_checkout("ada@example.com", "uid-1") is None
    assert notifier.last.text == "Could not start checkout: Proxy failure"


@pytest.mark.asyncio
async def test_start_checkout_without_url(premium, proxy, notifier):
    proxy.checkout = {"checkout_url": None}
    assert await premium.start_checkout("ada@example.com", "uid-1") is None
    assert notifier.last.level.value == "error"


@pytest.mark.asyncio
async def test_start_checkout_requires_identity(premium, proxy, notifier):
    assert await premium.start_checkout("", "uid-1") is None
    assert proxy.requests == []
