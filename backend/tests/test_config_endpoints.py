"""Configuration forwarding endpoint tests."""

import pytest
from httpx import AsyncClient

from vcnotebook.core.config import settings


@pytest.mark.asyncio
async def test_backend_config(client: AsyncClient, provider_settings):
    response = await client.get("/api/config")
    assert response.status_code == 200
    data = response.json()
    assert data["supabaseUrl"] == "https://project.supabase.co"
    assert data["supabaseAnonKey"] == "anon-key"
    # Privileged key stays on the server unless explicitly forwarded
    assert data["supabaseServiceKey"] is None


@pytest.mark.asyncio
async def test_backend_config_forwards_service_key_when_enabled(
    client: AsyncClient, provider_settings, monkeypatch
):
    monkeypatch.setattr(settings, "FORWARD_SERVICE_ROLE_KEY", True)
    response = await client.get("/api/config")
    assert response.json()["supabaseServiceKey"] == "service-role-key"


@pytest.mark.asyncio
async def test_backend_config_unset(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", None)
    monkeypatch.setattr(settings, "SUPABASE_ANON_KEY", None)
    response = await client.get("/api/config")
    assert response.status_code == 200
    assert response.json()["supabaseUrl"] is None


@pytest.mark.asyncio
async def test_identity_config(client: AsyncClient, provider_settings):
    response = await client.get("/api/firebase-config")
    assert response.status_code == 200
    assert response.json() == {
        "apiKey": "AIzaTestKey1234567890",
        "authDomain": "vcnotebook-test.firebaseapp.com",
        "projectId": "vcnotebook-test",
        "storageBucket": "vcnotebook-test.appspot.com",
        "messagingSenderId": "1234567890",
        "appId": "1:1234567890:web:abcdef",
    }


@pytest.mark.asyncio
async def test_analytics_config_enabled(client: AsyncClient, provider_settings):
    response = await client.get("/api/ga-config")
    assert response.json() == {"measurementId": "G-TEST123", "enabled": True}


@pytest.mark.asyncio
async def test_analytics_config_disabled(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "GA_MEASUREMENT_ID", None)
    response = await client.get("/api/ga-config")
    assert response.json() == {"measurementId": None, "enabled": False}
