"""Tests for the hosted backend gateway request contract."""

import json

import httpx
import pytest

from vcnotebook.client.backend import BackendError, BackendUnavailableError, HostedBackend


def gateway(handler, access_token=None):
    return HostedBackend(
        "https://project.supabase.co/",
        "anon-key",
        access_token=access_token,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_select_builds_query():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json=[{"id": 1}])

    backend = gateway(handler)
    rows = await backend.select("notes", filters={"user_id": "uid-1"}, order="updated_at")
    await backend.close()

    request = seen["request"]
    assert rows == [{"id": 1}]
    assert request.url.path == "/rest/v1/notes"
    assert request.url.params["user_id"] == "eq.uid-1"
    assert request.url.params["order"] == "updated_at.desc"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_access_token_used_for_authorization():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json=[])

    backend = gateway(handler, access_token="user-jwt")
    await backend.select("notes")
    await backend.close()
    assert seen["auth"] == "Bearer user-jwt"


@pytest.mark.asyncio
async def test_insert_asks_for_representation():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(201, json=json.loads(request.content))

    backend = gateway(handler)
    rows = await backend.insert("file_attachments", [{"a": 1}, {"a": 2}])
    await backend.close()

    assert rows == [{"a": 1}, {"a": 2}]
    assert seen["request"].headers["prefer"] == "return=representation"


@pytest.mark.asyncio
async def test_error_carries_status_and_code():
    def handler(request):
        return httpx.Response(403, json={"message": "new row violates row-level security policy", "code": "42501"})

    backend = gateway(handler)
    with pytest.raises(BackendError) as exc_info:
        await backend.insert("notes", [{}])
    await backend.close()

    assert exc_info.value.status_code == 403
    assert exc_info.value.code == "42501"
    assert "row-level security" in exc_info.value.message
    assert exc_info.value.is_offline_trigger


@pytest.mark.asyncio
async def test_transport_error_is_unavailable():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    backend = gateway(handler)
    with pytest.raises(BackendUnavailableError):
        await backend.delete("notes", filters={"id": "1"})
    await backend.close()


@pytest.mark.asyncio
async def test_storage_calls():
    calls = []

    def handler(request):
        calls.append(request)
        if "/object/sign/" in request.url.path:
            return httpx.Response(200, json={"signedURL": "/object/sign/note-attachments/u/f.png?token=t"})
        return httpx.Response(200, json={})

    backend = gateway(handler)
    await backend.upload("note-attachments", "u/f.png", b"img", "image/png")
    await backend.remove("note-attachments", ["u/f.png"])
    url = await backend.create_signed_url("note-attachments", "u/f.png", 3600)
    await backend.close()

    upload, remove, sign = calls
    assert upload.url.path == "/storage/v1/object/note-attachments/u/f.png"
    assert upload.headers["content-type"] == "image/png"
    assert upload.content == b"img"
    assert remove.method == "DELETE"
    assert json.loads(remove.content) == {"prefixes": ["u/f.png"]}
    assert json.loads(sign.content) == {"expiresIn": 3600}
    assert url == "https://project.supabase.co/storage/v1/object/sign/note-attachments/u/f.png?token=t"
