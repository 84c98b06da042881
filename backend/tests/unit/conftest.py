"""Fixtures for client-core unit tests: in-process fakes of the hosted backend and proxy."""

import itertools
import json
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

# Set required env vars before any app imports
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import httpx
import pytest
import pytest_asyncio

from vcnotebook.client.app import NotesApp
from vcnotebook.client.local_store import LocalNoteStore
from vcnotebook.client.messages import Notifier
from vcnotebook.client.proxy import ProxyClient
from vcnotebook.client.session import AppUser, ClientSession
from vcnotebook.core.config import ClientSettings

SUPABASE_URL = "https://project.supabase.co"
PROXY_URL = "http://proxy.test"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FakeSupabase:
    """Serves the REST and storage routes the client uses, from memory."""

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {"notes": [], "file_attachments": []}
        self.objects: Dict[str, bytes] = {}
        self.requests: List[httpx.Request] = []
        self.failures: List[tuple] = []
        self.reverse_inserts = False
        self._ids = itertools.count(1)

    def fail(self, method: Optional[str] = None, path: str = "", status: Optional[int] = None):
        """Make matching requests fail: with `status`, or unreachable when None."""
        self.failures.append((method, path, status))

    def heal(self):
        self.failures = []

    def requests_to(self, method: str, fragment: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and fragment in r.url.path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        for method, fragment, status in self.failures:
            if (method is None or method == request.method) and fragment in path:
                if status is None:
                    raise httpx.ConnectError("connection refused", request=request)
                return httpx.Response(status, json={"message": f"failure {status}", "code": "XX000"})

        if path.startswith("/rest/v1/"):
            return self._rest(request, path[len("/rest/v1/"):])
        if path.startswith("/storage/v1/object/sign/"):
            key = path[len("/storage/v1/object/sign/"):]
            return httpx.Response(200, json={"signedURL": f"/object/sign/{key}?token=signed"})
        if path.startswith("/storage/v1/object/"):
            return self._storage(request, path[len("/storage/v1/object/"):])
        return httpx.Response(404, json={"message": "not found"})

    def _matching(self, table: str, params: httpx.QueryParams) -> List[dict]:
        rows = self.tables.setdefault(table, [])
        for column, condition in params.multi_items():
            if condition.startswith("eq."):
                rows = [r for r in rows if str(r.get(column)) == condition[3:]]
            elif condition.startswith("fts."):
                words = condition[4:].lower().split()
                rows = [
                    r
                    for r in rows
                    if all(w in f"{r.get('title', '')} {r.get('content', '')}".lower() for w in words)
                ]
        return rows

    def _rest(self, request: httpx.Request, table: str) -> httpx.Response:
        params = request.url.params
        if request.method == "GET":
            rows = list(self._matching(table, params))
            order = params.get("order")
            if order:
                column, _, direction = order.partition(".")
                rows.sort(key=lambda r: r.get(column) or "", reverse=direction == "desc")
            return httpx.Response(200, json=rows)

        if request.method == "POST":
            created = []
            for row in json.loads(request.content):
                row = dict(row)
                row.setdefault("id", str(next(self._ids)))
                row.setdefault("created_at", _now_iso())
                self.tables.setdefault(table, []).append(row)
                created.append(row)
            if self.reverse_inserts:
                created.reverse()
            return httpx.Response(201, json=created)

        if request.method == "PATCH":
            values = json.loads(request.content)
            updated = []
            for row in self._matching(table, params):
                row.update(values)
                updated.append(row)
            return httpx.Response(200, json=updated)

        if request.method == "DELETE":
            doomed = {id(r) for r in self._matching(table, params)}
            self.tables[table] = [r for r in self.tables[table] if id(r) not in doomed]
            return httpx.Response(204)

        return httpx.Response(405)

    def _storage(self, request: httpx.Request, key: str) -> httpx.Response:
        if request.method == "POST":
            _, _, object_path = key.partition("/")
            self.objects[object_path] = request.content
            return httpx.Response(200, json={"Key": key})
        if request.method == "DELETE":
            prefixes = json.loads(request.content)["prefixes"]
            for object_path in prefixes:
                self.objects.pop(object_path, None)
            return httpx.Response(200, json=[{"name": p} for p in prefixes])
        return httpx.Response(405)


class FakeProxy:
    """Answers the proxy endpoints with configurable payloads."""

    def __init__(self):
        self.backend_config = {
            "supabaseUrl": SUPABASE_URL,
            "supabaseAnonKey": "anon-key",
            "supabaseServiceKey": None,
        }
        self.subscription = {"is_premium": False, "subscription_status": "inactive", "updated_at": None}
        self.checkout = {"checkout_url": "https://checkout.dodopayments.com/pay/abc"}
        self.failing: Dict[str, Optional[int]] = {}
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.failing:
            status = self.failing[path]
            if status is None:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(status, json={"error": "Proxy failure", "details": "boom"})
        if path == ProxyClient.Endpoint.BACKEND_CONFIG:
            return httpx.Response(200, json=self.backend_config)
        if path == ProxyClient.Endpoint.SUBSCRIPTION_STATUS:
            return httpx.Response(200, json=self.subscription)
        if path == ProxyClient.Endpoint.CHECKOUT_CREATE:
            return httpx.Response(200, json=self.checkout)
        if path == ProxyClient.Endpoint.ANALYTICS_CONFIG:
            return httpx.Response(200, json={"measurementId": "G-TEST", "enabled": True})
        return httpx.Response(404, json={"error": "Not found"})


@pytest.fixture
def user() -> AppUser:
    return AppUser(uid="uid-1", email="ada@example.com", display_name="Ada")


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def proxy() -> FakeProxy:
    return FakeProxy()


@pytest.fixture
def client_settings(tmp_path) -> ClientSettings:
    return ClientSettings(API_BASE_URL=PROXY_URL, LOCAL_STORE_DIR=str(tmp_path / "store"))


@pytest.fixture
def local_store(client_settings) -> LocalNoteStore:
    return LocalNoteStore(client_settings.LOCAL_STORE_DIR)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest_asyncio.fixture
async def session(user, supabase, proxy, local_store, client_settings):
    s = ClientSession(
        user=user,
        proxy=ProxyClient(PROXY_URL, transport=httpx.MockTransport(proxy)),
        local_store=local_store,
        settings=client_settings,
        backend_transport=httpx.MockTransport(supabase),
    )
    yield s
    await s.close()


@pytest_asyncio.fixture
async def notes_app(session, notifier):
    return NotesApp(session, notifier=notifier)
