"""Pytest shared fixtures: network guard rails and an in-memory Keycloak."""
import itertools
import json
import pathlib
import re
import sys
from typing import Any, Optional
from urllib.parse import urlparse

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from keycloak_mcp.config import AppConfig
from keycloak_mcp.core.dispatcher import CommandDispatcher

KC_URL = "http://kc.test"
APP_CLIENT_UUID = "9f0c1e2a-app0-4000-8000-000000000001"
API_CLIENT_UUID = "9f0c1e2a-api0-4000-8000-000000000002"


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching a real Keycloak.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(method):
        def _call(url, *args, **kwargs):
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")
        return _call

    for method in ("get", "post", "put", "delete"):
        monkeypatch.setattr(requests, method, _refuse(method.upper()))


# ─────────────────────────────────────────────────────────────────────────────
# In-memory Keycloak Admin API
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, url: str = "", headers: Optional[dict] = None):
        self.status_code = status_code
        self._payload = payload
        self.url = url
        self.headers = headers or {}
        self.text = json.dumps(payload) if payload is not None else ""

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeKeycloak:
    """Routes ``requests`` calls to dictionaries shaped like Keycloak's data."""

    def __init__(self):
        self.realms: dict[str, dict[str, Any]] = {}
        self.token_requests = 0
        self.reject_credentials = False
        self.calls: list[tuple[str, str]] = []
        self.failures: list[tuple[str, str, int]] = []
        self.passwords: dict[str, dict] = {}
        self._ids = itertools.count(1)

    # -- seeding ----------------------------------------------------------
    def add_realm(self, name: str) -> None:
        self.realms.setdefault(name, {"users": {}, "clients": [], "roles": {}, "mappings": {}})

    def add_user(self, realm: str, user_id: str, username: str) -> None:
        self.realms[realm]["users"][user_id] = {"id": user_id, "username": username}

    def add_client(self, realm: str, uuid: str, client_id: str, roles: list[str]) -> None:
        self.realms[realm]["clients"].append({"id": uuid, "clientId": client_id})
        self.realms[realm]["roles"][uuid] = [
            {"id": f"role-{client_id}-{name}", "name": name} for name in roles
        ]

    def fail(self, method: str, path_fragment: str, status: int) -> None:
        """Make every matching request answer ``status``."""
        self.failures.append((method, path_fragment, status))

    def mappings(self, realm: str, user_id: str, client_uuid: str) -> set[str]:
        return self.realms[realm]["mappings"].setdefault((user_id, client_uuid), set())

    def paths(self, method: Optional[str] = None) -> list[str]:
        return [p for m, p in self.calls if method is None or m == method]

    # -- transport --------------------------------------------------------
    def install(self, monkeypatch) -> None:
        for method in ("get", "post", "put", "delete"):
            monkeypatch.setattr(requests, method, self._handler(method.upper()))

    def _handler(self, method: str):
        def _call(url, *args, **kwargs):
            return self.handle(method, url, **kwargs)
        return _call

    def handle(self, method: str, url: str, **kwargs) -> StubResponse:
        # Route on the URL requests would put on the wire (dot segments collapsed)
        url = requests.Request(method, url).prepare().url
        path = urlparse(url).path
        self.calls.append((method, path))

        for fail_method, fragment, status in self.failures:
            if fail_method == method and fragment in path:
                return StubResponse(status, {"error": "injected failure"}, url)

        if re.fullmatch(r"/realms/[^/]+/protocol/openid-connect/token", path):
            return self._token(url)

        auth = (kwargs.get("headers") or {}).get("Authorization", "")
        if not auth.startswith("Bearer token-"):
            return StubResponse(401, {"error": "HTTP 401 Unauthorized"}, url)

        return self._admin(method, path, url, kwargs)

    def _token(self, url: str) -> StubResponse:
        if self.reject_credentials:
            return StubResponse(401, {"error": "invalid_grant", "error_description": "Invalid user credentials"}, url)
        self.token_requests += 1
        return StubResponse(200, {"access_token": f"token-{self.token_requests}", "expires_in": 60}, url)

    def _admin(self, method: str, path: str, url: str, kwargs: dict) -> StubResponse:
        if method == "GET" and path == "/admin/realms":
            return StubResponse(200, [{"realm": name} for name in self.realms], url)

        m = re.fullmatch(r"/admin/realms/([^/]+)(/.*)?", path)
        realm_name, rest = m.group(1), m.group(2) or ""
        realm = self.realms.get(realm_name)
        if realm is None:
            return StubResponse(404, {"error": "Realm not found."}, url)

        if rest == "/users":
            if method == "GET":
                users = list(realm["users"].values())
                wanted = (kwargs.get("params") or {}).get("username")
                if wanted:
                    users = [u for u in users if u["username"] == wanted]
                return StubResponse(200, users, url)
            if method == "POST":
                payload = kwargs["json"]
                if any(u["username"] == payload["username"] for u in realm["users"].values()):
                    return StubResponse(409, {"errorMessage": "User exists with same username"}, url)
                user_id = f"user-{next(self._ids)}"
                realm["users"][user_id] = dict(payload, id=user_id)
                return StubResponse(201, None, url, headers={"Location": f"{url}/{user_id}"})

        m = re.fullmatch(r"/users/([^/]+)", rest)
        if m and method == "DELETE":
            if realm["users"].pop(m.group(1), None) is None:
                return StubResponse(404, {"error": "User not found"}, url)
            return StubResponse(204, None, url)

        m = re.fullmatch(r"/users/([^/]+)/reset-password", rest)
        if m and method == "PUT":
            if m.group(1) not in realm["users"]:
                return StubResponse(404, {"error": "User not found"}, url)
            self.passwords[m.group(1)] = kwargs["json"]
            return StubResponse(204, None, url)

        m = re.fullmatch(r"/users/([^/]+)/role-mappings/clients/([^/]+)", rest)
        if m:
            current = self.mappings(realm_name, m.group(1), m.group(2))
            names = {r["name"] for r in kwargs["json"]}
            if method == "POST":
                current |= names
            elif method == "DELETE":
                current -= names
            return StubResponse(204, None, url)

        if rest == "/clients" and method == "GET":
            return StubResponse(200, list(realm["clients"]), url)

        m = re.fullmatch(r"/clients/([^/]+)", rest)
        if m and method == "GET":
            for client in realm["clients"]:
                if client["id"] == m.group(1):
                    return StubResponse(200, client, url)
            return StubResponse(404, {"error": "Could not find client"}, url)

        m = re.fullmatch(r"/clients/([^/]+)/roles", rest)
        if m and method == "GET":
            if m.group(1) not in realm["roles"]:
                return StubResponse(404, {"error": "Could not find client"}, url)
            return StubResponse(200, list(realm["roles"][m.group(1)]), url)

        raise RuntimeError(f"FakeKeycloak has no route for {method} {path}")


@pytest.fixture()
def fake_keycloak(monkeypatch):
    """In-memory Keycloak seeded with a 'demo' realm."""
    kc = FakeKeycloak()
    kc.add_realm("master")
    kc.add_realm("demo")
    kc.add_user("demo", "u1", "alice")
    kc.add_user("demo", "u2", "bob")
    kc.add_client("demo", APP_CLIENT_UUID, "app", ["admin", "viewer", "editor"])
    kc.add_client("demo", API_CLIENT_UUID, "api", ["reader"])
    kc.install(monkeypatch)
    return kc


@pytest.fixture()
def app_config():
    return AppConfig(keycloak_url=KC_URL, keycloak_admin="admin", keycloak_admin_password="secret")


@pytest.fixture()
def dispatcher(fake_keycloak, app_config):
    """Dispatcher wired to the in-memory Keycloak."""
    return CommandDispatcher.from_config(app_config)


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a running Keycloak)"
    )
