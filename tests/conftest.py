"""Shared fixtures: an in-memory fake of the Euno integrations API."""
import asyncio
import json
import re
from typing import Any, Optional

import httpx
import pytest

from euno.config import ProviderConfig
from euno.registry import IntegrationRegistry
from euno.transport import RateLimitedTransport

ACCOUNT_ID = 42
SERVER_URL = "https://euno.test"
API_KEY = "test-api-key"

_PATH = re.compile(r"^/accounts/(\d+)/integrations(?:/(\d+))?$")


class FakeEunoService:
    """Async MockTransport handler backed by a dict of integration documents.

    Counts every request that reaches it and tracks the highest number of
    requests it has seen at the same time.
    """

    def __init__(self, delay: float = 0.0):
        self.integrations: dict[int, dict[str, Any]] = {}
        self.requests: list[tuple[str, str, Optional[dict[str, Any]]]] = []
        self.headers: list[httpx.Headers] = []
        self.in_flight = 0
        self.high_water = 0
        self.delay = delay
        self.gate: Optional[asyncio.Event] = None
        self.masked_keys: set[str] = set()
        self.push_schedule: Optional[dict[str, Any]] = {"time_zone": "UTC"}
        self._failures: dict[str, httpx.Response] = {}
        self._next_id = 1
        self._clock = 0

    # --- Test controls ---

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def fail_next(self, method: str, status_code: int, body: str = "") -> None:
        self._failures[method] = httpx.Response(status_code, text=body)

    def seed(self, integration_type: str, configuration: dict[str, Any], **extra: Any) -> int:
        integration_id = self._allocate()
        self.integrations[integration_id] = {
            "id": integration_id,
            "account_id": ACCOUNT_ID,
            "integration_type": integration_type,
            "name": extra.pop("name", f"{integration_type}-{integration_id}"),
            "active": True,
            "configuration": dict(configuration),
            "created_at": self._now(),
            "last_updated_at": self._now(),
            **extra,
        }
        return integration_id

    # --- Handler ---

    async def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        self.headers.append(request.headers)
        self.in_flight += 1
        self.high_water = max(self.high_water, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            elif self.delay:
                await asyncio.sleep(self.delay)
            return self._dispatch(request.method, request.url.path, body)
        finally:
            self.in_flight -= 1

    def _dispatch(self, method: str, path: str, body: Optional[dict[str, Any]]) -> httpx.Response:
        failure = self._failures.pop(method, None)
        if failure is not None:
            return failure

        match = _PATH.match(path)
        if match is None or int(match.group(1)) != ACCOUNT_ID:
            return httpx.Response(404, json={"detail": "Not Found"})
        integration_id = int(match.group(2)) if match.group(2) else None

        if method == "POST" and integration_id is None:
            return httpx.Response(201, json=self._render(self._create(body or {})))
        if integration_id is None or integration_id not in self.integrations:
            return httpx.Response(404, json={"detail": "Integration not found"})
        if method == "GET":
            return httpx.Response(200, json=self._render(self.integrations[integration_id]))
        if method == "PATCH":
            doc = self.integrations[integration_id]
            doc.update(body or {})
            doc["last_updated_at"] = self._now()
            return httpx.Response(200, json=self._render(doc))
        if method == "DELETE":
            del self.integrations[integration_id]
            return httpx.Response(204)
        return httpx.Response(405, text="method not allowed")

    def _create(self, body: dict[str, Any]) -> dict[str, Any]:
        integration_id = self._allocate()
        doc = {
            **body,
            "id": integration_id,
            "account_id": ACCOUNT_ID,
            "active": body.get("active", True),
            "created_at": self._now(),
            "last_updated_at": self._now(),
            "health": "healthy",
            "last_run_status": "pending",
        }
        if body.get("integration_type") == "dbt_core":
            doc["trigger_type"] = "push"
            doc["trigger_secret"] = f"secret-{integration_id}"
            doc["trigger_url"] = f"{SERVER_URL}/trigger/{integration_id}"
            if self.push_schedule is not None:
                doc["schedule"] = dict(self.push_schedule)
        self.integrations[integration_id] = doc
        return doc

    def _render(self, doc: dict[str, Any]) -> dict[str, Any]:
        rendered = dict(doc)
        if "configuration" in rendered:
            rendered["configuration"] = {
                k: v for k, v in rendered["configuration"].items() if k not in self.masked_keys
            }
        return rendered

    def _allocate(self) -> int:
        integration_id = self._next_id
        self._next_id += 1
        return integration_id

    def _now(self) -> str:
        self._clock += 1
        return f"2024-01-01T00:00:{self._clock:02d}Z"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def service():
    return FakeEunoService()


@pytest.fixture
def config():
    return ProviderConfig(server_url=SERVER_URL, api_key=API_KEY, account_id=ACCOUNT_ID)


@pytest.fixture
def transport(config, service):
    return RateLimitedTransport(config, http_transport=httpx.MockTransport(service.handler))


@pytest.fixture
def registry(transport):
    return IntegrationRegistry(transport)

