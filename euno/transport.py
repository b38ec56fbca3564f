"""
Euno Transport — Rate-limited HTTP gateway to the Euno API.

Every lifecycle controller shares one RateLimitedTransport. It provides:
- Bearer auth (API key from the provider config)
- A hard ceiling on in-flight exchanges (asyncio.Semaphore, 3 by default)
- Caller cancellation while queued or in flight (an asyncio.Event)
- Fixed per-call timeout
- Status interpretation: 2xx returned, 404 -> NotFoundError,
  anything else -> RemoteFailureError carrying status and raw body

No retries and no backoff: every failure goes back to the caller.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Coroutine, Optional, TypeVar
import asyncio
import logging
import time

import httpx
from pydantic import ValidationError

from euno.config import ProviderConfig
from euno.errors import (
    CancellationError,
    ConnectivityError,
    NotFoundError,
    RemoteFailureError,
)
from euno.models.remote import IntegrationIn, IntegrationOut

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Response envelope
# ---------------------------------------------------------------------------

@dataclass
class TransportResponse:
    """Successful (2xx) exchange."""
    status_code: int
    data: Any = None
    text: str = field(default="", repr=False)
    latency_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class RateLimitedTransport:
    """
    Bounded-concurrency HTTP client for one Euno account.

    A slot is held for exactly one exchange (client setup, connect, send,
    await response, read body) and released on every exit path. Waiters are
    not served in any guaranteed order.

    ``http_transport`` lets tests substitute an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: ProviderConfig,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config.validate()
        self._http_transport = http_transport
        self._slots = asyncio.Semaphore(config.max_concurrency)
        self._in_flight = 0

    @property
    def max_concurrency(self) -> int:
        return self.config.max_concurrency

    @property
    def in_flight(self) -> int:
        """Number of exchanges currently holding a slot."""
        return self._in_flight

    # --- Auth headers ---

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    # --- Slot admission ---

    async def _acquire(self, cancel: Optional[asyncio.Event]) -> None:
        """Wait for a slot, giving up as soon as ``cancel`` fires."""
        if cancel is None:
            await self._slots.acquire()
            return
        if cancel.is_set():
            raise CancellationError("cancelled before a transport slot was acquired")
        if not self._slots.locked():
            await self._slots.acquire()
            return

        logger.debug("All %d transport slots busy, waiting", self.max_concurrency)
        acquire = asyncio.ensure_future(self._slots.acquire())
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({acquire, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            waiter.cancel()
            self._abandon(acquire)
            raise
        waiter.cancel()

        if acquire.done() and not cancel.is_set():
            return
        self._abandon(acquire)
        raise CancellationError("cancelled while waiting for a transport slot")

    def _abandon(self, acquire: asyncio.Future) -> None:
        """Drop a pending acquisition, returning the slot if it was granted."""
        if not acquire.done():
            acquire.cancel()
        elif not acquire.cancelled():
            self._slots.release()

    @staticmethod
    async def _race(work: Coroutine[Any, Any, T], cancel: Optional[asyncio.Event]) -> T:
        """Await ``work`` unless ``cancel`` fires first, in which case abort it."""
        if cancel is None:
            return await work
        if cancel.is_set():
            work.close()
            raise CancellationError("cancelled before the request was sent")

        task = asyncio.ensure_future(work)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise
        waiter.cancel()

        if task in done:
            return task.result()
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise CancellationError("cancelled while the request was in flight")

    # --- Core request ---

    async def _send(self, method: str, url: str, body: Optional[dict[str, Any]]) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                transport=self._http_transport,
                timeout=self.config.timeout,
            ) as client:
                return await client.request(
                    method,
                    url,
                    json=body,
                    headers=self._headers(body is not None),
                )
        except httpx.HTTPError as exc:
            raise ConnectivityError(
                f"{method} {url} failed: {exc.__class__.__name__}: {exc}"
            ) from exc

    async def execute(
        self,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> TransportResponse:
        """
        Run one exchange against ``{server_url}/accounts/{account_id}/{path}``.

        Blocks until a slot is free. Raises CancellationError (no request is
        made if still queued), ConnectivityError, NotFoundError or
        RemoteFailureError.
        """
        url = f"{self.config.account_url}/{path.lstrip('/')}"

        await self._acquire(cancel)
        self._in_flight += 1
        try:
            start = time.monotonic()
            resp = await self._race(self._send(method, url, body), cancel)
            latency = (time.monotonic() - start) * 1000
        finally:
            self._in_flight -= 1
            self._slots.release()

        logger.debug("%s %s -> %d (%.1f ms)", method, path, resp.status_code, latency)
        return self._interpret(method, path, resp, latency)

    @staticmethod
    def _interpret(method: str, path: str, resp: httpx.Response, latency: float) -> TransportResponse:
        if resp.status_code == 404:
            raise NotFoundError(f"{method} {path}: integration not found", body=resp.text)
        if not 200 <= resp.status_code < 300:
            raise RemoteFailureError(
                f"{method} {path} failed with status {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )

        data = None
        if resp.content:
            try:
                data = resp.json()
            except ValueError as exc:
                raise RemoteFailureError(
                    f"{method} {path} returned a body that is not JSON",
                    status_code=resp.status_code,
                    body=resp.text,
                ) from exc
        return TransportResponse(
            status_code=resp.status_code,
            data=data,
            text=resp.text,
            latency_ms=latency,
        )

    # --- Integration endpoints ---

    async def create_integration(
        self, integration: IntegrationIn, cancel: Optional[asyncio.Event] = None
    ) -> IntegrationOut:
        """POST /accounts/{account}/integrations"""
        resp = await self.execute("POST", "integrations", integration.to_payload(), cancel=cancel)
        return self._parse_integration(resp, "POST integrations")

    async def get_integration(
        self, integration_id: int, cancel: Optional[asyncio.Event] = None
    ) -> IntegrationOut:
        """GET /accounts/{account}/integrations/{id}"""
        resp = await self.execute("GET", f"integrations/{integration_id}", cancel=cancel)
        return self._parse_integration(resp, f"GET integrations/{integration_id}")

    async def update_integration(
        self,
        integration_id: int,
        integration: IntegrationIn,
        cancel: Optional[asyncio.Event] = None,
    ) -> IntegrationOut:
        """PATCH /accounts/{account}/integrations/{id}"""
        resp = await self.execute(
            "PATCH", f"integrations/{integration_id}", integration.to_payload(), cancel=cancel
        )
        return self._parse_integration(resp, f"PATCH integrations/{integration_id}")

    async def delete_integration(
        self, integration_id: int, cancel: Optional[asyncio.Event] = None
    ) -> None:
        """DELETE /accounts/{account}/integrations/{id}"""
        await self.execute("DELETE", f"integrations/{integration_id}", cancel=cancel)

    @staticmethod
    def _parse_integration(resp: TransportResponse, what: str) -> IntegrationOut:
        try:
            result = IntegrationOut.model_validate(resp.data)
        except ValidationError as exc:
            raise RemoteFailureError(
                f"{what}: response is not an integration document ({exc.error_count()} errors)",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc
        if result.id <= 0:
            raise RemoteFailureError(
                f"{what}: response carries no integration id",
                status_code=resp.status_code,
                body=resp.text,
            )
        return result
