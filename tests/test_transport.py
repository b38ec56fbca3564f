"""Test the rate-limited transport: auth, status mapping, slots, cancellation."""
import asyncio

import httpx
import pytest

from euno.errors import (
    CancellationError,
    ConnectivityError,
    NotFoundError,
    RemoteFailureError,
)
from euno.models.remote import IntegrationIn
from euno.transport import RateLimitedTransport


async def wait_until(predicate, timeout: float = 2.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0)
    await asyncio.wait_for(_poll(), timeout)


@pytest.mark.asyncio
async def test_bearer_auth_and_account_scoped_url(transport, service):
    integration_id = service.seed("hex", {"workspace_id": "ws"})
    await transport.get_integration(integration_id)

    method, path, body = service.requests[0]
    assert method == "GET"
    assert path == f"/accounts/42/integrations/{integration_id}"
    assert body is None
    headers = service.headers[0]
    assert headers["authorization"] == "Bearer test-api-key"
    assert headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_create_sends_json_body(transport, service):
    out = await transport.create_integration(
        IntegrationIn(integration_type="hex", name="hex", configuration={"workspace_id": "ws"})
    )
    assert out.id == 1
    _, path, body = service.requests[0]
    assert path == "/accounts/42/integrations"
    assert body == {"integration_type": "hex", "name": "hex", "configuration": {"workspace_id": "ws"}}
    assert service.headers[0]["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_404_is_not_found(transport):
    with pytest.raises(NotFoundError) as exc_info:
        await transport.get_integration(999)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_non_2xx_carries_status_and_body(transport, service):
    service.fail_next("GET", 503, "upstream unavailable")
    with pytest.raises(RemoteFailureError) as exc_info:
        await transport.execute("GET", "integrations/1")
    assert not isinstance(exc_info.value, NotFoundError)
    assert exc_info.value.status_code == 503
    assert exc_info.value.body == "upstream unavailable"
    assert exc_info.value.to_dict()["status_code"] == 503


@pytest.mark.asyncio
async def test_2xx_with_invalid_json_is_remote_failure(transport, service):
    service.fail_next("GET", 200, "<html>oops</html>")
    with pytest.raises(RemoteFailureError, match="not JSON"):
        await transport.execute("GET", "integrations/1")


@pytest.mark.asyncio
async def test_2xx_without_identity_is_remote_failure(transport, service):
    service.fail_next("POST", 201, '{"id": 0, "integration_type": "hex"}')
    with pytest.raises(RemoteFailureError, match="no integration id"):
        await transport.create_integration(IntegrationIn(integration_type="hex", name="h"))


@pytest.mark.asyncio
async def test_empty_2xx_body_decodes_to_none(transport, service):
    integration_id = service.seed("hex", {})
    resp = await transport.execute("DELETE", f"integrations/{integration_id}")
    assert resp.status_code == 204
    assert resp.data is None
    assert resp.ok


@pytest.mark.asyncio
async def test_network_error_is_connectivity_error(config):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = RateLimitedTransport(config, http_transport=httpx.MockTransport(refuse))
    with pytest.raises(ConnectivityError, match="ConnectError"):
        await transport.execute("GET", "integrations/1")
    assert transport.in_flight == 0


@pytest.mark.parametrize(
    "error_type", [httpx.TooManyRedirects, httpx.DecodingError], ids=lambda e: e.__name__
)
@pytest.mark.asyncio
async def test_other_http_errors_are_connectivity_errors(config, error_type):
    def broken(request: httpx.Request) -> httpx.Response:
        raise error_type("exchange failed", request=request)

    transport = RateLimitedTransport(config, http_transport=httpx.MockTransport(broken))
    with pytest.raises(ConnectivityError, match=error_type.__name__):
        await transport.execute("GET", "integrations/1")
    assert transport.in_flight == 0


@pytest.mark.asyncio
async def test_api_key_not_in_errors(config):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    transport = RateLimitedTransport(config, http_transport=httpx.MockTransport(refuse))
    with pytest.raises(ConnectivityError) as exc_info:
        await transport.execute("GET", "integrations/1")
    assert "test-api-key" not in str(exc_info.value)
    assert "test-api-key" not in repr(transport.config)


# ---------------------------------------------------------------------------
# Concurrency ceiling
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_never_more_than_three_in_flight(transport, service):
    integration_id = service.seed("hex", {"workspace_id": "ws"})
    service.delay = 0.002

    results = await asyncio.gather(
        *(transport.get_integration(integration_id) for _ in range(100))
    )

    assert len(results) == 100
    assert service.call_count == 100
    assert service.high_water == 3
    assert transport.in_flight == 0


@pytest.mark.asyncio
async def test_slots_released_after_failures(transport, service):
    for _ in range(5):
        with pytest.raises(NotFoundError):
            await transport.get_integration(12345)
    service.fail_next("GET", 500)
    with pytest.raises(RemoteFailureError):
        await transport.get_integration(1)

    integration_id = service.seed("hex", {})
    service.delay = 0.002
    await asyncio.gather(*(transport.get_integration(integration_id) for _ in range(6)))
    assert service.high_water == 3
    assert transport.in_flight == 0


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cancel_while_queued_makes_no_call(transport, service):
    integration_id = service.seed("hex", {})
    service.gate = asyncio.Event()
    holders = [
        asyncio.create_task(transport.get_integration(integration_id)) for _ in range(3)
    ]
    await wait_until(lambda: service.in_flight == 3)

    cancel = asyncio.Event()
    queued = asyncio.create_task(transport.get_integration(integration_id, cancel=cancel))
    for _ in range(5):
        await asyncio.sleep(0)
    assert not queued.done()

    cancel.set()
    with pytest.raises(CancellationError):
        await queued
    assert service.call_count == 3

    service.gate.set()
    await asyncio.gather(*holders)
    assert service.call_count == 3
    assert transport.in_flight == 0


@pytest.mark.asyncio
async def test_cancel_already_set_makes_no_call(transport, service):
    cancel = asyncio.Event()
    cancel.set()
    with pytest.raises(CancellationError):
        await transport.get_integration(1, cancel=cancel)
    assert service.call_count == 0


@pytest.mark.asyncio
async def test_cancel_in_flight_aborts_exchange(transport, service):
    integration_id = service.seed("hex", {})
    service.gate = asyncio.Event()
    cancel = asyncio.Event()

    task = asyncio.create_task(transport.get_integration(integration_id, cancel=cancel))
    await wait_until(lambda: service.in_flight == 1)
    cancel.set()

    with pytest.raises(CancellationError, match="in flight"):
        await task
    assert transport.in_flight == 0
    assert service.in_flight == 0


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_leak_slot(transport, service):
    integration_id = service.seed("hex", {})
    service.gate = asyncio.Event()
    holders = [
        asyncio.create_task(transport.get_integration(integration_id)) for _ in range(3)
    ]
    await wait_until(lambda: service.in_flight == 3)

    for _ in range(10):
        cancel = asyncio.Event()
        queued = asyncio.create_task(transport.get_integration(integration_id, cancel=cancel))
        await asyncio.sleep(0)
        cancel.set()
        with pytest.raises(CancellationError):
            await queued

    service.gate.set()
    await asyncio.gather(*holders)

    service.gate = None
    service.delay = 0.002
    service.high_water = 0
    await asyncio.gather(*(transport.get_integration(integration_id) for _ in range(9)))
    assert service.high_water == 3


@pytest.mark.asyncio
async def test_task_cancellation_propagates(transport, service):
    integration_id = service.seed("hex", {})
    service.gate = asyncio.Event()
    task = asyncio.create_task(
        transport.get_integration(integration_id, cancel=asyncio.Event())
    )
    await wait_until(lambda: service.in_flight == 1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert transport.in_flight == 0
