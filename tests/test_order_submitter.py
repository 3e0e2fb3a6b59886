"""Tests for the Order Submitter."""

import asyncio
import json

import httpx
import pytest

from storefront.errors import EmptyCart, ServerRejected, SubmissionInProgress, TransportFailure
from storefront.services.cart_manager import CartManager
from storefront.services.order_submitter import OrderSubmitter


@pytest.fixture
def cart(memory_store, snapshot):
    cart = CartManager(memory_store, "alice")
    cart.add_or_replace("p1", snapshot(stock=5, price_cents=1000), 2)
    return cart


@pytest.mark.asyncio
async def test_empty_cart_is_refused(scripted, scripted_client):
    submitter = OrderSubmitter(scripted_client)

    with pytest.raises(EmptyCart):
        await submitter.submit([])

    assert scripted.requests == []


@pytest.mark.asyncio
async def test_clear_then_submit_fails(cart, scripted_client):
    cart.clear()

    with pytest.raises(EmptyCart):
        await OrderSubmitter(scripted_client).submit(cart.lines)


@pytest.mark.asyncio
async def test_sends_only_product_and_quantity(cart, scripted, scripted_client, order_json):
    scripted.on("POST", "/api/orders", lambda r: httpx.Response(201, json=order_json()))

    order = await OrderSubmitter(scripted_client).submit(cart.lines)

    body = json.loads(scripted.requests[0].content)
    assert body == {"items": [{"productId": "p1", "quantity": 2}]}
    assert scripted.requests[0].headers["Idempotency-Key"]
    assert scripted.requests[0].headers["Authorization"] == "Bearer alice"
    assert order.id == "o1"
    assert order.total_cents == 2000


@pytest.mark.asyncio
async def test_each_submit_gets_a_fresh_idempotency_key(cart, scripted, scripted_client, order_json):
    scripted.on("POST", "/api/orders", lambda r: httpx.Response(201, json=order_json()))
    submitter = OrderSubmitter(scripted_client)

    await submitter.submit(cart.lines)
    await submitter.submit(cart.lines)

    keys = {r.headers["Idempotency-Key"] for r in scripted.requests}
    assert len(keys) == 2


@pytest.mark.asyncio
async def test_server_rejection(cart, scripted, scripted_client):
    scripted.on(
        "POST",
        "/api/orders",
        lambda r: httpx.Response(400, json={"detail": "Insufficient stock for p1. Available: 1"}),
    )

    with pytest.raises(ServerRejected) as exc_info:
        await OrderSubmitter(scripted_client).submit(cart.lines)

    assert exc_info.value.status_code == 400
    assert "Insufficient stock" in exc_info.value.detail
    assert cart.get_line("p1").quantity == 2


@pytest.mark.asyncio
async def test_server_error_is_transport_failure(cart, scripted, scripted_client):
    scripted.on("POST", "/api/orders", lambda r: httpx.Response(502, text="bad gateway"))

    with pytest.raises(TransportFailure):
        await OrderSubmitter(scripted_client).submit(cart.lines)


@pytest.mark.asyncio
async def test_timeout_is_transport_failure(cart, scripted, scripted_client):
    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    scripted.on("POST", "/api/orders", timeout)
    submitter = OrderSubmitter(scripted_client)

    with pytest.raises(TransportFailure) as exc_info:
        await submitter.submit(cart.lines)

    assert exc_info.value.timed_out
    assert not submitter.in_flight


@pytest.mark.asyncio
async def test_concurrent_submit_is_refused(cart, scripted, scripted_client, order_json):
    release = asyncio.Event()

    async def slow_create(request):
        await release.wait()
        return httpx.Response(201, json=order_json())

    scripted.on("POST", "/api/orders", slow_create)
    submitter = OrderSubmitter(scripted_client)

    first = asyncio.create_task(submitter.submit(cart.lines))
    while not submitter.in_flight:
        await asyncio.sleep(0)

    with pytest.raises(SubmissionInProgress):
        await submitter.submit(cart.lines)

    release.set()
    order = await first
    assert order.id == "o1"
    assert scripted.calls("POST", "/api/orders") == 1
