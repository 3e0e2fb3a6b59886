"""End-to-end tests of the storefront against the mock commerce app."""

import asyncio

import httpx
import pytest
import pytest_asyncio

from storefront.core.identity import IdentityResolver
from storefront.errors import EmptyCart, NotFound, ServerRejected
from storefront.models.cart import CartSignal
from storefront.models.order import OrderStatus, PaymentOutcome
from storefront.services.order_tracker import OrderTracker
from storefront.services.storefront import Storefront


@pytest_asyncio.fixture
async def shop(api_client, memory_store):
    shop = Storefront(
        client=api_client,
        store=memory_store,
        identity=IdentityResolver("alice"),
        reverify_delay=0.01,
    )
    yield shop
    await shop.close()


@pytest.mark.asyncio
async def test_checkout_and_pay(shop, product_db):
    result = await shop.add_product("prod-010", 3)
    assert result.signal == CartSignal.APPLIED

    order = await shop.checkout()

    assert order.status == OrderStatus.CREATED
    assert order.total_cents == 3 * 2499
    assert shop.cart.is_empty()
    assert shop.cart.total_cents() == 0
    assert product_db.get_product("prod-010").stock == 197
    assert shop.orders.allowed_actions(order.id) == {"view", "pay"}

    payment = await shop.pay(order.id)

    assert payment.outcome == PaymentOutcome.CONFIRMED
    assert shop.orders.cached(order.id).status == OrderStatus.PAID

    again = await shop.pay(order.id)
    assert again.outcome == PaymentOutcome.UNCHANGED


@pytest.mark.asyncio
async def test_checkout_of_empty_cart(shop):
    with pytest.raises(EmptyCart):
        await shop.checkout()


@pytest.mark.asyncio
async def test_retry_after_checkout_creates_no_second_order(shop, order_db):
    await shop.add_product("prod-001", 1)
    await shop.checkout()

    with pytest.raises(EmptyCart):
        await shop.checkout()

    assert len(order_db.orders) == 1


@pytest.mark.asyncio
async def test_add_product_clamps_to_live_stock(shop):
    result = await shop.add_product("prod-009", 50)

    assert result.signal == CartSignal.CLAMPED_TO_STOCK
    assert shop.cart.get_line("prod-009").quantity == 20


@pytest.mark.asyncio
async def test_add_out_of_stock_product(shop, product_db):
    product_db.set_stock("prod-003", 0)

    result = await shop.add_product("prod-003", 1)

    assert result.signal == CartSignal.OUT_OF_STOCK
    assert shop.cart.is_empty()


@pytest.mark.asyncio
async def test_stale_stock_rejected_by_server(shop, product_db):
    await shop.add_product("prod-009", 5)
    product_db.set_stock("prod-009", 2)

    with pytest.raises(ServerRejected) as exc_info:
        await shop.checkout()

    assert exc_info.value.status_code == 400
    assert shop.cart.get_line("prod-009").quantity == 5


@pytest.mark.asyncio
async def test_refresh_stock_updates_snapshot_only(shop, product_db):
    await shop.add_product("prod-009", 5)
    product_db.set_stock("prod-009", 2)

    refreshed = await shop.refresh_stock()

    assert refreshed[0].known_stock == 2
    assert shop.cart.get_line("prod-009").quantity == 5


@pytest.mark.asyncio
async def test_payment_committed_despite_error(shop, order_db):
    await shop.add_product("prod-010", 1)
    order = await shop.checkout()
    order_db.inject_payment_fault(order.id, "commit_then_fail")

    payment = await shop.pay(order.id)

    assert payment.outcome == PaymentOutcome.INDETERMINATE
    assert shop.orders.display_state(order.id) == "processing"

    resolved = await shop.orders.wait_for_reverification(order.id)
    assert resolved.status == OrderStatus.PAID


@pytest.mark.asyncio
async def test_pay_on_order_already_paid_elsewhere(shop, order_db):
    await shop.add_product("prod-010", 1)
    order = await shop.checkout()
    order_db.update_status(order.id, OrderStatus.PAID)
    assert shop.orders.cached(order.id).status == OrderStatus.CREATED

    payment = await shop.pay(order.id)

    assert payment.outcome == PaymentOutcome.UNCHANGED
    assert shop.orders.cached(order.id).status == OrderStatus.PAID
    assert shop.orders.allowed_actions(order.id) == {"view"}


@pytest.mark.asyncio
async def test_identity_switch_during_checkout_clears_submitted_cart(
    scripted_client, scripted, memory_store, snapshot, order_json
):
    shop = Storefront(client=scripted_client, store=memory_store, reverify_delay=0.01)
    shop.identity.login("bob")
    shop.cart.add_or_replace("bob-item", snapshot(stock=5), 2)
    shop.identity.logout()
    shop.cart.add_or_replace("guest-item", snapshot(), 1)

    release = asyncio.Event()

    async def slow_create(request):
        await release.wait()
        return httpx.Response(201, json=order_json())

    scripted.on("POST", "/api/orders", slow_create)

    checkout = asyncio.create_task(shop.checkout())
    while scripted.calls("POST", "/api/orders") == 0:
        await asyncio.sleep(0)

    shop.identity.login("bob")
    release.set()
    order = await checkout

    assert order.id == "o1"
    assert memory_store.load("guest") == []
    assert shop.cart.active_key == "user:bob"
    assert shop.cart.get_line("bob-item").quantity == 2
    assert memory_store.load("user:bob")[0].quantity == 2

    await shop.close()


@pytest.mark.asyncio
async def test_rejected_payment_can_be_retried(shop, order_db):
    await shop.add_product("prod-010", 1)
    order = await shop.checkout()
    order_db.inject_payment_fault(order.id, "reject")

    first = await shop.pay(order.id)
    assert first.outcome == PaymentOutcome.REJECTED
    assert shop.orders.cached(order.id).status == OrderStatus.CREATED

    second = await shop.pay(order.id)
    assert second.outcome == PaymentOutcome.CONFIRMED


@pytest.mark.asyncio
async def test_external_cancellation(shop, admin_client):
    await shop.add_product("prod-010", 1)
    order = await shop.checkout()

    await admin_client.update_order_status(order.id, OrderStatus.CANCELLED)
    loaded = await shop.orders.load(order.id)

    assert loaded.status == OrderStatus.CANCELLED
    payment = await shop.pay(order.id)
    assert payment.outcome == PaymentOutcome.UNCHANGED


@pytest.mark.asyncio
async def test_other_users_order_is_not_found(shop, auth):
    await shop.add_product("prod-010", 1)
    order = await shop.checkout()

    auth.token = "bob"
    shop.identity.login("bob")

    with pytest.raises(NotFound):
        await shop.orders.load(order.id)


@pytest.mark.asyncio
async def test_identity_transitions_keep_carts_apart(api_client, memory_store, auth):
    auth.token = None
    shop = Storefront(client=api_client, store=memory_store)

    await shop.add_product("prod-001", 1)
    assert shop.cart.active_key == "guest"

    auth.token = "alice"
    shop.identity.login("alice")
    assert shop.cart.is_empty()
    await shop.add_product("prod-002", 2)

    auth.token = None
    shop.identity.logout()
    assert [line.product_id for line in shop.cart.lines] == ["prod-001"]

    auth.token = "bob"
    shop.identity.login("bob")
    assert shop.cart.is_empty()

    auth.token = "alice"
    shop.identity.login("alice")
    assert shop.cart.get_line("prod-002").quantity == 2

    await shop.close()


@pytest.mark.asyncio
async def test_order_history_seeds_tracker(shop, api_client):
    await shop.add_product("prod-010", 1)
    order = await shop.checkout()
    tracker = OrderTracker(api_client)

    page = await tracker.list_my_orders()

    assert [o.id for o in page.data] == [order.id]
    assert tracker.cached(order.id).status == OrderStatus.CREATED
    assert tracker.allowed_actions(order.id) == {"view", "pay"}
