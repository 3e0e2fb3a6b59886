"""Shared fixtures for the storefront test suite."""

from typing import Callable, Optional

import httpx
import pytest
import pytest_asyncio

from mock_commerce.database.orders import OrderDatabase
from mock_commerce.database.products import ProductDatabase, seed_products
from mock_commerce.main import create_app
from storefront.database.carts import InMemoryCartStore, JsonFileCartStore
from storefront.models.product import ProductSnapshot
from storefront.services.commerce_client import CommerceClient

API_BASE_URL = "http://testserver/api"


def make_snapshot(stock: int = 5, price_cents: int = 1000, name: str = "Widget") -> ProductSnapshot:
    return ProductSnapshot(display_name=name, unit_price_cents=price_cents, stock=stock)


def order_payload(order_id: str = "o1", status: str = "created", **overrides) -> dict:
    payload = {
        "id": order_id,
        "status": status,
        "totalCents": 2000,
        "items": [{"productId": "p1", "quantity": 2, "unitPriceCents": 1000}],
        "createdAt": "2026-01-01T10:00:00Z",
        "updatedAt": "2026-01-01T10:00:00Z",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def order_json() -> Callable[..., dict]:
    return order_payload


@pytest.fixture
def snapshot() -> Callable[..., ProductSnapshot]:
    return make_snapshot


@pytest.fixture
def memory_store() -> InMemoryCartStore:
    return InMemoryCartStore()


@pytest.fixture
def file_store(tmp_path) -> JsonFileCartStore:
    return JsonFileCartStore(tmp_path / "carts.json")


# ============================================================================
# Mock commerce API (in-process, via ASGI transport)
# ============================================================================


@pytest.fixture
def product_db() -> ProductDatabase:
    return ProductDatabase(seed_products())


@pytest.fixture
def order_db(product_db) -> OrderDatabase:
    return OrderDatabase(product_db)


@pytest.fixture
def commerce_app(product_db, order_db):
    return create_app(products=product_db, orders=order_db)


class TokenHolder:
    """Mutable auth token, standing in for the auth subsystem's storage"""

    def __init__(self, token: Optional[str] = None):
        self.token = token

    def __call__(self) -> Optional[str]:
        return self.token


@pytest.fixture
def auth() -> TokenHolder:
    return TokenHolder("alice")


@pytest_asyncio.fixture
async def api_client(commerce_app, auth):
    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=commerce_app))
    client = CommerceClient(API_BASE_URL, token_provider=auth, http_client=http_client)
    yield client
    await http_client.aclose()


@pytest_asyncio.fixture
async def admin_client(commerce_app):
    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=commerce_app))
    client = CommerceClient(API_BASE_URL, token_provider=lambda: "admin", http_client=http_client)
    yield client
    await http_client.aclose()


# ============================================================================
# Scripted transport
# ============================================================================


class ScriptedApi:
    """
    httpx.MockTransport handler that dispatches on (method, path) and
    records every request it sees.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Callable] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, handler: Callable) -> None:
        self.routes[(method, path)] = handler

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"detail": "Not found"})
        result = handler(request)
        if not isinstance(result, httpx.Response):
            result = await result
        return result


@pytest.fixture
def scripted() -> ScriptedApi:
    return ScriptedApi()


@pytest_asyncio.fixture
async def scripted_client(scripted):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(scripted))
    client = CommerceClient(API_BASE_URL, token_provider=lambda: "alice", http_client=http_client)
    yield client
    await http_client.aclose()
