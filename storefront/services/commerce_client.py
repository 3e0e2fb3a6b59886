"""
Commerce API Client

HTTP client for the remote commerce API that owns products, stock,
prices and orders. Attaches the caller's bearer token to every request.
"""

import json
import logging
from typing import Any, Callable, Optional

import httpx

from ..errors import ApiError, TransportFailure
from ..models.order import Order, OrderPage, OrderStatus
from ..models.product import Product

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class CommerceClient:
    """
    Client for the commerce API.

    Raises TransportFailure when no HTTP response was received and
    ApiError when the response status is 400 or above.
    """

    def __init__(
        self,
        api_base_url: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize commerce client.

        Args:
            api_base_url: Base URL of the commerce API (including any /api prefix)
            token_provider: Returns the current auth token, or None for guests
            timeout: Per-request timeout in seconds
            http_client: Pre-configured client (tests pass one with a mock transport)
        """
        self.base_url = api_base_url.rstrip("/")
        self._token_provider = token_provider
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close HTTP client"""
        if self._owns_client:
            await self._http_client.aclose()

    def _generate_headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        """Generate headers including the bearer token if available"""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Make an HTTP request and decode the JSON response"""
        url = f"{self.base_url}{path}"
        body_str = json.dumps(body) if body is not None else None

        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                headers=self._generate_headers(headers),
                content=body_str,
                params=params,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Request timed out: {method} {url}")
            raise TransportFailure(method, url, f"timeout ({type(e).__name__})", timed_out=True) from e
        except httpx.TransportError as e:
            logger.warning(f"Request failed: {method} {url} - {e!r}")
            raise TransportFailure(method, url, str(e) or type(e).__name__) from e

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise ApiError(method, url, response.status_code, self._error_detail(response))

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_detail(response: httpx.Response) -> Optional[str]:
        try:
            data = response.json()
        except ValueError:
            return response.text or None

        if isinstance(data, dict):
            detail = data.get("detail") or data.get("error")
            return detail if isinstance(detail, str) or detail is None else json.dumps(detail)
        return None

    # ==================== Product APIs ====================

    async def get_product(self, product_id: str) -> Product:
        """Get product details"""
        data = await self._request("GET", f"/products/{product_id}")
        return Product.model_validate(data)

    # ==================== Order APIs ====================

    async def create_order(
        self,
        items: list[dict],
        idempotency_key: Optional[str] = None,
    ) -> Order:
        """
        Create an order from line items.

        Only productId and quantity are sent; the server prices the order
        from its own catalogue.
        """
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        data = await self._request("POST", "/orders", body={"items": items}, headers=headers)
        return Order.model_validate(data)

    async def get_order(self, order_id: str) -> Order:
        """Get order details"""
        data = await self._request("GET", f"/orders/{order_id}")
        return Order.model_validate(data)

    async def pay_order(self, order_id: str) -> Order:
        """Trigger payment of a created order"""
        data = await self._request("POST", f"/orders/{order_id}/pay")
        return Order.model_validate(data)

    async def list_my_orders(self, page: int = 1, limit: int = 10) -> OrderPage:
        """List the caller's orders, newest first"""
        data = await self._request("GET", "/orders/my", params={"page": page, "limit": limit})
        return OrderPage.model_validate(data)

    # ==================== Admin APIs ====================

    async def update_order_status(self, order_id: str, status: OrderStatus) -> Order:
        """Set an order's status (admin console)"""
        data = await self._request(
            "PUT",
            f"/orders/{order_id}/status",
            body={"status": OrderStatus(status).value},
        )
        return Order.model_validate(data)
