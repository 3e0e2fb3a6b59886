"""
Storefront

Wires identity, cart, submission and order tracking together:
identity change -> cart reload -> cart mutations -> order submission ->
cart cleared -> order tracked by its server id.
"""

import logging
from typing import Optional

from ..core.config import Settings, get_settings
from ..core.identity import IdentityResolver
from ..database.carts import CartStore, JsonFileCartStore
from ..models.cart import AddResult, CartLine
from ..models.order import Order, PaymentResult
from .cart_manager import CartManager
from .commerce_client import CommerceClient, TokenProvider
from .order_submitter import OrderSubmitter
from .order_tracker import OrderTracker

logger = logging.getLogger(__name__)


class Storefront:
    """Cart and order lifecycle for one client process"""

    def __init__(
        self,
        client: CommerceClient,
        store: CartStore,
        identity: Optional[IdentityResolver] = None,
        reverify_delay: float = 1.0,
    ):
        self.client = client
        self.identity = identity or IdentityResolver()
        self.cart = CartManager(store, self.identity.current)
        self.submitter = OrderSubmitter(client)
        self.orders = OrderTracker(client, reverify_delay=reverify_delay)
        self._unsubscribe = self.identity.subscribe(self.cart.on_identity_change)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        token_provider: Optional[TokenProvider] = None,
        identity: Optional[IdentityResolver] = None,
    ) -> "Storefront":
        """Create a storefront from configuration"""
        settings = settings or get_settings()
        client = CommerceClient(
            api_base_url=settings.api_base_url,
            token_provider=token_provider,
            timeout=settings.request_timeout,
        )
        return cls(
            client=client,
            store=JsonFileCartStore(settings.cart_store_path),
            identity=identity,
            reverify_delay=settings.pay_reverify_delay,
        )

    async def close(self) -> None:
        """Let pending payment checks finish, then release the HTTP client"""
        await self.orders.drain()
        self._unsubscribe()
        await self.client.close()

    # ==================== Cart ====================

    async def add_product(self, product_id: str, quantity: int = 1) -> AddResult:
        """Add (or replace) a product using a freshly fetched catalogue snapshot"""
        product = await self.client.get_product(product_id)
        return self.cart.add_or_replace(product.id, product.snapshot(), quantity)

    async def refresh_stock(self) -> list[CartLine]:
        """Re-read every cart line's product and update its snapshot"""
        refreshed = []
        for line in self.cart.lines:
            product = await self.client.get_product(line.product_id)
            updated = self.cart.refresh_snapshot(line.product_id, product.snapshot())
            if updated is not None:
                refreshed.append(updated)
        return refreshed

    # ==================== Orders ====================

    async def checkout(self) -> Order:
        """
        Submit the active cart as an order, then clear the cart.

        On any failure the cart is left intact for a retry. The cart that
        was submitted is the one cleared, even if the identity changed
        while the request was in flight.
        """
        submitted_key = self.cart.active_key
        order = await self.submitter.submit(self.cart.lines)
        self.cart.clear_identity(submitted_key)
        logger.info(f"Cart {submitted_key} cleared after order {order.id}")
        return self.orders.track(order)

    async def pay(self, order_id: str) -> PaymentResult:
        return await self.orders.pay(order_id)
