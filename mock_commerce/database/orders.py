"""Order storage for mock commerce API"""

import math
import uuid
from datetime import datetime
from typing import Optional

from ..models.order import Order, OrderItem, OrderLineRequest, OrderStatus
from .products import ProductDatabase, product_db


class InsufficientStock(Exception):
    """A requested line is above live stock or refers to an unknown product"""

    def __init__(self, product_id: str, available: int):
        self.product_id = product_id
        self.available = available
        super().__init__(f"Insufficient stock for {product_id}. Available: {available}")


class OrderDatabase:
    """
    In-memory order storage.

    Stock is reserved when an order is created and released when a
    created order is cancelled.
    """

    def __init__(self, products: ProductDatabase):
        self.products = products
        self.orders: dict[str, Order] = {}
        self._idempotency: dict[tuple[str, str], str] = {}
        # order_id -> queued faults for the next pay calls
        self.payment_faults: dict[str, list[str]] = {}

    def create_order(
        self,
        user_id: str,
        lines: list[OrderLineRequest],
        idempotency_key: Optional[str] = None,
    ) -> Order:
        """Create an order priced from the catalogue; replays a known idempotency key"""
        if idempotency_key:
            existing_id = self._idempotency.get((user_id, idempotency_key))
            if existing_id:
                return self.orders[existing_id]

        # duplicate lines for one product draw on the same stock
        requested: dict[str, int] = {}
        for line in lines:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        items = []
        for product_id, quantity in requested.items():
            product = self.products.get_product(product_id)
            if not product or not product.is_active:
                raise InsufficientStock(product_id, 0)
            if product.stock < quantity:
                raise InsufficientStock(product_id, product.stock)
            items.append(OrderItem(
                product_id=product.id,
                quantity=quantity,
                unit_price_cents=product.price_cents,
            ))

        for item in items:
            self.products.update_stock(item.product_id, -item.quantity)

        now = datetime.utcnow()
        order = Order(
            id=f"ORD-{uuid.uuid4().hex[:8].upper()}",
            user_id=user_id,
            status=OrderStatus.CREATED,
            total_cents=sum(item.unit_price_cents * item.quantity for item in items),
            items=items,
            created_at=now,
            updated_at=now,
        )

        self.orders[order.id] = order
        if idempotency_key:
            self._idempotency[(user_id, idempotency_key)] = order.id
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def update_status(self, order_id: str, status: OrderStatus) -> Optional[Order]:
        """Update order status"""
        order = self.get_order(order_id)
        if not order:
            return None

        if order.status == OrderStatus.CREATED and status == OrderStatus.CANCELLED:
            for item in order.items:
                self.products.update_stock(item.product_id, item.quantity)

        order.status = status
        order.updated_at = datetime.utcnow()
        return order

    def list_orders(
        self,
        user_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Order], int, int]:
        """List orders newest first, optionally for one user"""
        orders = list(self.orders.values())
        if user_id is not None:
            orders = [o for o in orders if o.user_id == user_id]
        orders.sort(key=lambda o: o.created_at, reverse=True)

        total = len(orders)
        total_pages = max(1, math.ceil(total / limit))
        offset = (page - 1) * limit
        return orders[offset : offset + limit], total, total_pages

    def inject_payment_fault(self, order_id: str, fault: str) -> None:
        """Queue a fault for the next pay call: 'reject', 'fail' or 'commit_then_fail'"""
        self.payment_faults.setdefault(order_id, []).append(fault)

    def take_payment_fault(self, order_id: str) -> Optional[str]:
        faults = self.payment_faults.get(order_id)
        if not faults:
            return None
        return faults.pop(0)


# Singleton instance
order_db = OrderDatabase(product_db)
