# Mock Commerce Models

from .product import Product, ProductPage, Pagination
from .order import (
    Order,
    OrderItem,
    OrderStatus,
    OrderPage,
    OrderLineRequest,
    CreateOrderRequest,
    UpdateStatusRequest,
)

__all__ = [
    "Product",
    "ProductPage",
    "Pagination",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderPage",
    "OrderLineRequest",
    "CreateOrderRequest",
    "UpdateStatusRequest",
]
