# Storefront Models

from .product import Product, ProductSnapshot
from .cart import Cart, CartLine, CartSignal, AddResult
from .order import (
    Order,
    OrderItem,
    OrderStatus,
    OrderPage,
    Pagination,
    PaymentOutcome,
    PaymentResult,
)

__all__ = [
    "Product",
    "ProductSnapshot",
    "Cart",
    "CartLine",
    "CartSignal",
    "AddResult",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderPage",
    "Pagination",
    "PaymentOutcome",
    "PaymentResult",
]
