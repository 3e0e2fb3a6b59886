# Database modules

from .products import product_db, ProductDatabase
from .orders import order_db, OrderDatabase, InsufficientStock

__all__ = [
    "product_db",
    "ProductDatabase",
    "order_db",
    "OrderDatabase",
    "InsufficientStock",
]
