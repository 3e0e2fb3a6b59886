"""
Storefront client core

Cart state per identity, stock-aware quantity rules, order submission
and the order payment lifecycle against a remote commerce API.
"""

from .services import CartManager, CommerceClient, OrderSubmitter, OrderTracker, Storefront

__all__ = [
    "CartManager",
    "CommerceClient",
    "OrderSubmitter",
    "OrderTracker",
    "Storefront",
]
