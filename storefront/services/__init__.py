# Storefront Services

from .commerce_client import CommerceClient
from .cart_manager import CartManager
from .order_submitter import OrderSubmitter
from .order_tracker import OrderTracker
from .storefront import Storefront

__all__ = [
    "CommerceClient",
    "CartManager",
    "OrderSubmitter",
    "OrderTracker",
    "Storefront",
]
