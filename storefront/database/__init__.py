# Persistence modules

from .carts import CartStore, InMemoryCartStore, JsonFileCartStore

__all__ = [
    "CartStore",
    "InMemoryCartStore",
    "JsonFileCartStore",
]
