"""Mock product database"""

import math
from datetime import datetime
from typing import Optional

from ..models.product import Product

_SEED = [
    ("prod-001", "Sony WH-1000XM5 Wireless Headphones", "Noise cancelling headphones with 30-hour battery life.", 34999, 50),
    ("prod-002", "Apple AirPods Pro (2nd Gen)", "Active Noise Cancellation and Adaptive Transparency.", 24900, 100),
    ("prod-003", "Samsung Galaxy Tab S9", "11-inch Dynamic AMOLED 2X display. S Pen included.", 79999, 30),
    ("prod-004", "Patagonia Better Sweater Jacket", "Fleece jacket made with recycled polyester.", 13900, 75),
    ("prod-005", "Nike Air Max 90", "Max Air cushioning. Leather and textile upper.", 13000, 60),
    ("prod-006", "Dyson V15 Detect Vacuum", "Laser reveals microscopic dust.", 74999, 25),
    ("prod-007", "KitchenAid Stand Mixer", "5.5-Quart bowl-lift stand mixer. 11 speeds.", 44999, 40),
    ("prod-008", "Yeti Tundra 45 Cooler", "Rotomolded construction. PermaFrost insulation.", 32500, 35),
    ("prod-009", "Garmin Forerunner 965", "GPS running watch with AMOLED display.", 59999, 20),
    ("prod-010", "Atomic Habits by James Clear", "Hardcover.", 2499, 200),
]


def seed_products() -> dict[str, Product]:
    now = datetime.utcnow()
    return {
        product_id: Product(
            id=product_id,
            name=name,
            description=description,
            price_cents=price_cents,
            stock=stock,
            created_at=now,
            updated_at=now,
        )
        for product_id, name, description, price_cents, stock in _SEED
    }


class ProductDatabase:
    """In-memory product database for mock commerce API"""

    def __init__(self, products: Optional[dict[str, Product]] = None):
        self.products = products if products is not None else seed_products()

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def add_product(self, product: Product) -> Product:
        self.products[product.id] = product
        return product

    def list_products(
        self,
        page: int = 1,
        limit: int = 20,
        exclude_out_of_stock: bool = False,
        include_inactive: bool = False,
    ) -> tuple[list[Product], int, int]:
        """
        List products page by page.

        Returns:
            Tuple of (products on the page, total count, total pages)
        """
        results = list(self.products.values())

        if not include_inactive:
            results = [p for p in results if p.is_active]
        if exclude_out_of_stock:
            results = [p for p in results if p.stock > 0]

        total = len(results)
        total_pages = max(1, math.ceil(total / limit))
        offset = (page - 1) * limit
        return results[offset : offset + limit], total, total_pages

    def set_stock(self, product_id: str, stock: int) -> bool:
        product = self.products.get(product_id)
        if not product:
            return False

        product.stock = stock
        product.updated_at = datetime.utcnow()
        return True

    def update_stock(self, product_id: str, quantity_change: int) -> bool:
        """
        Update product stock.

        Args:
            product_id: Product to update
            quantity_change: Positive to add, negative to remove

        Returns:
            True if successful
        """
        product = self.products.get(product_id)
        if not product:
            return False

        new_quantity = product.stock + quantity_change
        if new_quantity < 0:
            return False

        return self.set_stock(product_id, new_quantity)


# Singleton instance
product_db = ProductDatabase()
