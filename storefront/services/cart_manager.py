"""
Cart Manager

Owns the in-memory cart of the currently active identity, enforces
stock bounds on every mutation and persists the full cart before each
mutating call returns.
"""

import logging
from typing import Optional

from ..core.identity import identity_key
from ..database.carts import CartStore
from ..errors import ExceedsStock
from ..models.cart import AddResult, Cart, CartLine, CartSignal
from ..models.product import ProductSnapshot

logger = logging.getLogger(__name__)


class CartManager:
    """
    Single source of truth for the active identity's cart.

    Not safe for concurrent mutation; callers serialize user actions.
    set_active_identity is a barrier: it finishes its flush-then-load
    before any further mutation is accepted.
    """

    def __init__(self, store: CartStore, user_id: Optional[str] = None):
        self.store = store
        self._active_key = identity_key(user_id)
        self._cart = self._load(self._active_key)

    @property
    def active_key(self) -> str:
        return self._active_key

    @property
    def lines(self) -> list[CartLine]:
        """Copies of the current lines, in insertion order"""
        return [line.model_copy() for line in self._cart.lines]

    def get_line(self, product_id: str) -> Optional[CartLine]:
        line = self._cart.find(product_id)
        return line.model_copy() if line else None

    def is_empty(self) -> bool:
        return self._cart.is_empty

    # ==================== Identity ====================

    def set_active_identity(self, user_id: Optional[str]) -> bool:
        """
        Switch the active cart to another identity.

        Flushes the current cart under the previous key, then loads (or
        starts empty) the cart for the new key. Calling it again with the
        same identity is a no-op; returns False in that case.
        """
        new_key = identity_key(user_id)
        if new_key == self._active_key:
            return False

        self._persist()
        previous_key = self._active_key
        self._cart = self._load(new_key)
        self._active_key = new_key

        logger.info(
            f"Active cart switched {previous_key} -> {new_key} "
            f"({len(self._cart.lines)} line(s) loaded)"
        )
        return True

    def on_identity_change(self, previous: Optional[str], current: Optional[str]) -> None:
        """IdentityResolver listener"""
        self.set_active_identity(current)

    # ==================== Mutations ====================

    def add_or_replace(
        self,
        product_id: str,
        snapshot: ProductSnapshot,
        requested_quantity: int = 1,
    ) -> AddResult:
        """
        Insert a line or replace the quantity of an existing one.

        A repeated add replaces the quantity, it never adds to it. The
        quantity is clamped to the snapshot's stock and to at least 1;
        clamping is reported through the result, never raised. With no
        stock at all the cart is left unchanged.
        """
        if snapshot.stock < 1:
            logger.warning(f"Not adding {product_id}: out of stock")
            return AddResult(
                signal=CartSignal.OUT_OF_STOCK,
                requested_quantity=requested_quantity,
                line=self.get_line(product_id),
            )

        quantity = max(1, min(requested_quantity, snapshot.stock))
        signal = CartSignal.APPLIED
        if requested_quantity > snapshot.stock:
            signal = CartSignal.CLAMPED_TO_STOCK
            logger.warning(
                f"Clamped {product_id} from {requested_quantity} to stock {snapshot.stock}"
            )

        line = CartLine(
            product_id=product_id,
            display_name=snapshot.display_name,
            unit_price_cents=snapshot.unit_price_cents,
            image_ref=snapshot.image_ref,
            quantity=quantity,
            known_stock=snapshot.stock,
        )

        lines = list(self._cart.lines)
        existing = self._index_of(product_id)
        if existing is None:
            lines.append(line)
        else:
            lines[existing] = line

        self._commit(lines)
        return AddResult(signal=signal, requested_quantity=requested_quantity, line=line.model_copy())

    def update_quantity(self, product_id: str, quantity: int) -> Optional[CartLine]:
        """
        Set a line's quantity.

        Below 1 the line is removed. Above the line's last known stock the
        update is refused with ExceedsStock and the line is left as is.
        Returns the updated line, or None if there is none.
        """
        if quantity < 1:
            self.remove(product_id)
            return None

        index = self._index_of(product_id)
        if index is None:
            return None

        line = self._cart.lines[index]
        if quantity > line.known_stock:
            raise ExceedsStock(product_id, quantity, line.known_stock)

        updated = line.model_copy(update={"quantity": quantity})
        lines = list(self._cart.lines)
        lines[index] = updated
        self._commit(lines)
        return updated.model_copy()

    def refresh_snapshot(self, product_id: str, snapshot: ProductSnapshot) -> Optional[CartLine]:
        """
        Update a line's catalogue snapshot without touching its quantity.

        Quantities above the new stock are not reduced; the bound only
        applies to later mutations.
        """
        index = self._index_of(product_id)
        if index is None:
            return None

        updated = self._cart.lines[index].model_copy(update={
            "display_name": snapshot.display_name,
            "unit_price_cents": snapshot.unit_price_cents,
            "image_ref": snapshot.image_ref,
            "known_stock": snapshot.stock,
        })
        lines = list(self._cart.lines)
        lines[index] = updated
        self._commit(lines)
        return updated.model_copy()

    def remove(self, product_id: str) -> bool:
        """Delete a line; absent lines are ignored"""
        index = self._index_of(product_id)
        if index is None:
            return False

        lines = list(self._cart.lines)
        del lines[index]
        self._commit(lines)
        return True

    def clear(self) -> None:
        """Empty the cart"""
        self._commit([])

    def clear_identity(self, key: str) -> None:
        """
        Empty the cart stored under key.

        Clears the in-memory cart when key is active; otherwise only the
        stored snapshot of that inactive identity is emptied.
        """
        if key == self._active_key:
            self.clear()
        else:
            self.store.save(key, [])
            logger.info(f"Cleared inactive cart {key}")

    # ==================== Derived reads ====================

    def total_cents(self) -> int:
        return sum(line.line_total_cents for line in self._cart.lines)

    def total_quantity(self) -> int:
        return sum(line.quantity for line in self._cart.lines)

    # ==================== Internals ====================

    def _index_of(self, product_id: str) -> Optional[int]:
        return next(
            (i for i, line in enumerate(self._cart.lines) if line.product_id == product_id),
            None,
        )

    def _load(self, key: str) -> Cart:
        lines = self.store.load(key)
        return Cart(lines=lines or [])

    def _persist(self) -> None:
        self.store.save(self._active_key, self._cart.lines)

    def _commit(self, lines: list[CartLine]) -> None:
        """Persist lines under the active key, then make them the in-memory cart"""
        self.store.save(self._active_key, lines)
        self._cart.lines = lines
