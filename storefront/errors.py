"""Exceptions raised by the storefront cart and order core."""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for all storefront errors"""
    pass


class ExceedsStock(StorefrontError):
    """Quantity update refused: it is above the line's last known stock"""

    def __init__(self, product_id: str, requested: int, known_stock: int):
        self.product_id = product_id
        self.requested = requested
        self.known_stock = known_stock
        super().__init__(
            f"Requested {requested} of {product_id}, only {known_stock} in stock"
        )


class EmptyCart(StorefrontError):
    """Raised when submitting a cart with no lines"""

    def __init__(self):
        super().__init__("Cart is empty")


class SubmissionInProgress(StorefrontError):
    """Raised when a submit is attempted while another is still in flight"""

    def __init__(self):
        super().__init__("An order submission is already in progress")


class TransportFailure(StorefrontError):
    """Network or HTTP layer failure; the request outcome is unknown"""

    def __init__(self, method: str, url: str, reason: str, timed_out: bool = False):
        self.method = method
        self.url = url
        self.reason = reason
        self.timed_out = timed_out
        super().__init__(f"{method} {url} failed: {reason}")


class ApiError(StorefrontError):
    """The commerce API answered with an HTTP error status"""

    def __init__(self, method: str, url: str, status_code: int, detail: Optional[str] = None):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.detail = detail
        msg = f"{method} {url} returned {status_code}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class ServerRejected(StorefrontError):
    """The server refused the request (e.g. a line now exceeds live stock)"""

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(detail or f"Request rejected with status {status_code}")


class NotFound(StorefrontError):
    """Order does not exist or does not belong to the caller"""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class PaymentRejected(StorefrontError):
    """The server declined the payment; the order stays created"""

    def __init__(self, order_id: str, status_code: int, detail: Optional[str] = None):
        self.order_id = order_id
        self.status_code = status_code
        self.detail = detail
        msg = f"Payment rejected for order {order_id}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class Indeterminate(StorefrontError):
    """Payment outcome unknown; the server may have committed it"""

    def __init__(self, order_id: str, reason: str):
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"Payment outcome for order {order_id} is unknown: {reason}")


class CartStoreError(StorefrontError):
    """Persisted cart data could not be read"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read cart store at {path}: {reason}")
