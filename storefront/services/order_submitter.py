"""
Order Submitter

One-shot conversion of the active cart into a server-side order.
"""

import uuid
import logging

from ..errors import ApiError, EmptyCart, ServerRejected, SubmissionInProgress, TransportFailure
from ..models.cart import CartLine
from ..models.order import Order
from .commerce_client import CommerceClient

logger = logging.getLogger(__name__)


class OrderSubmitter:
    """
    Sends cart lines to POST /orders.

    Prices are never sent: the server recomputes them from its own
    catalogue. Clearing the cart after acceptance is the caller's job;
    once cleared, a retried submit fails with EmptyCart instead of
    creating a second order.
    """

    def __init__(self, client: CommerceClient):
        self.client = client
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def submit(self, lines: list[CartLine]) -> Order:
        """
        Create an order from cart lines.

        Raises:
            EmptyCart: No lines to submit.
            SubmissionInProgress: Another submit has not finished yet.
            ServerRejected: The server refused the order (4xx), cart untouched.
            TransportFailure: Network failure or server error, cart untouched.
        """
        if not lines:
            raise EmptyCart()

        if self._in_flight:
            raise SubmissionInProgress()

        items = [{"productId": line.product_id, "quantity": line.quantity} for line in lines]
        idempotency_key = str(uuid.uuid4())

        self._in_flight = True
        try:
            order = await self.client.create_order(items, idempotency_key=idempotency_key)
        except ApiError as e:
            if e.is_client_error:
                logger.warning(f"Order rejected by server: {e.status_code} {e.detail}")
                raise ServerRejected(e.status_code, e.detail) from e
            raise TransportFailure(e.method, e.url, f"server error {e.status_code}") from e
        finally:
            self._in_flight = False

        logger.info(f"Order {order.id} created: {order.total_cents} cents, {len(order.items)} item(s)")
        return order
