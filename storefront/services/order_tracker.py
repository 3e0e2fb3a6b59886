"""
Order Lifecycle Tracker

Caches orders and drives the created -> paid transition. Payment
attempts end in one of three outcomes: confirmed, rejected, or
indeterminate. An indeterminate outcome schedules exactly one delayed
re-fetch of the order, because the server may have committed the
payment even though the client never saw the response.
"""

import asyncio
import logging
from typing import Optional

from ..errors import ApiError, Indeterminate, NotFound, PaymentRejected, ServerRejected, TransportFailure
from ..models.order import Order, OrderPage, OrderStatus, PaymentOutcome, PaymentResult
from .commerce_client import CommerceClient

logger = logging.getLogger(__name__)

PROCESSING = "processing"


class OrderTracker:
    """
    Read replica of server orders plus the pay action.

    At most one pay request and one follow-up re-fetch exist per order at
    a time. A pay call made while another is in flight waits on the same
    request. Cancelling a caller that is awaiting pay only cancels its
    wait; the request and any re-fetch it schedules run to completion.
    """

    def __init__(self, client: CommerceClient, reverify_delay: float = 1.0):
        self.client = client
        self.reverify_delay = reverify_delay
        self._orders: dict[str, Order] = {}
        self._payments: dict[str, asyncio.Task] = {}
        self._reverifications: dict[str, asyncio.Task] = {}

    def cached(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def track(self, order: Order) -> Order:
        """Seed the cache with an order obtained elsewhere (e.g. just submitted)"""
        self._orders[order.id] = order
        return order

    async def load(self, order_id: str) -> Order:
        """
        Fetch the current order state from the server.

        Raises:
            NotFound: The order does not exist or belongs to someone else.
        """
        try:
            order = await self.client.get_order(order_id)
        except ApiError as e:
            if e.status_code in (403, 404):
                raise NotFound(order_id) from e
            if e.is_client_error:
                raise ServerRejected(e.status_code, e.detail) from e
            raise TransportFailure(e.method, e.url, f"server error {e.status_code}") from e

        self._orders[order_id] = order
        return order

    async def list_my_orders(self, page: int = 1, limit: int = 10) -> OrderPage:
        """Fetch a page of the caller's orders and refresh the cache with it"""
        result = await self.client.list_my_orders(page=page, limit=limit)
        for order in result.data:
            if not self.is_processing(order.id):
                self._orders[order.id] = order
        return result

    # ==================== State queries ====================

    def allowed_actions(self, order_id: str) -> set[str]:
        order = self._orders.get(order_id)
        if order is None:
            return set()
        if order.status == OrderStatus.CREATED and not self.is_processing(order_id):
            return {"view", "pay"}
        return {"view"}

    def is_processing(self, order_id: str) -> bool:
        return order_id in self._payments or order_id in self._reverifications

    def display_state(self, order_id: str) -> Optional[str]:
        """Status to show the user; 'processing' while a payment is unresolved"""
        if self.is_processing(order_id):
            return PROCESSING
        order = self._orders.get(order_id)
        return order.status.value if order else None

    # ==================== Payment ====================

    async def pay(self, order_id: str) -> PaymentResult:
        """
        Pay a created order.

        Paid or cancelled orders are returned unchanged without a network
        call. While a re-verification is pending the order is reported as
        indeterminate and no new request is sent.
        """
        order = self._orders.get(order_id)
        if order is None:
            order = await self.load(order_id)

        if order.status.is_terminal:
            return PaymentResult(outcome=PaymentOutcome.UNCHANGED, order=order)

        if order_id in self._reverifications:
            return PaymentResult(
                outcome=PaymentOutcome.INDETERMINATE,
                order=order,
                reason="awaiting re-verification",
            )

        task = self._payments.get(order_id)
        if task is None:
            task = asyncio.create_task(self._pay(order_id))
            self._payments[order_id] = task
            task.add_done_callback(lambda t: self._forget(self._payments, order_id, t))
        else:
            logger.info(f"Payment for order {order_id} already in flight, waiting on it")

        return await asyncio.shield(task)

    async def _pay(self, order_id: str) -> PaymentResult:
        try:
            order = await self.client.pay_order(order_id)
        except TransportFailure as e:
            return self._indeterminate(order_id, e.reason)
        except ApiError as e:
            # 404 on pay is treated as transient: the order may be mid-commit
            if e.status_code == 404 or not e.is_client_error:
                return self._indeterminate(order_id, f"status {e.status_code}")
            if e.status_code == 409:
                return await self._resolve_conflict(order_id, e.detail)

            error = PaymentRejected(order_id, e.status_code, e.detail)
            logger.warning(str(error))
            return PaymentResult(
                outcome=PaymentOutcome.REJECTED,
                order=self._orders[order_id],
                reason=e.detail,
                error=error,
            )

        self._orders[order_id] = order
        if order.status != OrderStatus.PAID:
            return self._indeterminate(order_id, f"server reported status {order.status.value}")

        logger.info(f"Order {order_id} paid")
        return PaymentResult(outcome=PaymentOutcome.CONFIRMED, order=order)

    async def _resolve_conflict(self, order_id: str, detail: Optional[str]) -> PaymentResult:
        """
        The server refused pay because the order is not payable any more.

        The cached status is stale, so the order is re-read instead of
        being reported as rejected.
        """
        try:
            order = await self.client.get_order(order_id)
        except (TransportFailure, ApiError) as e:
            return self._indeterminate(order_id, f"conflict, re-read failed: {e}")

        self._orders[order_id] = order
        if order.status.is_terminal:
            logger.info(f"Order {order_id} is already {order.status.value}")
            return PaymentResult(outcome=PaymentOutcome.UNCHANGED, order=order, reason=detail)

        return self._indeterminate(order_id, f"conflict on a {order.status.value} order")

    def _indeterminate(self, order_id: str, reason: str) -> PaymentResult:
        error = Indeterminate(order_id, reason)
        logger.warning(f"{error}; re-fetching in {self.reverify_delay}s")

        if order_id not in self._reverifications:
            task = asyncio.create_task(self._reverify(order_id))
            self._reverifications[order_id] = task
            task.add_done_callback(lambda t: self._forget(self._reverifications, order_id, t))

        return PaymentResult(
            outcome=PaymentOutcome.INDETERMINATE,
            order=self._orders[order_id],
            reason=reason,
            error=error,
        )

    async def _reverify(self, order_id: str) -> Optional[Order]:
        await asyncio.sleep(self.reverify_delay)

        try:
            order = await self.client.get_order(order_id)
        except (TransportFailure, ApiError) as e:
            logger.error(f"Re-verification of order {order_id} failed: {e}")
            return self._orders.get(order_id)

        self._orders[order_id] = order
        logger.info(f"Re-verified order {order_id}: {order.status.value}")
        return order

    async def wait_for_reverification(self, order_id: str) -> Optional[Order]:
        """Wait for a pending re-fetch of order_id; returns the cached order"""
        task = self._reverifications.get(order_id)
        if task is not None:
            await asyncio.shield(task)
        return self._orders.get(order_id)

    async def drain(self) -> None:
        """Wait for every pending payment and re-verification to finish"""
        while self._payments or self._reverifications:
            pending = list(self._payments.values()) + list(self._reverifications.values())
            await asyncio.gather(*pending)

    @staticmethod
    def _forget(tasks: dict[str, asyncio.Task], order_id: str, task: asyncio.Task) -> None:
        if tasks.get(order_id) is task:
            del tasks[order_id]
