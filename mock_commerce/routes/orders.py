"""Order API routes for mock commerce API"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from ..database.orders import InsufficientStock, OrderDatabase
from ..models.order import CreateOrderRequest, Order, OrderPage, OrderStatus, UpdateStatusRequest
from ..models.product import Pagination
from ..security.auth import Caller, require_admin, require_user
from .deps import get_order_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


def _owned_order(orders: OrderDatabase, order_id: str, caller: Caller) -> Order:
    """Orders of other users are reported as missing"""
    order = orders.get_order(order_id)
    if not order or (order.user_id != caller.user_id and not caller.is_admin):
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("", response_model=Order, status_code=201)
async def create_order(
    request: CreateOrderRequest,
    idempotency_key: Optional[str] = Header(None),
    caller: Caller = Depends(require_user),
    orders: OrderDatabase = Depends(get_order_db),
):
    """Create an order; prices come from the catalogue, never from the client"""
    try:
        order = orders.create_order(caller.user_id, request.items, idempotency_key=idempotency_key)
    except InsufficientStock as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Order {order.id} created for {caller.user_id}: {order.total_cents} cents")
    return order


@router.get("", response_model=OrderPage)
async def list_all_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    caller: Caller = Depends(require_admin),
    orders: OrderDatabase = Depends(get_order_db),
):
    """List every order (admin)"""
    data, total, total_pages = orders.list_orders(page=page, limit=limit)
    return OrderPage(
        data=data,
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages),
    )


@router.get("/my", response_model=OrderPage)
async def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    caller: Caller = Depends(require_user),
    orders: OrderDatabase = Depends(get_order_db),
):
    """List the caller's orders, newest first"""
    data, total, total_pages = orders.list_orders(user_id=caller.user_id, page=page, limit=limit)
    return OrderPage(
        data=data,
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages),
    )


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    caller: Caller = Depends(require_user),
    orders: OrderDatabase = Depends(get_order_db),
):
    """Get order details"""
    return _owned_order(orders, order_id, caller)


@router.post("/{order_id}/pay", response_model=Order)
async def pay_order(
    order_id: str,
    caller: Caller = Depends(require_user),
    orders: OrderDatabase = Depends(get_order_db),
):
    """
    Pay a created order.

    Injected faults:
    - reject: 402, nothing committed
    - fail: 503, nothing committed
    - commit_then_fail: payment committed, then 503
    """
    order = _owned_order(orders, order_id, caller)
    if order.status != OrderStatus.CREATED:
        raise HTTPException(status_code=409, detail=f"Order is {order.status.value}")

    fault = orders.take_payment_fault(order_id)
    if fault == "reject":
        raise HTTPException(status_code=402, detail="Payment declined")
    if fault == "fail":
        raise HTTPException(status_code=503, detail="Payment service unavailable")

    order = orders.update_status(order_id, OrderStatus.PAID)
    if fault == "commit_then_fail":
        logger.info(f"Order {order_id} paid, reporting failure to the client")
        raise HTTPException(status_code=503, detail="Payment service unavailable")

    logger.info(f"Order {order_id} paid by {caller.user_id}")
    return order


@router.put("/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: str,
    request: UpdateStatusRequest,
    caller: Caller = Depends(require_admin),
    orders: OrderDatabase = Depends(get_order_db),
):
    """Set an order's status (admin)"""
    order = orders.update_status(order_id, request.status)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    logger.info(f"Order {order_id} set to {request.status.value} by admin")
    return order
