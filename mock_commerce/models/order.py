"""Order models for mock commerce API"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .product import Pagination


class OrderStatus(str, Enum):
    CREATED = "created"
    PAID = "paid"
    CANCELLED = "cancelled"


class OrderLineRequest(BaseModel):
    """Line of a create-order request; clients never send prices"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: str
    quantity: int = Field(gt=0)


class CreateOrderRequest(BaseModel):
    items: list[OrderLineRequest] = Field(min_length=1)


class UpdateStatusRequest(BaseModel):
    status: OrderStatus


class OrderItem(BaseModel):
    """Item in an order, priced by the server"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: str
    quantity: int
    unit_price_cents: int


class Order(BaseModel):
    """Server-side order"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    status: OrderStatus
    total_cents: int
    items: list[OrderItem]
    created_at: datetime
    updated_at: datetime


class OrderPage(BaseModel):
    data: list[Order]
    pagination: Pagination
