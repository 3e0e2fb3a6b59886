"""Order models"""

from typing import Optional
from enum import Enum
from datetime import datetime
from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OrderStatus(str, Enum):
    CREATED = "created"
    PAID = "paid"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.PAID, OrderStatus.CANCELLED)


class OrderItem(BaseModel):
    """Line of a server-side order"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    product_id: str
    quantity: int = Field(gt=0)
    unit_price_cents: int = Field(ge=0)


class Order(BaseModel):
    """Server-owned order; totals are never recomputed locally"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    status: OrderStatus
    total_cents: int = Field(ge=0)
    items: list[OrderItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("items", "orderItems"),
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int


class OrderPage(BaseModel):
    """One page of GET /orders/my"""
    data: list[Order]
    pagination: Pagination


class PaymentOutcome(str, Enum):
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    INDETERMINATE = "indeterminate"
    # Order was already paid or cancelled; nothing was sent
    UNCHANGED = "unchanged"


@dataclass
class PaymentResult:
    """Three-way result of a pay attempt"""
    outcome: PaymentOutcome
    order: Order
    reason: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def pending_verification(self) -> bool:
        return self.outcome == PaymentOutcome.INDETERMINATE

    def raise_for_outcome(self) -> None:
        """Raise the rejection error, if the payment was rejected"""
        if self.outcome == PaymentOutcome.REJECTED and self.error is not None:
            raise self.error
