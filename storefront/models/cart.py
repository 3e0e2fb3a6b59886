"""Cart models"""

from typing import Optional
from enum import Enum
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CartLine(BaseModel):
    """One product's presence in a cart; persisted with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: str
    display_name: str
    unit_price_cents: int = Field(ge=0)
    image_ref: Optional[str] = None
    quantity: int = Field(ge=1)
    known_stock: int = Field(ge=0)

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


class Cart(BaseModel):
    """Ordered collection of lines, unique by product_id"""
    lines: list[CartLine] = []

    def find(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    @property
    def is_empty(self) -> bool:
        return not self.lines


class CartSignal(str, Enum):
    """Outcome of addOrReplace"""
    APPLIED = "applied"
    CLAMPED_TO_STOCK = "clamped_to_stock"
    OUT_OF_STOCK = "out_of_stock"


@dataclass
class AddResult:
    """Result of adding or replacing a line"""
    signal: CartSignal
    requested_quantity: int
    line: Optional[CartLine] = None

    @property
    def clamped(self) -> bool:
        return self.signal == CartSignal.CLAMPED_TO_STOCK
