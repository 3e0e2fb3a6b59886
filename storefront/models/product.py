"""Product models consumed from the catalogue"""

from typing import Optional
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Product(BaseModel):
    """Product as returned by GET /products/{id}"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    price_cents: int = Field(ge=0)
    image_ref: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("imageRef", "imageBase64", "image_ref"),
    )
    stock: int = Field(ge=0, default=0)
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def snapshot(self) -> "ProductSnapshot":
        """Catalogue data captured for a cart line"""
        return ProductSnapshot(
            display_name=self.name,
            unit_price_cents=self.price_cents,
            image_ref=self.image_ref,
            stock=self.stock,
        )


class ProductSnapshot(BaseModel):
    """Display, price and stock data copied into a cart line at insertion"""
    display_name: str
    unit_price_cents: int = Field(ge=0)
    image_ref: Optional[str] = None
    stock: int = Field(ge=0)
