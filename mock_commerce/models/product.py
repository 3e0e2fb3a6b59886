"""Product models for mock commerce API"""

from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Product(BaseModel):
    """Product in the catalog"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: Optional[str] = None
    price_cents: int = Field(gt=0)
    image_base64: Optional[str] = None
    stock: int = Field(ge=0, default=100)
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int


class ProductPage(BaseModel):
    """Paginated product listing"""
    data: list[Product]
    pagination: Pagination
