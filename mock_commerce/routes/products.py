"""Product API routes for mock commerce API"""

from fastapi import APIRouter, Depends, HTTPException, Query

from ..database.products import ProductDatabase
from ..models.product import Pagination, Product, ProductPage
from .deps import get_product_db

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductPage)
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    exclude_out_of_stock: bool = Query(False, alias="excludeOutOfStock"),
    products: ProductDatabase = Depends(get_product_db),
):
    """List active products page by page"""
    data, total, total_pages = products.list_products(
        page=page,
        limit=limit,
        exclude_out_of_stock=exclude_out_of_stock,
    )
    return ProductPage(
        data=data,
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages),
    )


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    products: ProductDatabase = Depends(get_product_db),
):
    """Get a product by ID"""
    product = products.get_product(product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
