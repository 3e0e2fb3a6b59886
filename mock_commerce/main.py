"""
Mock Commerce Application

An in-memory commerce API (products, orders, payment) for developing
and testing the storefront client.
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .database.orders import OrderDatabase, order_db
from .database.products import ProductDatabase, product_db
from .routes import orders_router, products_router

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Mock Commerce starting up...")
    logger.info(f"Catalogue: {len(app.state.product_db.products)} products")
    yield
    logger.info("Mock Commerce shutting down...")


def create_app(
    products: Optional[ProductDatabase] = None,
    orders: Optional[OrderDatabase] = None,
) -> FastAPI:
    """Create the API; tests pass their own databases"""
    app = FastAPI(
        title="Mock Commerce",
        description="Simulated commerce API for the storefront client",
        version="1.0.0",
        lifespan=lifespan,
    )

    products = products or product_db
    app.state.product_db = products
    app.state.order_db = orders or (order_db if products is product_db else OrderDatabase(products))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(products_router)
    app.include_router(orders_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "mock-commerce"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mock_commerce.main:app",
        host=os.getenv("MOCK_COMMERCE_HOST", "0.0.0.0"),
        port=int(os.getenv("MOCK_COMMERCE_PORT", "3000")),
        reload=True,
    )
