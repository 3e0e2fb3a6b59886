"""Database dependencies resolved from the application state"""

from fastapi import Request

from ..database.orders import OrderDatabase
from ..database.products import ProductDatabase


def get_product_db(request: Request) -> ProductDatabase:
    return request.app.state.product_db


def get_order_db(request: Request) -> OrderDatabase:
    return request.app.state.order_db
