"""Marketplace HTTP API package."""

from marketplace.api.dependencies import domain_context_middleware
from marketplace.api.errors import register_exception_handlers
from marketplace.api.routes import order_router, product_router, shop_router

__all__ = [
    "domain_context_middleware",
    "order_router",
    "product_router",
    "register_exception_handlers",
    "shop_router",
]
