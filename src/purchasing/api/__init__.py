"""Purchasing domain API package."""

from purchasing.api.errors import register_error_handlers
from purchasing.api.routes import download_router, order_router

__all__ = ["order_router", "download_router", "register_error_handlers"]
