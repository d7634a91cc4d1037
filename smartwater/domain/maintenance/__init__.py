"""Maintenance domain - One-off service visits and recurring maintenance orders"""

from .router import orders_router, router

__all__ = ["router", "orders_router"]
