"""Chemicals domain - Chemical price list and usage recorded on visits"""

from .router import prices_router, usage_router

__all__ = ["prices_router", "usage_router"]
