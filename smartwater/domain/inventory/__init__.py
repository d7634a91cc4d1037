"""Inventory domain - Stock items consumed by work orders and invoices"""

from .router import router

__all__ = ["router"]
