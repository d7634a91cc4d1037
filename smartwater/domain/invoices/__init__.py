"""Invoices domain - Client billing with line items and recorded payments"""

from .router import router

__all__ = ["router"]
