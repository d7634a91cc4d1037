"""Vendors domain - Suppliers of chemicals, parts and services"""

from .router import router

__all__ = ["router"]
