"""Repairs domain - Client-reported equipment problems"""

from .router import router

__all__ = ["router"]
