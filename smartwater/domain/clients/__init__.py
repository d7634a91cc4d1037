"""Clients domain - Pool owners and properties serviced by an organization"""

from .router import router

__all__ = ["router"]
