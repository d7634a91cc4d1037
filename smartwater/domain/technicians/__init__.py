"""Technicians domain - Field staff linked to user accounts"""

from .router import router

__all__ = ["router"]
