"""Work orders domain - Jobs with checklists, parts, time tracking and crews"""

from .router import router

__all__ = ["router"]
