"""Projects domain - Construction and renovation jobs with phases and crews"""

from .router import router

__all__ = ["router"]
