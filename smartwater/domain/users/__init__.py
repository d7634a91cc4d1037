"""Users domain - Organization membership and user administration"""

from .router import organizations_router, router

__all__ = ["router", "organizations_router"]
