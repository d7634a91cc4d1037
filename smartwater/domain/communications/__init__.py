"""Communications domain - Email and SMS provider credentials"""

from .router import router

__all__ = ["router"]
