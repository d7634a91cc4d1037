"""Auth domain - Session login, registration and Google sign-in"""

from .router import router

__all__ = ["router"]
