"""
CSRF Protection Middleware for FastAPI

Double-submit cookie pattern:
- A random token is set in the csrf_token cookie
- State-changing requests (POST, PUT, PATCH, DELETE) must echo it in X-CSRF-Token
- OAuth redirects and health/doc endpoints are exempt
"""

import logging
import os
import secrets
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_COOKIE_SECURE = os.getenv("CSRF_COOKIE_SECURE", "false").lower() == "true"
CSRF_COOKIE_MAX_AGE = 86400

# Methods that require CSRF protection
PROTECTED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

# Path prefixes exempt from CSRF protection
EXEMPT_PATHS: list[str] = [
    "/api/auth/google",  # OAuth redirects carry their own state parameter
    "/api/health",
    "/health",
    "/docs",
    "/openapi.json",
    "/csrf-token",
]


def generate_csrf_token() -> str:
    """Generate a cryptographically secure CSRF token"""
    return secrets.token_urlsafe(32)


def is_path_exempt(path: str) -> bool:
    """Check if a path is exempt from CSRF protection"""
    return any(path.startswith(exempt) for exempt in EXEMPT_PATHS)


def set_csrf_cookie(response: Response, token: str) -> None:
    # Readable by the frontend so it can copy the value into the header
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=token,
        httponly=False,
        secure=CSRF_COOKIE_SECURE,
        samesite="lax",
        max_age=CSRF_COOKIE_MAX_AGE,
        path="/",
    )


def _reject(request: Request, reason: str) -> JSONResponse:
    logger.warning(f"🚫 CSRF: {reason} for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=403,
        content={"detail": f"CSRF token {reason}. Please refresh the page and try again."},
    )


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    CSRF Protection Middleware using double-submit cookie pattern.

    1. If no CSRF cookie exists, one is set on the response
    2. For state-changing requests the X-CSRF-Token header must match the cookie
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        csrf_cookie = request.cookies.get(CSRF_COOKIE_NAME)

        needs_validation = request.method in PROTECTED_METHODS and not is_path_exempt(
            request.url.path
        )

        if needs_validation:
            csrf_header = request.headers.get(CSRF_HEADER_NAME)

            if not csrf_cookie:
                return _reject(request, "missing")
            if not csrf_header:
                return _reject(request, "header missing")
            # Constant-time comparison
            if not secrets.compare_digest(csrf_cookie, csrf_header):
                return _reject(request, "invalid")

            logger.debug(f"✅ CSRF: Valid token for {request.method} {request.url.path}")

        response = await call_next(request)

        if not csrf_cookie:
            set_csrf_cookie(response, generate_csrf_token())
            logger.debug("🔑 CSRF: Set new token cookie")

        return response
