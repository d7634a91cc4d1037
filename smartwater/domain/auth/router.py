"""Auth router - Session login, registration and Google sign-in"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ...auth import SESSION_ID_KEY, get_optional_user, get_session_id, login_user, logout_user
from ...config import FRONTEND_URL
from ...database import get_db
from ...models import User
from ...oauth_state import consume_oauth_state, create_oauth_state
from ...rate_limiter import login_rate_limit, register_rate_limit
from ..users.service import serialize_user
from . import google_oauth
from .schemas import LoginRequest, RegisterRequest
from .service import AuthService, GoogleAccountInactive

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

DEFAULT_POST_LOGIN_PATH = "/dashboard"


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db)


def safe_redirect_path(path: Optional[str]) -> str:
    """Only same-site relative paths are allowed as post-login destinations"""
    if not path or not path.startswith("/") or path.startswith("//"):
        return DEFAULT_POST_LOGIN_PATH
    return path


def frontend_redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=f"{FRONTEND_URL}{path}", status_code=status.HTTP_302_FOUND)


# ============================================================================
# SESSION
# ============================================================================


@router.get("/session")
async def get_session(user: Optional[User] = Depends(get_optional_user)):
    """Report whether the current browser session is signed in"""
    if not user:
        return {"isAuthenticated": False}
    return {"isAuthenticated": True, "user": serialize_user(user)}


@router.post("/login")
async def login(
    data: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
    _: None = Depends(login_rate_limit),
):
    user = service.authenticate(data.username, data.password)
    login_user(request, user)
    logger.info(f"✅ User {user.id} logged in")
    return {"success": True, "message": "Login successful", "user": serialize_user(user)}


@router.post("/logout")
async def logout(request: Request, user: Optional[User] = Depends(get_optional_user)):
    if not user:
        logout_user(request)
        return {"success": True, "message": "Already logged out"}

    logout_user(request)
    logger.info(f"👋 User {user.id} logged out")
    return {"success": True, "message": "Successfully logged out"}


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
    _: None = Depends(register_rate_limit),
):
    """Create an account and a new organization, then sign in"""
    user = service.register(data)
    login_user(request, user)
    return {"success": True, "message": "Registration successful", "user": serialize_user(user)}


# ============================================================================
# GOOGLE SIGN-IN
# ============================================================================


@router.get("/google")
async def google_login(
    request: Request,
    redirectTo: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Start the Google OAuth flow"""
    if not google_oauth.is_configured():
        raise HTTPException(status_code=503, detail="Google sign-in is not configured")

    state = create_oauth_state(db, get_session_id(request), safe_redirect_path(redirectTo))
    logger.info("🔄 Starting Google OAuth authentication flow")
    return RedirectResponse(
        url=google_oauth.build_authorization_url(state), status_code=status.HTTP_302_FOUND
    )


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    error_description: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    """Handle Google's redirect back to the API"""
    if error:
        logger.warning(f"⚠️ Google returned an OAuth error: {error}")
        details = quote(error_description or error)
        return frontend_redirect(f"/login?error=google-oauth&details={details}")

    consumed = consume_oauth_state(db, state, request.session.get(SESSION_ID_KEY))
    if not consumed:
        return frontend_redirect("/login?error=invalid_state")

    if not code:
        return frontend_redirect("/login?error=no-code")

    try:
        profile, tokens = await google_oauth.exchange_code_for_profile(code)
    except google_oauth.GoogleOAuthError as e:
        logger.error(f"❌ Google OAuth exchange failed: {e}")
        return frontend_redirect("/login?error=google-oauth")

    try:
        result = service.sign_in_with_google(profile, tokens)
    except GoogleAccountInactive:
        return frontend_redirect("/login?error=account_inactive")

    login_user(request, result.user)
    logger.info(f"✅ Google sign-in complete for user {result.user.id}")

    path = safe_redirect_path(consumed.redirect_path)
    if result.is_reactivated:
        separator = "&" if "?" in path else "?"
        path = f"{path}{separator}reactivated=true"
    return frontend_redirect(path)


__all__ = [
    "router",
    "get_session",
    "login",
    "logout",
    "register",
    "google_login",
    "google_callback",
]
