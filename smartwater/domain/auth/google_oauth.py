"""
Google OAuth client

Authorization-code flow for "Sign in with Google": build the consent URL,
exchange the code and fetch the user's profile.
"""

import logging
from urllib.parse import urlencode

import httpx

from ...config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI
from .schemas import GoogleProfile

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_SCOPES = ["openid", "email", "profile"]


class GoogleOAuthError(Exception):
    """Google rejected the code or returned an unusable response"""


def is_configured() -> bool:
    return bool(GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET)


def build_authorization_url(state: str) -> str:
    params = {
        "client_id": GOOGLE_CLIENT_ID,
        "redirect_uri": GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(GOOGLE_SCOPES),
        "access_type": "offline",
        "prompt": "select_account",
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def exchange_code_for_profile(code: str) -> tuple[GoogleProfile, dict]:
    """
    Exchange an authorization code for tokens and the user's profile.

    Returns (profile, tokens). tokens holds access_token, refresh_token
    (only on first consent) and expires_in. Network failures and
    malformed responses surface as GoogleOAuthError.
    """
    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            token_response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": GOOGLE_CLIENT_ID,
                    "client_secret": GOOGLE_CLIENT_SECRET,
                    "redirect_uri": GOOGLE_REDIRECT_URI,
                    "grant_type": "authorization_code",
                },
            )

            if token_response.status_code != 200:
                logger.error(f"❌ Token exchange failed: {token_response.text}")
                raise GoogleOAuthError("Failed to exchange authorization code")

            tokens = token_response.json()
            access_token = tokens.get("access_token")
            if not access_token:
                raise GoogleOAuthError("Invalid token response")

            user_info_response = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )

            if user_info_response.status_code != 200:
                logger.error(f"❌ Failed to get user info: {user_info_response.text}")
                raise GoogleOAuthError("Failed to get user info")

        user_info = user_info_response.json()
    except httpx.HTTPError as e:
        logger.error(f"❌ Google OAuth request failed: {e!r}")
        raise GoogleOAuthError("Could not reach Google") from e
    except ValueError as e:
        logger.error(f"❌ Google returned malformed JSON: {e}")
        raise GoogleOAuthError("Malformed response from Google") from e

    if not user_info.get("id") or not user_info.get("email"):
        raise GoogleOAuthError("Google profile is missing id or email")

    return GoogleProfile(**user_info), tokens
