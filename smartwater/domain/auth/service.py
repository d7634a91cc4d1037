"""Auth service - Local credentials, self-service registration and Google account linking"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...security_utils import encrypt_secret, hash_password, password_needs_upgrade, verify_password
from ..users.repository import OrganizationRepository, UserRepository
from .schemas import GoogleProfile, RegisterRequest

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
DEFAULT_TOKEN_LIFETIME_SECONDS = 3600


class GoogleAccountInactive(Exception):
    """The Google identity belongs to a deactivated account"""


@dataclass
class GoogleSignInResult:
    user: User
    is_new_user: bool = False
    is_reactivated: bool = False


class AuthService:
    """Service layer for authentication"""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository()
        self.organizations = OrganizationRepository()

    # ------------------------------------------------------------------
    # Local credentials
    # ------------------------------------------------------------------

    def authenticate(self, username: str, password: str) -> User:
        """Verify credentials; plain-text legacy passwords are upgraded to bcrypt on success"""
        user = self.users.get_by_username(self.db, username)
        if not user and "@" in username:
            user = self.users.get_by_email(self.db, username)

        if not user:
            logger.warning(f"⚠️ Login failed: unknown user '{username}'")
            raise HTTPException(status_code=401, detail="Invalid username or password")

        if not user.active:
            logger.warning(f"⚠️ Login rejected for inactive user {user.id}")
            raise HTTPException(status_code=401, detail="Account is inactive")

        if not verify_password(password, user.password):
            logger.warning(f"⚠️ Login failed: bad password for user {user.id}")
            raise HTTPException(status_code=401, detail="Invalid username or password")

        updates = {"last_login_at": datetime.utcnow()}
        if password_needs_upgrade(user.password):
            logger.info(f"🔄 Upgrading legacy password hash for user {user.id}")
            updates["password"] = hash_password(password)

        return self.users.update_user(self.db, user, **updates)

    def register(self, data: RegisterRequest) -> User:
        """Create a new organization and its first user"""
        errors = []
        if len(data.password) < MIN_PASSWORD_LENGTH:
            errors.append("Password must be at least 8 characters")
        if data.password != data.confirmPassword:
            errors.append("Passwords don't match")
        if not data.organizationName or not data.organizationName.strip():
            errors.append("Organization name is required")
        if errors:
            raise HTTPException(
                status_code=400, detail={"message": "Validation error", "errors": errors}
            )

        if self.users.get_by_email(self.db, data.email):
            raise HTTPException(status_code=400, detail="A user with this email already exists")
        if self.users.get_by_username(self.db, data.username):
            raise HTTPException(status_code=400, detail="Username already exists")

        organization_name = data.organizationName.strip()
        try:
            organization = self.organizations.create_with_unique_slug(
                self.db, organization_name, organization_name
            )
        except RuntimeError as e:
            logger.error(f"❌ Registration failed: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e

        user = self.users.create_user(
            self.db,
            username=data.username,
            email=data.email,
            password=hash_password(data.password),
            name=data.name,
            phone=data.phone,
            role="client",
            active=True,
            organization_id=organization.id,
            auth_provider="local",
        )
        logger.info(f"✅ Registered user {user.id} with new organization {organization.id}")
        return user

    # ------------------------------------------------------------------
    # Google sign-in
    # ------------------------------------------------------------------

    def _store_google_tokens(self, user: User, tokens: dict) -> None:
        access_token = tokens.get("access_token")
        refresh_token = tokens.get("refresh_token")
        expires_in = int(tokens.get("expires_in") or DEFAULT_TOKEN_LIFETIME_SECONDS)

        if access_token:
            user.gmail_access_token = encrypt_secret(access_token)
            user.gmail_token_expiry = datetime.utcnow() + timedelta(seconds=expires_in)
        # Google only returns a refresh token on first consent; keep the old one otherwise
        if refresh_token:
            user.gmail_refresh_token = encrypt_secret(refresh_token)

    def sign_in_with_google(self, profile: GoogleProfile, tokens: Optional[dict] = None) -> GoogleSignInResult:
        """
        Resolve a Google identity to a local account.

        1. Existing account linked to this Google id
        2. Existing account with the same email: link it (reactivating if needed)
        3. Otherwise create a new organization and client user
        """
        tokens = tokens or {}
        email = profile.email.strip().lower()

        user = self.users.get_by_google_id(self.db, profile.id)
        if user:
            if not user.active:
                logger.warning(f"🚫 Google sign-in for inactive user {user.id}")
                raise GoogleAccountInactive()

            if profile.picture:
                user.photo_url = profile.picture
            self._store_google_tokens(user, tokens)
            user.last_login_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(user)
            return GoogleSignInResult(user=user)

        user = self.users.get_by_email(self.db, email)
        if user:
            is_reactivated = not user.active
            if is_reactivated:
                logger.info(f"🔄 Reactivating user {user.id} via Google sign-in")

            user.google_id = profile.id
            user.photo_url = profile.picture or user.photo_url
            user.auth_provider = "google"
            user.active = True
            self._store_google_tokens(user, tokens)
            user.last_login_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(user)
            logger.info(f"🔗 Linked Google account to existing user {user.id}")
            return GoogleSignInResult(user=user, is_reactivated=is_reactivated)

        display_name = profile.name or email.split("@")[0]
        try:
            organization = self.organizations.create_with_unique_slug(
                self.db, f"{display_name}'s Organization", display_name
            )
        except RuntimeError as e:
            logger.error(f"❌ Google sign-up failed: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e

        username = email.split("@")[0]
        if self.users.get_by_username(self.db, username):
            username = email

        user = User(
            username=username,
            email=email,
            password="",
            name=display_name,
            role="client",
            active=True,
            organization_id=organization.id,
            google_id=profile.id,
            photo_url=profile.picture,
            auth_provider="google",
            last_login_at=datetime.utcnow(),
        )
        self._store_google_tokens(user, tokens)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"✅ Created user {user.id} from Google sign-in")
        return GoogleSignInResult(user=user, is_new_user=True)
