"""
Security utilities: password hashing, secret encryption and token generation
"""

import base64
import hashlib
import logging
import secrets
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

# Password hashing
from passlib.context import CryptContext

from .config import SECRET_KEY

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def is_bcrypt_hash(stored_password: Optional[str]) -> bool:
    return bool(stored_password) and stored_password.startswith(BCRYPT_PREFIXES)


def verify_password(plain_password: str, stored_password: Optional[str]) -> bool:
    """
    Verify a password against the stored value.

    Accounts created before hashing was introduced still hold plain text;
    those compare directly and should be re-hashed by the caller
    (see password_needs_upgrade).
    """
    if not stored_password or not plain_password:
        # OAuth-only accounts have no password
        return False

    if is_bcrypt_hash(stored_password):
        try:
            return pwd_context.verify(plain_password, stored_password)
        except ValueError as e:
            logger.error(f"Password verification error: {e}")
            return False

    return secrets.compare_digest(plain_password.encode(), stored_password.encode())


def password_needs_upgrade(stored_password: Optional[str]) -> bool:
    return bool(stored_password) and not is_bcrypt_hash(stored_password)


# ============================================================================
# SECRET ENCRYPTION
# ============================================================================


def _get_cipher_suite() -> Fernet:
    key = base64.urlsafe_b64encode(hashlib.sha256(SECRET_KEY.encode()).digest())
    return Fernet(key)


def encrypt_secret(value: Optional[str]) -> Optional[str]:
    """Encrypt a credential for storage (None passes through)"""
    if value is None:
        return None
    return _get_cipher_suite().encrypt(value.encode()).decode()


def decrypt_secret(value: Optional[str]) -> Optional[str]:
    """Decrypt a stored credential. Returns None if the token is unreadable."""
    if value is None:
        return None
    try:
        return _get_cipher_suite().decrypt(value.encode()).decode()
    except InvalidToken:
        logger.error("❌ Failed to decrypt stored secret (SECRET_KEY changed?)")
        return None


# ============================================================================
# TOKEN GENERATION
# ============================================================================


def generate_secure_token(length: int = 32) -> str:
    """Generate a cryptographically secure random token"""
    return secrets.token_urlsafe(length)


def generate_state_token() -> str:
    """32 random bytes, hex encoded"""
    return secrets.token_hex(32)
