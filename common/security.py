"""
Blackbasket - Security Utilities
==================================
JWT tokens, password hashing, and bearer token parsing.
"""

import logging
from datetime import timedelta
from typing import Optional

import bcrypt
from jose import jwt, JWTError

from config.settings import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, TOKEN_ISSUER
from common.helpers import now_utc

logger = logging.getLogger("blackbasket.security")

# bcrypt only reads the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


# ==========================================
# Passwords
# ==========================================

def password_too_long(raw_password: str) -> bool:
    return len((raw_password or "").encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(raw_password: str) -> str:
    """bcrypt over the UTF-8 password, stored as text."""
    return bcrypt.hashpw(raw_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(raw_password: str, stored_hash: Optional[str]) -> bool:
    if not raw_password or not stored_hash or password_too_long(raw_password):
        return False
    try:
        return bcrypt.checkpw(raw_password.encode("utf-8"), stored_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        logger.warning("Stored password hash could not be parsed")
        return False


# ==========================================
# JWT Tokens
# ==========================================

def create_token(user_id: int, email: str) -> str:
    """Create a signed access token for a user."""
    now = now_utc()
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "iss": TOKEN_ISSUER,
        "iat": now,
        "exp": now + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify an access token. Returns payload or None."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM], issuer=TOKEN_ISSUER)
    except JWTError:
        return None


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer <token>` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
