"""
Auth Module - Dependencies
===========================
FastAPI dependencies for user authentication.
These are injected into route handlers via Depends().

Routes receive the resolved User; services receive user.id explicitly.
"""

from typing import Optional

from fastapi import Request, Depends, HTTPException, status
from sqlalchemy.orm import Session

from config.database import get_db
from common.security import decode_token, parse_bearer
from common.helpers import safe_int
from modules.user.models import User


def get_current_active_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """
    Identify the current user from the Authorization bearer token.
    Returns User object or None.
    """
    token = parse_bearer(request.headers.get("Authorization"))
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    user_id = safe_int(payload.get("sub"))
    if not user_id:
        return None

    return db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()


def require_login(user: Optional[User] = Depends(get_current_active_user)) -> User:
    """Require an authenticated user. Raises 401 if not logged in."""
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not authenticated")
    return user
