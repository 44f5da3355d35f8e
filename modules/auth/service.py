"""
Auth Module - Service Layer
=============================
Business logic for signup, password signin, and verified social login.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from config.database import transaction
from config.settings import DEFAULT_PROFILE_IMAGE
from common.exceptions import (
    ValidationError, AuthenticationError, DuplicateError, ServiceUnavailableError,
)
from common.helpers import normalize_email
from common.images import is_valid_image_url
from common.security import (
    hash_password, verify_password, create_token, password_too_long, MAX_PASSWORD_BYTES,
)
from modules.auth.identity import get_provider, IdentityVerificationError
from modules.customer.address_models import Address
from modules.user.models import User, AuthProvider

logger = logging.getLogger("blackbasket.auth")


def token_response(user: User) -> dict:
    """Bearer token plus the public profile fields the client caches."""
    return {
        "token_type": "Bearer",
        "token": create_token(user.id, user.email),
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "profile_image_url": user.profile_image_url,
    }


class AuthService:
    """Handles all authentication logic: account creation, signin, and token issuance."""

    def find_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(
            User.email == normalize_email(email),
            User.deleted_at.is_(None),
        ).first()

    def signup(
        self, db: Session, name: str, email: str, password: str,
        phone: str = "", address: str = "", profile_image_url: str = "",
    ) -> User:
        """
        Create a password account.
        An initial default address is saved when phone or address is supplied.
        """
        name = (name or "").strip()
        email = normalize_email(email)
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")
        if password_too_long(password):
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        if not is_valid_image_url(profile_image_url):
            raise ValidationError("Invalid profile image URL format")

        if self.find_by_email(db, email):
            raise DuplicateError("Email is already registered")

        try:
            with transaction(db):
                user = User(
                    name=name,
                    email=email,
                    password_hash=hash_password(password),
                    auth_provider=AuthProvider.PASSWORD,
                    profile_image_url=profile_image_url or DEFAULT_PROFILE_IMAGE,
                )
                db.add(user)
                db.flush()

                if (phone or "").strip() or (address or "").strip():
                    db.add(Address(
                        user_id=user.id,
                        phone=(phone or "").strip(),
                        address=(address or "").strip(),
                        is_default=True,
                    ))
        except IntegrityError:
            raise DuplicateError("Email is already registered")

        db.refresh(user)
        logger.info(f"User #{user.id} signed up")
        return user

    def signin(self, db: Session, email: str, password: str) -> User:
        user = self.find_by_email(db, email)
        if not user:
            raise AuthenticationError("email not found")
        if not verify_password(password, user.password_hash):
            raise AuthenticationError("password is incorrect")
        return user

    def social_login(self, db: Session, provider_name: str, token: str) -> User:
        """
        Sign in (or sign up) through a registered identity provider.
        The provider must verify the token; there is no unverified fallback.
        """
        if not token:
            raise ValidationError("Invalid request")

        provider = get_provider(provider_name or "")
        if not provider:
            raise ServiceUnavailableError(f"Social login provider '{provider_name}' is not available")

        try:
            identity = provider.verify(token)
        except IdentityVerificationError as e:
            logger.warning(f"Social login rejected (provider={provider_name}): {e}")
            raise AuthenticationError("Invalid identity token")

        email = normalize_email(identity.email)
        if not email:
            raise ValidationError("Could not extract email from token")
        if not identity.email_verified:
            raise ValidationError("Email address is not verified")

        user = self.find_by_email(db, email)
        if user:
            logger.info(f"Social login for existing user #{user.id} via {provider.name}")
            return user

        with transaction(db):
            user = User(
                name=identity.name or email.split("@")[0],
                email=email,
                password_hash=None,
                auth_provider=provider.name,
                profile_image_url=DEFAULT_PROFILE_IMAGE,
            )
            db.add(user)

        db.refresh(user)
        logger.info(f"Social login created user #{user.id} via {provider.name}")
        return user


# Singleton
auth_service = AuthService()
