"""
Customer Module - Service Layer
=================================
Profile maintenance and the address book.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from config.database import transaction
from config.settings import DEFAULT_PROFILE_IMAGE
from common.exceptions import ValidationError, DuplicateError, NotFoundError
from common.helpers import normalize_email
from common.images import is_valid_image_url
from common.security import hash_password, verify_password, password_too_long, MAX_PASSWORD_BYTES
from modules.customer.address_models import Address
from modules.user.models import User

logger = logging.getLogger("blackbasket.customer")

MIN_PASSWORD_LENGTH = 6

SHIPPING_FIELDS = ("first_name", "last_name", "email", "phone", "address", "city", "postal_code")


class AddressService:

    def _live(self, db: Session, user_id: int):
        return db.query(Address).filter(
            Address.user_id == user_id,
            Address.deleted_at.is_(None),
        )

    def list_addresses(self, db: Session, user_id: int) -> List[Address]:
        return self._live(db, user_id).order_by(
            Address.is_default.desc(), Address.id.desc(),
        ).all()

    def add_address(self, db: Session, user_id: int, data: dict) -> Address:
        """
        Save a new address. Flagging it default clears the flag elsewhere;
        a user's first address becomes default automatically.
        Caller owns the commit.
        """
        has_any = self._live(db, user_id).first() is not None
        is_default = bool(data.get("is_default")) or not has_any

        if is_default:
            self._live(db, user_id).update({"is_default": False}, synchronize_session="fetch")

        address = Address(
            user_id=user_id,
            is_default=is_default,
            **{f: (data.get(f) or "").strip() for f in SHIPPING_FIELDS},
        )
        db.add(address)
        db.flush()
        return address

    def create(self, db: Session, user_id: int, data: dict) -> Address:
        if not (data.get("address") or "").strip():
            raise ValidationError("Address is required")
        with transaction(db):
            address = self.add_address(db, user_id, data)
        db.refresh(address)
        return address

    def resolve_shipping_address(self, db: Session, user_id: int) -> Optional[Address]:
        """Default address first, otherwise any address, otherwise None."""
        address = self._live(db, user_id).filter(Address.is_default == True).first()
        if address:
            return address
        return self._live(db, user_id).order_by(Address.id.asc()).first()


class ProfileService:

    def get_user(self, db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()
        if not user:
            raise NotFoundError("Cannot find user")
        return user

    def update_profile(self, db: Session, user_id: int, data: dict) -> User:
        """Update name/email/image and the first address's phone + street line."""
        name = (data.get("name") or "").strip()
        email = normalize_email(data.get("email"))
        if not name or not email:
            raise ValidationError("Name and email are required")

        image_url = data.get("profile_image_url") or ""
        if image_url and not is_valid_image_url(image_url):
            raise ValidationError("Invalid profile image URL format")

        user = self.get_user(db, user_id)

        if user.email != email:
            taken = db.query(User).filter(User.email == email, User.id != user_id).first()
            if taken:
                raise DuplicateError("Email is already taken by another user")

        with transaction(db):
            user.name = name
            user.email = email
            user.profile_image_url = image_url or DEFAULT_PROFILE_IMAGE

            phone = (data.get("phone") or "").strip()
            street = (data.get("address") or "").strip()
            first = address_service._live(db, user_id).order_by(Address.id.asc()).first()
            if first:
                first.phone = phone
                first.address = street
            else:
                address_service.add_address(db, user_id, {"phone": phone, "address": street})

        db.refresh(user)
        return user

    def update_profile_image(self, db: Session, user_id: int, image_url: str) -> User:
        image_url = image_url or DEFAULT_PROFILE_IMAGE
        if not is_valid_image_url(image_url):
            raise ValidationError("Invalid profile image URL format")

        user = self.get_user(db, user_id)
        with transaction(db):
            user.profile_image_url = image_url
        return user

    def change_password(self, db: Session, user_id: int, current_password: str, new_password: str):
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if password_too_long(new_password):
            raise ValidationError(f"New password must be at most {MAX_PASSWORD_BYTES} bytes")

        user = self.get_user(db, user_id)
        if not user.has_password:
            raise ValidationError("This account signs in through a social provider and has no password")
        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        with transaction(db):
            user.password_hash = hash_password(new_password)
        logger.info(f"User #{user_id} changed password")


# Singletons
address_service = AddressService()
profile_service = ProfileService()
