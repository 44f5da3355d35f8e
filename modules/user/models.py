"""
User Module - Models
=====================
Single users table for buyers and sellers alike.
A user may sign in with a password or through a verified social identity.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from config.database import Base, TimestampMixin
from config.settings import DEFAULT_PROFILE_IMAGE


class AuthProvider:
    PASSWORD = "password"


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # === Identity ===
    name = Column(String, nullable=False, default="")
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=True)       # None for social-only accounts
    auth_provider = Column(String, default=AuthProvider.PASSWORD, nullable=False)

    # === Profile ===
    profile_image_url = Column(String, default=DEFAULT_PROFILE_IMAGE, nullable=False)

    # === Relationships ===
    addresses = relationship("Address", back_populates="user", order_by="Address.id")
    products = relationship("Product", back_populates="user")
    orders = relationship("Order", back_populates="user")

    def to_dict(self, include_addresses: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "profile_image_url": self.profile_image_url,
        }
        if include_addresses:
            data["address"] = [a.to_dict() for a in self.addresses if a.deleted_at is None]
        return data

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    def __repr__(self):
        return f"<User {self.email}>"
