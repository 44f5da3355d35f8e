"""
Customer Module - Address Models
==================================
Address: saved shipping addresses; one may be flagged default.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship
from config.database import Base, TimestampMixin


class Address(TimestampMixin, Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    phone = Column(String(20), nullable=False, default="")
    address = Column(Text, nullable=False, default="")
    city = Column(String, nullable=False, default="")
    postal_code = Column(String(10), nullable=False, default="")
    is_default = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="addresses")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "postal_code": self.postal_code,
            "is_default": self.is_default,
        }

    def __repr__(self):
        return f"<Address #{self.id} user={self.user_id} default={self.is_default}>"
