"""
Catalog Module - Models
========================
Category, Product and ProductImage.
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Text
from sqlalchemy.orm import relationship
from config.database import Base, TimestampMixin
from common.helpers import money_float


# ==========================================
# 🗂️ Category
# ==========================================

class Category(TimestampMixin, Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)

    products = relationship("Product", back_populates="category")

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    def __repr__(self):
        return f"<Category {self.name}>"


# ==========================================
# 📦 Product
# ==========================================

class Product(TimestampMixin, Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(12, 2), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    # Relationships
    category = relationship("Category", back_populates="products")
    user = relationship("User", back_populates="products")
    images = relationship(
        "ProductImage",
        primaryjoin="and_(ProductImage.product_id == Product.id, ProductImage.deleted_at.is_(None))",
        order_by="ProductImage.id",
        viewonly=True,
    )

    def to_dict(self, include_owner: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": money_float(self.price),
            "category_id": self.category_id,
            "category": self.category.to_dict() if self.category else None,
            "user_id": self.user_id,
            "images": [img.to_dict() for img in self.images],
        }
        if include_owner and self.user:
            data["user"] = self.user.to_dict()
        return data

    def __repr__(self):
        return f"<Product {self.name} ({self.price})>"


class ProductImage(TimestampMixin, Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True)
    url = Column(Text, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    product = relationship("Product")

    def to_dict(self) -> dict:
        return {"id": self.id, "url": self.url, "product_id": self.product_id}
