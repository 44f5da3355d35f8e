"""
Catalog Module - Service Layer
================================
Business logic for Categories, Products and their images.
Image rows are managed together through ImageManager.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from config.database import transaction
from config.settings import MAX_PRODUCT_IMAGES
from common.exceptions import (
    ValidationError, NotFoundError, AuthorizationError, DuplicateError,
)
from common.helpers import now_utc, to_money
from common.images import validate_image_payloads
from modules.cart.models import CartItem
from modules.catalog.models import Category, Product, ProductImage

logger = logging.getLogger("blackbasket.catalog")

MIN_PRICE = Decimal("0.01")


# ==========================================
# Image Manager
# ==========================================

class ImageManager:
    """Adds and retires ProductImage rows. Callers own the commit."""

    @staticmethod
    def save_images(db: Session, product_id: int, urls: List[str]) -> int:
        for url in urls:
            db.add(ProductImage(url=url, product_id=product_id))
        if urls:
            db.flush()
        return len(urls)

    @staticmethod
    def retire_images(db: Session, product_id: int) -> int:
        """Soft-delete every live image of a product. Returns the number retired."""
        return db.query(ProductImage).filter(
            ProductImage.product_id == product_id,
            ProductImage.deleted_at.is_(None),
        ).update({"deleted_at": now_utc()}, synchronize_session="fetch")


# Singleton
images = ImageManager()


# ==========================================
# Category Service
# ==========================================

class CategoryService:

    def list_categories(self, db: Session) -> List[Category]:
        return db.query(Category).filter(
            Category.deleted_at.is_(None),
        ).order_by(Category.id.asc()).all()

    def create_category(self, db: Session, name: str) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")

        if db.query(Category).filter(Category.name == name).first():
            raise DuplicateError("Category already exists")

        category = Category(name=name)
        try:
            with transaction(db):
                db.add(category)
        except IntegrityError:
            raise DuplicateError("Category already exists")
        db.refresh(category)
        logger.info(f"Category created: {category.name} (#{category.id})")
        return category


# ==========================================
# Product Service
# ==========================================

class ProductService:

    def _live(self, db: Session):
        return db.query(Product).options(
            joinedload(Product.category),
            joinedload(Product.user),
            selectinload(Product.images),
        ).filter(Product.deleted_at.is_(None))

    def list_all(self, db: Session) -> List[Product]:
        return self._live(db).order_by(Product.id.desc()).all()

    def list_by_owner(self, db: Session, owner_id: int) -> List[Product]:
        return self._live(db).filter(Product.user_id == owner_id).order_by(Product.id.desc()).all()

    def get_by_id(self, db: Session, product_id: int) -> Product:
        product = self._live(db).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    def _get_owned(self, db: Session, owner_id: int, product_id: int) -> Product:
        product = self.get_by_id(db, product_id)
        if product.user_id != owner_id:
            raise AuthorizationError("You are not the owner of this product")
        return product

    def _validate(self, db: Session, data: dict) -> dict:
        """Normalise and check create/update input. Returns clean fields."""
        name = (data.get("name") or "").strip()
        description = (data.get("description") or "").strip()
        if not name or not description:
            raise ValidationError("Name and description are required")

        try:
            price = to_money(data.get("price"))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError("Invalid price")
        if price < MIN_PRICE:
            raise ValidationError("Price must be at least 0.01")

        category_id = data.get("category_id")
        category = None
        if category_id:
            category = db.query(Category).filter(
                Category.id == category_id, Category.deleted_at.is_(None),
            ).first()
        if not category:
            raise ValidationError("Invalid category ID")

        urls = list(data.get("images") or [])
        if not urls:
            raise ValidationError("At least one image is required")
        if len(urls) > MAX_PRODUCT_IMAGES:
            raise ValidationError(f"A product can have at most {MAX_PRODUCT_IMAGES} images")
        validate_image_payloads(urls)

        return {
            "name": name,
            "description": description,
            "price": price,
            "category_id": category.id,
            "images": urls,
        }

    def create(self, db: Session, owner_id: int, data: dict) -> Product:
        fields = self._validate(db, data)
        urls = fields.pop("images")

        with transaction(db):
            product = Product(user_id=owner_id, **fields)
            db.add(product)
            db.flush()
            images.save_images(db, product.id, urls)

        logger.info(f"Product #{product.id} created by user #{owner_id} with {len(urls)} image(s)")
        db.expire(product)
        return self.get_by_id(db, product.id)

    def update(self, db: Session, owner_id: int, product_id: int, data: dict) -> Product:
        """Replace fields and the full image set of an owned product."""
        product = self._get_owned(db, owner_id, product_id)
        fields = self._validate(db, data)
        urls = fields.pop("images")

        with transaction(db):
            for key, value in fields.items():
                setattr(product, key, value)
            retired = images.retire_images(db, product.id)
            images.save_images(db, product.id, urls)

        logger.info(
            f"Product #{product.id} updated by user #{owner_id}: "
            f"{retired} image(s) replaced with {len(urls)}"
        )
        db.expire(product)
        return self.get_by_id(db, product.id)

    def delete(self, db: Session, owner_id: int, product_id: int) -> dict:
        """
        Remove a product from sale in one unit of work:
        cart lines pointing at it are hard-deleted (every cart), its images and
        the product itself are soft-deleted. Order items keep their reference.
        """
        product = self._get_owned(db, owner_id, product_id)

        with transaction(db):
            cart_items_removed = db.query(CartItem).filter(
                CartItem.product_id == product.id,
            ).delete(synchronize_session="fetch")
            images_removed = images.retire_images(db, product.id)
            product.deleted_at = now_utc()

        logger.info(
            f"Product #{product_id} deleted by user #{owner_id}: "
            f"{cart_items_removed} cart item(s), {images_removed} image(s) removed"
        )
        return {
            "product_id": product_id,
            "cart_items_removed": cart_items_removed,
            "images_removed": images_removed,
        }


# Singletons
category_service = CategoryService()
product_service = ProductService()
