"""
Cart Module - Service Layer
==============================
Cart management: get/create, add/update/remove items, clear, count, totals.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload, joinedload

from config.database import transaction
from common.exceptions import ValidationError, NotFoundError
from modules.cart.models import Cart, CartItem
from modules.catalog.models import Product
from modules.order.pricing import price_items

logger = logging.getLogger("blackbasket.cart")


class CartService:

    def _find_cart(self, db: Session, user_id: int) -> Optional[Cart]:
        return db.query(Cart).filter(Cart.user_id == user_id).first()

    def _require_cart(self, db: Session, user_id: int) -> Cart:
        cart = self._find_cart(db, user_id)
        if not cart:
            raise NotFoundError("Cart not found")
        return cart

    def _find_item(self, db: Session, cart_id: int, product_id: int) -> Optional[CartItem]:
        return db.query(CartItem).filter(
            CartItem.cart_id == cart_id,
            CartItem.product_id == product_id,
        ).first()

    def _require_item(self, db: Session, cart: Cart, product_id: int) -> CartItem:
        item = self._find_item(db, cart.id, product_id)
        if not item:
            raise NotFoundError("Cart item not found")
        return item

    def get_or_create_cart(self, db: Session, user_id: int) -> Cart:
        """Get existing cart or create new one for user. Caller owns the commit."""
        cart = self._find_cart(db, user_id)
        if not cart:
            cart = Cart(user_id=user_id)
            db.add(cart)
            db.flush()
        return cart

    def get_cart(self, db: Session, user_id: int) -> Cart:
        """Cart with items, their products, images, category and seller loaded."""
        with transaction(db):
            cart = self.get_or_create_cart(db, user_id)
        return db.query(Cart).options(
            selectinload(Cart.items)
            .joinedload(CartItem.product)
            .options(
                selectinload(Product.images),
                joinedload(Product.category),
                joinedload(Product.user),
            ),
        ).filter(Cart.id == cart.id).first()

    def _upsert_line(self, db: Session, user_id: int, product_id: int, quantity: int) -> Tuple[CartItem, bool]:
        with transaction(db):
            cart = self.get_or_create_cart(db, user_id)
            # Serialise concurrent adds to the same cart
            db.query(Cart.id).filter(Cart.id == cart.id).with_for_update().first()
            item = self._find_item(db, cart.id, product_id)
            created = item is None
            if created:
                item = CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity)
                db.add(item)
                db.flush()
            else:
                item.quantity += quantity
        return item, created

    def add_item(self, db: Session, user_id: int, product_id: int, quantity: int) -> Tuple[CartItem, bool]:
        """
        Upsert a cart line: bump the quantity if the product is already there.
        A request that loses the race to insert the cart or the line retries
        once and lands on the increment path.
        Returns: (item, created)
        """
        if not product_id:
            raise ValidationError("Product ID is required")
        if quantity is None or quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        product = db.query(Product).filter(
            Product.id == product_id, Product.deleted_at.is_(None),
        ).first()
        if not product:
            raise NotFoundError("Product not found")

        try:
            item, created = self._upsert_line(db, user_id, product_id, quantity)
        except IntegrityError:
            logger.info(f"Concurrent add to cart for user #{user_id}, product #{product_id}; retrying")
            item, created = self._upsert_line(db, user_id, product_id, quantity)

        db.refresh(item)
        logger.debug(f"Cart #{item.cart_id}: product #{product_id} -> qty {item.quantity}")
        return item, created

    def update_item(self, db: Session, user_id: int, product_id: int, quantity: int) -> CartItem:
        """Set an existing line's quantity."""
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")

        cart = self._require_cart(db, user_id)
        item = self._require_item(db, cart, product_id)
        with transaction(db):
            item.quantity = quantity
        db.refresh(item)
        return item

    def remove_item(self, db: Session, user_id: int, product_id: int):
        cart = self._require_cart(db, user_id)
        item = self._require_item(db, cart, product_id)
        with transaction(db):
            db.delete(item)

    def clear_cart(self, db: Session, user_id: int):
        """Delete every line and the cart itself."""
        cart = self._require_cart(db, user_id)
        with transaction(db):
            db.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session="fetch")
            db.delete(cart)
        logger.info(f"Cart cleared for user #{user_id}")

    def count_items(self, db: Session, user_id: int) -> int:
        """Total quantity across all lines; 0 when there is no cart."""
        cart = self._find_cart(db, user_id)
        if not cart:
            return 0
        return db.query(
            func.coalesce(func.sum(CartItem.quantity), 0)
        ).filter(CartItem.cart_id == cart.id).scalar() or 0

    def get_cart_summary(self, db: Session, user_id: int) -> dict:
        """Priced view of the cart at current product prices."""
        cart = self._find_cart(db, user_id)
        items = list(cart.items) if cart else []
        subtotal, shipping, total = price_items(items)
        return {
            "cart": cart,
            "items": items,
            "subtotal": subtotal,
            "shipping": shipping,
            "total": total,
        }


# Singleton
cart_service = CartService()
