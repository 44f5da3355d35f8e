"""
Order Module - Service Layer
===============================
Checkout, direct order creation, order history and status changes.
"""

import logging
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session, selectinload, joinedload

from config.database import transaction
from common.exceptions import ValidationError, NotFoundError, AuthorizationError
from modules.cart.models import Cart, CartItem
from modules.catalog.models import Product
from modules.customer.address_models import Address
from modules.customer.service import address_service, SHIPPING_FIELDS
from modules.order.models import Order, OrderItem, OrderStatus, apply_transition, parse_status
from modules.order.pricing import price_items
from modules.payment.service import payment_service

logger = logging.getLogger("blackbasket.order")


def build_order_item(cart_item: CartItem) -> OrderItem:
    """Create an OrderItem with the product's current unit price frozen in."""
    return OrderItem(
        product_id=cart_item.product_id,
        quantity=cart_item.quantity,
        price=cart_item.product.price,
    )


class OrderService:

    # ==========================================
    # Helpers
    # ==========================================

    def _lock_cart(self, db: Session, user_id: int) -> Cart:
        """
        Lock the user's cart row for the rest of the transaction.
        A second concurrent checkout waits here and then finds the cart empty.
        """
        cart = db.query(Cart).filter(Cart.user_id == user_id).with_for_update().first()
        if not cart:
            raise NotFoundError("Cart not found")
        if not cart.items:
            raise ValidationError("Cart is empty")
        return cart

    def _order_query(self, db: Session):
        return db.query(Order).options(
            selectinload(Order.items)
            .joinedload(OrderItem.product)
            .options(selectinload(Product.images), joinedload(Product.category)),
            joinedload(Order.address),
            joinedload(Order.payment),
        )

    def _place_order(self, db: Session, user_id: int, cart: Cart, address: Address) -> Order:
        """Write the order graph from the cart and empty it. Flush only."""
        subtotal, shipping, total = price_items(cart.items)

        order = Order(
            user_id=user_id,
            address_id=address.id,
            subtotal=subtotal,
            shipping_cost=shipping,
            total_price=total,
            status=OrderStatus.PENDING.value,
        )
        db.add(order)
        db.flush()  # get order.id

        for cart_item in cart.items:
            order_item = build_order_item(cart_item)
            order_item.order_id = order.id
            db.add(order_item)

        db.query(CartItem).filter(CartItem.cart_id == cart.id).delete(synchronize_session="fetch")
        db.flush()
        return order

    # ==========================================
    # Checkout
    # ==========================================

    def checkout_preview(self, db: Session, user_id: int) -> dict:
        cart = db.query(Cart).filter(Cart.user_id == user_id).first()
        if not cart:
            raise NotFoundError("Cart not found")
        if not cart.items:
            raise ValidationError("Cart is empty")

        subtotal, shipping, total = price_items(cart.items)
        return {
            "items": list(cart.items),
            "subtotal": subtotal,
            "shipping": shipping,
            "total": total,
            "address": address_service.resolve_shipping_address(db, user_id),
        }

    def process_checkout(
        self, db: Session, user_id: int, payment_method: str,
        shipping_address: Optional[dict] = None,
    ) -> Order:
        """
        Turn the cart into a paid order in one transaction:
        1. Lock the cart and require items
        2. Resolve (or save) the shipping address
        3. Write order + items at current prices, clear the cart
        4. Charge through the payment gateway and mark the order paid

        Any failure rolls back everything, leaving the cart intact.
        """
        if shipping_address is not None:
            missing = [f for f in SHIPPING_FIELDS if not (shipping_address.get(f) or "").strip()]
            if missing:
                raise ValidationError(f"Shipping address is incomplete: {', '.join(missing)}")

        with transaction(db):
            cart = self._lock_cart(db, user_id)

            if shipping_address is not None:
                address = address_service.add_address(db, user_id, shipping_address)
            else:
                address = address_service.resolve_shipping_address(db, user_id)
                if not address:
                    raise ValidationError("No shipping address found")

            order = self._place_order(db, user_id, cart, address)
            payment_service.charge_order(db, order, payment_method)
            order_id = order.id

        logger.info(f"Checkout complete: order #{order_id} for user #{user_id} (total {order.total_price})")
        return self.get_order(db, user_id, order_id)

    # ==========================================
    # Orders
    # ==========================================

    def create_order(self, db: Session, user_id: int) -> Order:
        """Place a pending order from the cart without taking payment."""
        with transaction(db):
            cart = self._lock_cart(db, user_id)
            address = address_service.resolve_shipping_address(db, user_id)
            if not address:
                raise ValidationError("No delivery address found")
            order = self._place_order(db, user_id, cart, address)
            order_id = order.id

        logger.info(f"Order #{order_id} created for user #{user_id}")
        return self.get_order(db, user_id, order_id)

    def list_orders(self, db: Session, user_id: int) -> List[Order]:
        return self._order_query(db).filter(
            Order.user_id == user_id,
        ).order_by(desc(Order.created_at), desc(Order.id)).all()

    def get_order(self, db: Session, user_id: int, order_id: int) -> Order:
        order = self._order_query(db).filter(
            Order.id == order_id,
            Order.user_id == user_id,
        ).first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _is_seller_of(self, db: Session, user_id: int, order_id: int) -> bool:
        return db.query(OrderItem.id).join(Product, OrderItem.product_id == Product.id).filter(
            OrderItem.order_id == order_id,
            Product.user_id == user_id,
        ).first() is not None

    def update_status(self, db: Session, user_id: int, order_id: int, new_status: str) -> Order:
        """Buyer or a seller in the order may move it along the state machine."""
        target = parse_status(new_status)

        with transaction(db):
            order = db.query(Order).filter(Order.id == order_id).with_for_update().first()
            if not order:
                raise NotFoundError("Order not found")
            if order.user_id != user_id and not self._is_seller_of(db, user_id, order.id):
                raise AuthorizationError("You are not allowed to update this order")
            previous = apply_transition(order, target.value)

        logger.info(f"Order #{order_id}: {previous} -> {target.value} by user #{user_id}")
        return self._order_query(db).filter(Order.id == order_id).first()


# Singleton
order_service = OrderService()
