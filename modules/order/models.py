"""
Order Module - Models
======================
Order with per-item price snapshot and an explicit status state machine.
"""

import enum
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from config.database import Base, TimestampMixin
from common.exceptions import ValidationError, InvalidTransitionError
from common.helpers import money_float, isoformat


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Legal moves; delivered and cancelled are terminal.
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus((value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid order status: {value}")


def can_transition(current: str, requested: str) -> bool:
    return OrderStatus(requested) in ALLOWED_TRANSITIONS[OrderStatus(current)]


def apply_transition(order: "Order", requested: str) -> str:
    """Move an order to `requested` or raise. Returns the previous status."""
    target = parse_status(requested)
    previous = order.status
    if not can_transition(previous, target.value):
        raise InvalidTransitionError(previous, target.value)
    order.status = target.value
    return previous


class Order(TimestampMixin, Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    address_id = Column(Integer, ForeignKey("addresses.id", ondelete="RESTRICT"), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    shipping_cost = Column(Numeric(12, 2), default=0, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    status = Column(String, default=OrderStatus.PENDING.value, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="orders")
    address = relationship("Address")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id")
    payment = relationship("Payment", back_populates="order", uselist=False)

    def to_dict(self, include_payment: bool = False) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "status": self.status,
            "subtotal": money_float(self.subtotal),
            "shipping": money_float(self.shipping_cost),
            "total_price": money_float(self.total_price),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
            "items": [item.to_dict() for item in self.items],
            "address": self.address.to_dict() if self.address else None,
        }
        if include_payment:
            data["payment"] = self.payment.to_dict() if self.payment else None
        return data

    def __repr__(self):
        return f"<Order #{self.id} {self.status} {self.total_price}>"


class OrderItem(TimestampMixin, Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Integer, nullable=False)

    # Unit price snapshot at time of purchase
    price = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    @property
    def line_total(self):
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": money_float(self.price),
            "line_total": money_float(self.line_total),
            "product": self.product.to_dict(include_owner=False) if self.product else None,
        }
