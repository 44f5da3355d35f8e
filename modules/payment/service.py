"""
Payment Service
=================
One payment per order, charged through the configured gateway.
Active gateway is selected via the PAYMENT_GATEWAY setting.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.orm import Session

from config.database import transaction
from config.settings import PAYMENT_GATEWAY
from common.exceptions import (
    ValidationError, NotFoundError, DuplicateError, PaymentError,
    ServiceUnavailableError, InvalidTransitionError,
)
from common.helpers import to_money
from modules.order.models import Order, OrderStatus, apply_transition
from modules.payment.models import Payment, PaymentStatus

# Import gateway modules to trigger register_gateway() calls
from modules.payment.gateways import get_gateway, GatewayChargeRequest
import modules.payment.gateways.simulated  # noqa: F401

logger = logging.getLogger("blackbasket.payment")


class PaymentService:

    # ==========================================
    # 🔧 Gateway Selection
    # ==========================================

    def active_gateway(self):
        gateway = get_gateway(PAYMENT_GATEWAY)
        if not gateway:
            raise ServiceUnavailableError(f"Payment gateway '{PAYMENT_GATEWAY}' is not available")
        return gateway

    # ==========================================
    # 🏦 Charge (shared by checkout and direct payment)
    # ==========================================

    def charge_order(self, db: Session, order: Order, method: str) -> Payment:
        """
        Record a payment for a pending order, charge it and mark the order paid.
        Flush only: the caller's transaction decides the outcome.
        """
        payment = Payment(
            order_id=order.id,
            method=method or "",
            amount=order.total_price,
            status=PaymentStatus.PENDING.value,
        )
        db.add(payment)
        db.flush()

        gateway = self.active_gateway()
        result = gateway.charge(GatewayChargeRequest(
            amount=to_money(order.total_price),
            order_ref=str(order.id),
            method=payment.method,
            description=f"Order #{order.id}",
        ))
        if not result.success:
            logger.warning(f"Gateway '{gateway.name}' declined order #{order.id}: {result.error_message}")
            raise PaymentError(result.error_message or "Payment was declined")

        payment.gateway = gateway.name
        payment.reference = result.reference
        payment.status = PaymentStatus.COMPLETED.value
        apply_transition(order, OrderStatus.PAID.value)
        db.flush()
        return payment

    # ==========================================
    # 💳 Pay an existing order
    # ==========================================

    def create_payment(self, db: Session, user_id: int, order_id: int, amount, method: str) -> Payment:
        if not order_id:
            raise ValidationError("Order ID is required")
        try:
            amount = to_money(amount)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError("Invalid amount")
        if amount <= Decimal("0"):
            raise ValidationError("Amount must be greater than zero")

        with transaction(db):
            order = db.query(Order).filter(
                Order.id == order_id,
                Order.user_id == user_id,
            ).with_for_update().first()
            if not order:
                raise NotFoundError("Order not found")

            if db.query(Payment).filter(Payment.order_id == order.id).first():
                raise DuplicateError("Payment already exists for this order")
            if order.status != OrderStatus.PENDING.value:
                raise InvalidTransitionError(order.status, OrderStatus.PAID.value)
            if amount != to_money(order.total_price):
                raise ValidationError("Payment amount does not match order total")

            payment = self.charge_order(db, order, method)

        db.refresh(payment)
        logger.info(f"Payment #{payment.id} completed for order #{order_id} ({payment.amount})")
        return payment

    def get_by_order(self, db: Session, user_id: int, order_id: int) -> Payment:
        payment: Optional[Payment] = db.query(Payment).join(Order, Payment.order_id == Order.id).filter(
            Payment.order_id == order_id,
            Order.user_id == user_id,
        ).first()
        if not payment:
            raise NotFoundError("Payment not found")
        return payment


# Singleton
payment_service = PaymentService()
