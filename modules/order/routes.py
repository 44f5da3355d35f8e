"""
Order & Checkout Routes
=========================
Checkout preview/processing, direct order creation, history and status.

Endpoints:
  GET  /api/checkout                 Priced cart + resolved address
  POST /api/checkout                 Cart → paid order
  GET  /api/checkout/order/{id}      Order confirmation
  POST /api/orders                   Cart → pending order (no payment)
  GET  /api/orders                   Caller's orders, newest first
  GET  /api/orders/{id}              Order detail
  PUT  /api/orders/{id}/status       Status transition
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config.database import get_db
from common.helpers import money_float
from modules.auth.deps import require_login
from modules.user.models import User
from modules.order.service import order_service

router = APIRouter(prefix="/api", tags=["order"])


# ==========================================
# Schemas
# ==========================================

class ShippingAddress(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""


class CheckoutRequest(BaseModel):
    payment_method: str = ""
    shipping_address: Optional[ShippingAddress] = None


class OrderStatusRequest(BaseModel):
    status: str = ""


# ==========================================
# 🧾 Checkout
# ==========================================

@router.get("/checkout")
async def checkout_preview(
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    preview = order_service.checkout_preview(db, me.id)
    address = preview["address"]
    return {
        "cart_items": [item.to_dict() for item in preview["items"]],
        "subtotal": money_float(preview["subtotal"]),
        "shipping": money_float(preview["shipping"]),
        "total": money_float(preview["total"]),
        "address": address.to_dict() if address else None,
    }


@router.post("/checkout", status_code=201)
async def process_checkout(
    data: CheckoutRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    shipping = data.shipping_address.model_dump() if data.shipping_address else None
    order = order_service.process_checkout(db, me.id, data.payment_method, shipping)
    return JSONResponse({
        "message": "Order placed successfully",
        "order": order.to_dict(include_payment=True),
    }, status_code=201)


@router.get("/checkout/order/{order_id}")
async def checkout_order(
    order_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    return order_service.get_order(db, me.id, order_id).to_dict(include_payment=True)


# ==========================================
# 📦 Orders
# ==========================================

@router.post("/orders", status_code=201)
async def create_order(
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    order = order_service.create_order(db, me.id)
    return JSONResponse(order.to_dict(), status_code=201)


@router.get("/orders")
async def list_orders(
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    return [o.to_dict() for o in order_service.list_orders(db, me.id)]


@router.get("/orders/{order_id}")
async def order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    return order_service.get_order(db, me.id, order_id).to_dict(include_payment=True)


@router.put("/orders/{order_id}/status")
async def update_order_status(
    order_id: int,
    data: OrderStatusRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    order = order_service.update_status(db, me.id, order_id, data.status)
    return {
        "message": "Order status updated",
        "order": order.to_dict(include_payment=True),
    }
