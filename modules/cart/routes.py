"""
Cart Routes
=============
Cart view, count, add/update/remove items and clear.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_login
from modules.user.models import User
from modules.cart.service import cart_service

router = APIRouter(prefix="/api/cart", tags=["cart"])


# ==========================================
# Schemas
# ==========================================

class CartItemRequest(BaseModel):
    product_id: int = 0
    quantity: int = 1


# ==========================================
# 🛒 View Cart
# ==========================================

@router.get("")
async def view_cart(
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    return cart_service.get_cart(db, me.id).to_dict()


@router.get("/count")
async def cart_count(
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    return {"count": cart_service.count_items(db, me.id)}


# ==========================================
# ➕➖ Update Cart
# ==========================================

@router.post("")
async def add_to_cart(
    data: CartItemRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    item, created = cart_service.add_item(db, me.id, data.product_id, data.quantity)
    return JSONResponse(item.to_dict(), status_code=201 if created else 200)


@router.put("")
async def update_cart_item(
    data: CartItemRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    item = cart_service.update_item(db, me.id, data.product_id, data.quantity)
    return item.to_dict()


@router.delete("/item/{product_id}")
async def remove_cart_item(
    product_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    cart_service.remove_item(db, me.id, product_id)
    return {"message": "Item removed from cart"}


@router.delete("", status_code=204)
async def clear_cart(
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    cart_service.clear_cart(db, me.id)
    return Response(status_code=204)
