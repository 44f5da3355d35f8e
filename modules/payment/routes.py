"""
Payment Routes
================
Pay a pending order and look up an order's payment.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_login
from modules.user.models import User
from modules.payment.service import payment_service

router = APIRouter(prefix="/api/payments", tags=["payment"])


class PaymentRequest(BaseModel):
    order_id: int = 0
    amount: Decimal = Decimal("0")
    method: str = ""


@router.post("", status_code=201)
async def create_payment(
    data: PaymentRequest,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    payment = payment_service.create_payment(db, me.id, data.order_id, data.amount, data.method)
    return JSONResponse({
        "message": "Payment successful",
        "payment": payment.to_dict(),
    }, status_code=201)


@router.get("/{order_id}")
async def get_payment(
    order_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_login),
):
    return payment_service.get_by_order(db, me.id, order_id).to_dict()
