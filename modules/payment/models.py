"""
Payment Module - Models
========================
One payment record per order.
"""

import enum
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from config.database import Base, TimestampMixin
from common.helpers import money_float, isoformat


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Payment(TimestampMixin, Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="RESTRICT"), unique=True, nullable=False)
    method = Column(String, nullable=False, default="")
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String, default=PaymentStatus.PENDING.value, nullable=False)
    gateway = Column(String, nullable=True)
    reference = Column(String, nullable=True)      # gateway ref number

    order = relationship("Order", back_populates="payment")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "method": self.method,
            "amount": money_float(self.amount),
            "status": self.status,
            "reference": self.reference,
            "created_at": isoformat(self.created_at),
        }
