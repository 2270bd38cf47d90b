from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, DateTime, String, Boolean, Text, func, CheckConstraint

from enums.payment_status import PaymentStatus
from models.base import Base


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, unique=True)
    # 0 is kept for legacy guest orders without a user row
    user_id = Column(Integer, nullable=False, default=0)

    # Snapshots (JSON)
    # new_addons: validated cart lines at checkout time
    # Format: [{"id": "pledge-1", "name": "Humble Vaanar", "price": 35.0, "quantity": 1, "subtotal": 35.0, ...}]
    new_addons = Column(Text, nullable=True)
    # shipping_address: {"fullName": ..., "email": ..., "addressLine1": ..., "city": ..., "country": ...}
    shipping_address = Column(Text, nullable=True)

    shipping_cost = Column(Float, nullable=False, default=0.0)
    addons_subtotal = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False)

    # Stripe references
    stripe_customer_id = Column(String, nullable=True)
    stripe_payment_method_id = Column(String, nullable=True)
    stripe_payment_intent_id = Column(String, nullable=True)  # pi_ (charge) or seti_ (setup) before a charge
    stripe_setup_intent_id = Column(String, nullable=True)

    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    # Independent gate: only paid=False orders are ever selected for charging
    paid = Column(Boolean, nullable=False, default=False)
    order_type = Column(String(40), nullable=True)
    user_type = Column(String(20), nullable=True)

    # Last gateway failure (charge_failed orders)
    last_error_message = Column(Text, nullable=True)
    last_error_code = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    completed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint('total >= 0', name='check_order_total_non_negative'),
        CheckConstraint('shipping_cost >= 0', name='check_order_shipping_cost_non_negative'),
    )


class OrderDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    new_addons: str | None = None
    shipping_address: str | None = None
    shipping_cost: float | None = None
    addons_subtotal: float | None = None
    total: float | None = None
    stripe_customer_id: str | None = None
    stripe_payment_method_id: str | None = None
    stripe_payment_intent_id: str | None = None
    stripe_setup_intent_id: str | None = None
    payment_status: PaymentStatus | None = None
    paid: bool | None = None
    order_type: str | None = None
    user_type: str | None = None
    last_error_message: str | None = None
    last_error_code: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None


class OrderAnomalyDTO(BaseModel):
    order_id: int
    kind: str  # 'paid_status_mismatch' | 'total_mismatch' | 'payment_method_without_customer'
    message: str
