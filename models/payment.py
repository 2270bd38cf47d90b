from typing import Literal

from pydantic import BaseModel, Field, computed_field

from enums.order_type import OrderType
from enums.payment_strategy import PaymentStrategy
from enums.user_type import UserType
from models.shipping import ShippingAddressDTO


class PaymentDecisionDTO(BaseModel):
    strategy: PaymentStrategy
    order_type: OrderType
    user_type: UserType

    @property
    def charge_now(self) -> bool:
        return self.strategy == PaymentStrategy.CHARGE_NOW


class CheckoutRequestDTO(BaseModel):
    amount: float  # Client-computed grand total (subtotal + shipping)
    cart_items: list[dict] = Field(default_factory=list)
    shipping_address: ShippingAddressDTO


class CheckoutDTO(BaseModel):
    order_id: int
    customer_id: str
    intent_id: str
    client_secret: str | None = None
    intent_type: Literal["setup", "payment"]
    subtotal: float
    shipping_cost: float
    total: float
    decision: PaymentDecisionDTO


class ChargedOrderDTO(BaseModel):
    order_id: int
    email: str | None = None
    amount: float
    payment_intent_id: str


class FailedOrderDTO(BaseModel):
    order_id: int
    email: str | None = None
    amount: float
    error: str
    error_code: str | None = None


class BulkChargeSummaryDTO(BaseModel):
    charged: list[ChargedOrderDTO] = Field(default_factory=list)
    failed: list[FailedOrderDTO] = Field(default_factory=list)
    total: int = 0

    @computed_field
    @property
    def total_amount_charged(self) -> float:
        return round(sum(entry.amount for entry in self.charged), 2)


class PaymentStatsDTO(BaseModel):
    total_backers: int
    completed_orders: int
    total_revenue: float
    pending_orders: int


class GatewayIntentDTO(BaseModel):
    """Gateway-side SetupIntent / PaymentIntent snapshot."""
    id: str
    client_secret: str | None = None
    status: str | None = None
    customer_id: str | None = None
    payment_method_id: str | None = None
