"""
Order-related exceptions.
"""

from .base import StorefrontException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found."""

    def __init__(self, order_id: int | None = None, intent_id: str | None = None):
        if order_id:
            message = f"Order {order_id} not found"
        elif intent_id:
            message = f"Order for intent {intent_id} not found"
        else:
            message = "Order not found"
        super().__init__(message, details={'order_id': order_id, 'intent_id': intent_id})
        self.order_id = order_id
        self.intent_id = intent_id


class InvalidPaymentTransitionException(OrderException):
    """Raised when a payment status change is not allowed from the current status."""

    def __init__(self, order_id: int, current_status: str, target_status: str):
        super().__init__(
            f"Order {order_id} cannot move from {current_status} to {target_status}",
            details={'order_id': order_id, 'current_status': current_status, 'target_status': target_status}
        )
        self.order_id = order_id
        self.current_status = current_status
        self.target_status = target_status
