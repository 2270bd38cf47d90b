"""
Payment-related exceptions.
"""

from .base import StorefrontException


class PaymentException(StorefrontException):
    """Base exception for payment-related errors."""
    pass


class PriceMismatchException(PaymentException):
    """Raised when the client total drifts from the server total beyond the tolerance."""

    def __init__(self, expected: float, submitted: float, tolerance: float = 0.01):
        super().__init__(
            f"Cart total does not match server calculation: expected {expected:.2f}, submitted {submitted:.2f}",
            details={'expected': expected, 'submitted': submitted, 'difference': round(abs(expected - submitted), 2),
                     'tolerance': tolerance}
        )
        self.expected = expected
        self.submitted = submitted
        self.tolerance = tolerance


class GatewayChargeException(PaymentException):
    """Typed failure returned by the payment gateway (declines, auth required, API errors)."""

    def __init__(self, message: str, code: str | None = None, order_id: int | None = None):
        super().__init__(
            message,
            details={'code': code, 'order_id': order_id}
        )
        self.code = code
        self.order_id = order_id


class MissingPaymentMethodException(PaymentException):
    """Raised when an order has no saved customer / payment method to charge."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} has no saved payment method",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class PaymentAlreadyProcessedException(PaymentException):
    """Raised when trying to charge an order that is already paid."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} already charged",
            details={'order_id': order_id}
        )
        self.order_id = order_id
