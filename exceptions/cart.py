"""
Cart-related exceptions.
"""

from .base import StorefrontException


class CartException(StorefrontException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when trying to checkout with an empty cart."""

    def __init__(self, user_id: int | None = None):
        super().__init__(
            f"Cart is empty for user {user_id}" if user_id else "Cart is empty",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class PledgeRequiredException(CartException):
    """Raised when a cart holds add-ons only and the customer has no paid pledge."""

    def __init__(self):
        super().__init__(
            "You must have a pledge tier in your cart to checkout. Add-ons cannot be purchased alone."
        )


class MultiplePledgesException(CartException):
    """Raised when a cart holds more than one pledge."""

    def __init__(self, pledge_count: int):
        super().__init__(
            f"Only one pledge allowed per order, cart has {pledge_count}",
            details={'pledge_count': pledge_count}
        )
        self.pledge_count = pledge_count


class InvalidCartLineException(CartException):
    """Raised when a cart line cannot be parsed."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid cart line: {reason}",
            details={'reason': reason}
        )
        self.reason = reason
