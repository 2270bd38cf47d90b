"""
Custom exceptions for the pledge storefront.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── CartException
│   ├── EmptyCartException
│   ├── PledgeRequiredException
│   ├── MultiplePledgesException
│   └── InvalidCartLineException
├── ItemException
│   └── ItemNotFoundException
├── PaymentException
│   ├── PriceMismatchException
│   ├── GatewayChargeException
│   ├── MissingPaymentMethodException
│   └── PaymentAlreadyProcessedException
├── OrderException
│   ├── OrderNotFoundException
│   └── InvalidPaymentTransitionException
├── UserException
│   └── UserNotFoundException
└── NotificationException

Usage:
------
Services raise specific exceptions:
    raise ItemNotFoundException(item_id="pledge-7")

Callers translate checkout-time failures with utils.error_handler:
    try:
        await CheckoutService.prepare(...)
    except StorefrontException as e:
        message = handle_service_error(e)

GatewayChargeException is caught inside the charge batch and recorded on the
order; NotificationException never leaves NotificationService.
"""

from .base import StorefrontException
from .cart import (
    CartException,
    EmptyCartException,
    PledgeRequiredException,
    MultiplePledgesException,
    InvalidCartLineException
)
from .item import ItemException, ItemNotFoundException
from .notification import NotificationException
from .order import OrderException, OrderNotFoundException, InvalidPaymentTransitionException
from .payment import (
    PaymentException,
    PriceMismatchException,
    GatewayChargeException,
    MissingPaymentMethodException,
    PaymentAlreadyProcessedException
)
from .user import UserException, UserNotFoundException

__all__ = [
    # Base
    'StorefrontException',

    # Cart
    'CartException',
    'EmptyCartException',
    'PledgeRequiredException',
    'MultiplePledgesException',
    'InvalidCartLineException',

    # Item
    'ItemException',
    'ItemNotFoundException',

    # Notification
    'NotificationException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InvalidPaymentTransitionException',

    # Payment
    'PaymentException',
    'PriceMismatchException',
    'GatewayChargeException',
    'MissingPaymentMethodException',
    'PaymentAlreadyProcessedException',

    # User
    'UserException',
    'UserNotFoundException',
]
