"""
Error Handler Utility for checkout callers

Turns storefront exceptions into short, actionable customer messages. Internal
lookup details (ids, tables, gateway codes) stay in the logs.

Usage:
    from utils.error_handler import handle_service_error

    try:
        checkout = await CheckoutService.prepare(request, user, gateway, session)
    except StorefrontException as e:
        return {"error": handle_service_error(e)}
"""

import logging

from exceptions import (
    StorefrontException,
    EmptyCartException,
    PledgeRequiredException,
    MultiplePledgesException,
    InvalidCartLineException,
    ItemNotFoundException,
    PriceMismatchException,
    GatewayChargeException,
    MissingPaymentMethodException,
    PaymentAlreadyProcessedException,
    OrderNotFoundException,
    UserNotFoundException,
)

GENERIC_ERROR_MESSAGE = "Something went wrong, please try again later."

ERROR_MESSAGES = {
    # Cart
    EmptyCartException: "Your cart is empty.",
    PledgeRequiredException: "Pledge required: add-ons cannot be purchased alone.",
    MultiplePledgesException: "Only one pledge is allowed per order.",
    InvalidCartLineException: "Your cart contains an invalid item, please refresh and try again.",

    # Item
    ItemNotFoundException: "Item unavailable, please remove it from your cart.",

    # Payment
    PriceMismatchException: "Price changed, please retry.",
    GatewayChargeException: "Your card could not be charged: {message}",
    MissingPaymentMethodException: "No saved payment method for this order.",
    PaymentAlreadyProcessedException: "This order has already been charged.",

    # Order / user
    OrderNotFoundException: "Order not found.",
    UserNotFoundException: "Account not found.",
}


def handle_service_error(exception: StorefrontException) -> str:
    """
    Convert a service exception to a customer-facing message.

    Args:
        exception: The custom exception raised by a service

    Returns:
        Message string, generic text for unmapped exceptions
    """
    logging.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")

    template = ERROR_MESSAGES.get(type(exception))
    if template is None:
        logging.error(f"Unmapped exception type: {type(exception).__name__}")
        return GENERIC_ERROR_MESSAGE

    # Only gateway messages are customer-safe (Stripe user_message)
    return template.format(message=exception.message)


def handle_unexpected_error(exception: Exception) -> str:
    """
    Handle unexpected exceptions (non-StorefrontException).

    Logs the full traceback and returns the generic message.
    """
    logging.error(f"Unexpected error: {type(exception).__name__} - {str(exception)}", exc_info=True)
    return GENERIC_ERROR_MESSAGE
