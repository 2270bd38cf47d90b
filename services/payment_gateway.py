"""
Payment Gateway

Stripe access for checkout (customers, SetupIntents, PaymentIntents) and for
off-session autodebit charges. The Stripe SDK is synchronous, every call runs
in the default thread pool so the event loop is never blocked.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from functools import partial

import stripe

import config
from exceptions.payment import GatewayChargeException
from models.payment import GatewayIntentDTO

logger = logging.getLogger(__name__)


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


class PaymentGateway(ABC):

    @abstractmethod
    async def create_customer(self, email: str | None, name: str | None, metadata: dict) -> str:
        ...

    @abstractmethod
    async def create_setup_intent(self, customer_id: str, metadata: dict) -> GatewayIntentDTO:
        ...

    @abstractmethod
    async def create_payment_intent(self, customer_id: str, amount: float, metadata: dict) -> GatewayIntentDTO:
        ...

    @abstractmethod
    async def retrieve_setup_intent(self, intent_id: str) -> GatewayIntentDTO:
        ...

    @abstractmethod
    async def retrieve_payment_intent(self, intent_id: str) -> GatewayIntentDTO:
        ...

    @abstractmethod
    async def charge_off_session(self, customer_id: str, payment_method_id: str, amount: float,
                                 metadata: dict, idempotency_key: str | None = None) -> str:
        """
        Create and confirm an off-session charge.

        Returns:
            Gateway transaction (PaymentIntent) id

        Raises:
            GatewayChargeException: declined, authentication required, API error
        """
        ...


class StripeGateway(PaymentGateway):

    def __init__(self, api_key: str | None = None, currency: str | None = None):
        self.api_key = api_key if api_key is not None else config.STRIPE_SECRET_KEY
        self.currency = currency or config.STRIPE_CURRENCY
        if not self.api_key:
            raise ValueError("STRIPE_SECRET_KEY is not configured")
        stripe.api_key = self.api_key

    @staticmethod
    async def _call(func, *args, **kwargs):
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    @staticmethod
    def _stringify(metadata: dict) -> dict:
        # Stripe metadata values must be strings
        return {key: str(value) for key, value in metadata.items() if value is not None}

    @staticmethod
    def _payment_method_id(intent) -> str | None:
        payment_method = intent.get("payment_method")
        if isinstance(payment_method, str) or payment_method is None:
            return payment_method
        return payment_method.get("id")

    async def create_customer(self, email: str | None, name: str | None, metadata: dict) -> str:
        customer = await self._call(stripe.Customer.create, email=email, name=name,
                                    metadata=self._stringify(metadata))
        logger.info(f"[Stripe] Customer created: {customer['id']}")
        return customer["id"]

    async def create_setup_intent(self, customer_id: str, metadata: dict) -> GatewayIntentDTO:
        intent = await self._call(
            stripe.SetupIntent.create,
            customer=customer_id,
            usage="off_session",
            payment_method_types=["card"],
            metadata=self._stringify(metadata),
        )
        logger.info(f"[Stripe] SetupIntent created: {intent['id']} (status {intent['status']})")
        return GatewayIntentDTO(id=intent["id"], client_secret=intent.get("client_secret"),
                                status=intent.get("status"), customer_id=customer_id)

    async def create_payment_intent(self, customer_id: str, amount: float, metadata: dict) -> GatewayIntentDTO:
        intent = await self._call(
            stripe.PaymentIntent.create,
            amount=to_cents(amount),
            currency=self.currency,
            customer=customer_id,
            setup_future_usage="off_session",
            capture_method="automatic",
            payment_method_types=["card"],
            metadata=self._stringify(metadata),
        )
        logger.info(f"[Stripe] PaymentIntent created: {intent['id']} ({to_cents(amount)} cents)")
        return GatewayIntentDTO(id=intent["id"], client_secret=intent.get("client_secret"),
                                status=intent.get("status"), customer_id=customer_id)

    async def retrieve_setup_intent(self, intent_id: str) -> GatewayIntentDTO:
        intent = await self._call(stripe.SetupIntent.retrieve, intent_id)
        return GatewayIntentDTO(id=intent["id"], status=intent.get("status"), customer_id=intent.get("customer"),
                                payment_method_id=self._payment_method_id(intent))

    async def retrieve_payment_intent(self, intent_id: str) -> GatewayIntentDTO:
        intent = await self._call(stripe.PaymentIntent.retrieve, intent_id)
        return GatewayIntentDTO(id=intent["id"], status=intent.get("status"), customer_id=intent.get("customer"),
                                payment_method_id=self._payment_method_id(intent))

    async def charge_off_session(self, customer_id: str, payment_method_id: str, amount: float,
                                 metadata: dict, idempotency_key: str | None = None) -> str:
        try:
            intent = await self._call(
                stripe.PaymentIntent.create,
                amount=to_cents(amount),
                currency=self.currency,
                customer=customer_id,
                payment_method=payment_method_id,
                off_session=True,
                confirm=True,
                metadata=self._stringify(metadata),
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as e:
            message = getattr(e, "user_message", None) or str(e)
            code = getattr(e, "code", None)
            logger.warning(f"[Stripe] Off-session charge failed: {message} (code {code})")
            raise GatewayChargeException(message, code=code)

        if intent.get("status") != "succeeded":
            # requires_action etc.: the cardholder has to authenticate, not charged
            raise GatewayChargeException(f"Payment not completed (status {intent.get('status')})",
                                         code=intent.get("status"))
        return intent["id"]
