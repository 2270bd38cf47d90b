"""
Infrastructure tests: log masking, storage selection and the Stripe gateway adapter.

Run with:
    pytest tests/infrastructure/test_infrastructure.py -v
"""

import logging
from unittest.mock import patch

import pytest
import stripe

from db import PostgresStorage, SQLiteStorage, create_storage, normalize_postgres_url
from exceptions.payment import GatewayChargeException
from services.payment_gateway import StripeGateway, to_cents
from utils.logging_config import SecretMaskingFilter


def masked(message, *args):
    record = logging.LogRecord("test", logging.INFO, __file__, 1, message, args, None)
    SecretMaskingFilter().filter(record)
    return record.getMessage()


class TestSecretMasking:

    def test_stripe_secret_key(self):
        assert "sk_live_" not in masked("using key sk_live_51HxYzAbCdEfGhIjKlMn")

    def test_client_secret_keeps_intent_id(self):
        result = masked("client secret seti_1AbC_secret_XyZ123")

        assert result == "client secret seti_1AbC_secret_[REDACTED]"

    def test_email_in_args(self):
        assert masked("Order for %s", "backer@example.com") == "Order for [REDACTED_EMAIL]"

    def test_database_password(self):
        result = masked("connecting to postgresql://shop:hunter2@db:5432/store")

        assert "hunter2" not in result

    def test_plain_message_untouched(self):
        assert masked("[BulkCharge] Order 12 charged $48.00") == "[BulkCharge] Order 12 charged $48.00"


class TestStorageSelection:

    @pytest.mark.parametrize("url,expected", [
        ("postgres://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql+asyncpg://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
    ])
    def test_normalize_postgres_url(self, url, expected):
        assert normalize_postgres_url(url) == expected

    def test_sqlite_backend(self):
        storage = create_storage("sqlite")

        assert isinstance(storage, SQLiteStorage)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_storage("mongodb")

    @pytest.mark.asyncio
    async def test_health_check(self, storage):
        assert await storage.health_check() is True

    def test_postgres_storage_uses_asyncpg(self):
        storage = PostgresStorage("postgres://u:p@localhost/store")

        assert storage.engine.url.drivername == "postgresql+asyncpg"


class TestStripeGateway:

    def test_to_cents(self):
        assert to_cents(48.0) == 4800
        assert to_cents(19.99) == 1999

    def test_requires_key(self):
        with pytest.raises(ValueError):
            StripeGateway(api_key="")

    @pytest.mark.asyncio
    async def test_off_session_charge_success(self):
        gateway = StripeGateway(api_key="sk_test_dummy", currency="usd")

        with patch("stripe.PaymentIntent.create", return_value={"id": "pi_ok", "status": "succeeded"}) as create:
            intent_id = await gateway.charge_off_session("cus_1", "pm_1", 57.5, {"orderId": 3},
                                                         idempotency_key="order-3-card_saved-0")

        assert intent_id == "pi_ok"
        kwargs = create.call_args.kwargs
        assert kwargs["amount"] == 5750
        assert kwargs["off_session"] is True
        assert kwargs["confirm"] is True
        assert kwargs["metadata"] == {"orderId": "3"}
        assert kwargs["idempotency_key"] == "order-3-card_saved-0"

    @pytest.mark.asyncio
    async def test_off_session_charge_declined(self):
        gateway = StripeGateway(api_key="sk_test_dummy")
        error = stripe.CardError("Your card was declined.", None, "card_declined")

        with patch("stripe.PaymentIntent.create", side_effect=error):
            with pytest.raises(GatewayChargeException) as exc_info:
                await gateway.charge_off_session("cus_1", "pm_1", 10.0, {})

        assert exc_info.value.code == "card_declined"
        assert "declined" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_authentication_required_is_a_failure(self):
        gateway = StripeGateway(api_key="sk_test_dummy")

        with patch("stripe.PaymentIntent.create", return_value={"id": "pi_3ds", "status": "requires_action"}):
            with pytest.raises(GatewayChargeException) as exc_info:
                await gateway.charge_off_session("cus_1", "pm_1", 10.0, {})

        assert exc_info.value.code == "requires_action"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
