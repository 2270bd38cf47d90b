"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import json
import os
import sys

import pytest
import pytest_asyncio

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Set required environment variables before importing app modules
# These are required for config.py to load properly
os.environ.setdefault('RUNTIME_ENVIRONMENT', 'TEST')
os.environ.setdefault('DB_BACKEND', 'sqlite')
os.environ.setdefault('DB_NAME', ':memory:')
os.environ.setdefault('STRIPE_SECRET_KEY', 'sk_test_dummy_key_for_tests')
os.environ.setdefault('LOG_MASK_SECRETS', 'true')

import config  # noqa: E402
from db import SQLiteStorage  # noqa: E402
from enums.payment_status import PaymentStatus  # noqa: E402
from models.addon import Addon  # noqa: E402
from models.order import OrderDTO  # noqa: E402
from models.product import Product  # noqa: E402
from repositories.order import OrderRepository  # noqa: E402


# ============================================================================
# Offline notifications
# ============================================================================

@pytest.fixture(autouse=True)
def offline_notifications(monkeypatch):
    """No email provider and no Telegram channel: delivery fails fast and is only logged."""
    monkeypatch.setattr(config, "RESEND_API_KEY", "")
    monkeypatch.setattr(config, "EMAIL_FROM", "")
    monkeypatch.setattr(config, "ADMIN_EMAIL", "")
    monkeypatch.setattr(config, "TOKEN", "")
    monkeypatch.setattr(config, "ADMIN_ID_LIST", [])


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def storage():
    """In-memory SQLite storage with all tables created."""
    storage = SQLiteStorage(":memory:")
    await storage.create_tables()
    yield storage
    await storage.dispose()


@pytest_asyncio.fixture
async def test_session(storage):
    """Create test database session."""
    async with storage.session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def catalog(storage):
    """
    Seed catalog:

    products: 1 Humble Vaanar 45 / 35 backer, 2 Industrious Manushya 75 / 65 backer,
              3 Resplendent Garuda (inactive)
    addons:   1 Lorebook 25 / 20 backer, 2 Built Environments Art Book 30 (no backer price),
              5 Collector Edition 40 (shipping category hardcover)
    """
    async with storage.session() as session:
        session.add_all([
            Product(id=1, name="Humble Vaanar", price=45.0, backer_price=35.0, active=True),
            Product(id=2, name="Industrious Manushya", price=75.0, backer_price=65.0, active=True),
            Product(id=3, name="Resplendent Garuda", price=150.0, backer_price=120.0, active=False),
            Addon(id=1, name="Lorebook", price=25.0, backer_price=20.0, active=True),
            Addon(id=2, name="Built Environments Art Book", price=30.0, active=True),
            Addon(id=5, name="Collector Edition", price=40.0, active=True, shipping_category="hardcover"),
        ])
        await session.commit()


# ============================================================================
# Order helpers
# ============================================================================

def shipping_address_json(email: str = "backer@example.com", name: str = "Test Backer",
                          country: str = "Germany") -> str:
    return json.dumps({"fullName": name, "email": email, "country": country})


async def create_order(session, **overrides) -> int:
    """Insert an order row with a saved card, ready for autodebit unless overridden."""
    values = dict(
        user_id=1,
        shipping_address=shipping_address_json(),
        shipping_cost=13.0,
        addons_subtotal=35.0,
        total=48.0,
        stripe_customer_id="cus_test",
        stripe_payment_method_id="pm_test",
        stripe_setup_intent_id="seti_test",
        payment_status=PaymentStatus.CARD_SAVED,
        paid=False,
        order_type="pre-order-autodebit",
        user_type="backer",
    )
    values.update(overrides)
    order_id = await OrderRepository.create(OrderDTO(**values), session)
    await session.commit()
    return order_id
