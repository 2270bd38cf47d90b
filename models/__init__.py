"""
Models Package

This file ensures all SQLAlchemy models are imported and registered
on the shared metadata before tables are created.
"""

from models.base import Base
from models.product import Product
from models.addon import Addon
from models.user import User
from models.order import Order
from models.email_log import EmailLog

__all__ = [
    'Base',
    'Product',
    'Addon',
    'User',
    'Order',
    'EmailLog',
]
