"""
Catalog item exceptions.
"""

from .base import StorefrontException


class ItemException(StorefrontException):
    """Base exception for catalog item errors."""
    pass


class ItemNotFoundException(ItemException):
    """Raised when a cart line references no active catalog row."""

    def __init__(self, item_id=None, source: str | None = None):
        super().__init__(
            f"Item {item_id} not found in database",
            details={'item_id': item_id, 'source': source}
        )
        self.item_id = item_id
        self.source = source
