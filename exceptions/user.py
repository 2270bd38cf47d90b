"""
User-related exceptions.
"""

from .base import StorefrontException


class UserException(StorefrontException):
    """Base exception for user-related errors."""
    pass


class UserNotFoundException(UserException):
    """Raised when user is not found."""

    def __init__(self, user_id: int | None = None, email: str | None = None):
        identifier = user_id if user_id is not None else email
        super().__init__(
            f"User {identifier} not found",
            details={'user_id': user_id, 'email': email}
        )
        self.user_id = user_id
        self.email = email
