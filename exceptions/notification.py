"""
Notification exceptions.

Never propagated past NotificationService: delivery problems are logged and
must not change order state.
"""

from .base import StorefrontException


class NotificationException(StorefrontException):
    """Raised when an email or operator message cannot be delivered."""

    def __init__(self, channel: str, recipient: str | int | None, reason: str):
        super().__init__(
            f"{channel} notification to {recipient} failed: {reason}",
            details={'channel': channel, 'recipient': recipient, 'reason': reason}
        )
        self.channel = channel
        self.recipient = recipient
        self.reason = reason
