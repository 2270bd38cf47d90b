"""
Email Client

Thin async client for the Resend HTTP API.

Usage:
    from utils.email_client import EmailClient

    client = EmailClient()
    message_id = await client.send("backer@example.com", "Card saved", "<p>...</p>")
"""

import asyncio
import logging

import aiohttp

import config
from exceptions.notification import NotificationException

logger = logging.getLogger(__name__)


class EmailClient:

    def __init__(self, api_key: str | None = None, sender: str | None = None,
                 api_url: str | None = None, timeout_seconds: int = 15):
        self.api_key = api_key if api_key is not None else config.RESEND_API_KEY
        self.sender = sender if sender is not None else config.EMAIL_FROM
        self.api_url = api_url or config.RESEND_API_URL
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.sender)

    async def send(self, to: str, subject: str, html: str) -> str | None:
        """
        Send one email.

        Returns:
            Provider message id

        Raises:
            NotificationException: not configured, HTTP error or transport failure
        """
        if not self.is_configured:
            raise NotificationException("email", to, "email provider not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.api_url, json=payload, headers=headers) as response:
                    body = await response.json(content_type=None)
                    if response.status >= 400:
                        reason = (body or {}).get("message") if isinstance(body, dict) else None
                        raise NotificationException("email", to, f"HTTP {response.status}: {reason or 'unknown error'}")
                    message_id = (body or {}).get("id") if isinstance(body, dict) else None
                    logger.debug(f"[Email] Provider accepted message {message_id}")
                    return message_id
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NotificationException("email", to, f"transport error: {e}")
