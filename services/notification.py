import json
import logging

from sqlalchemy.ext.asyncio import AsyncSession

import config
from bot_instance import get_bot
from enums.email_type import EmailType
from exceptions.notification import NotificationException
from models.email_log import EmailLogDTO
from models.order import OrderDTO
from models.payment import BulkChargeSummaryDTO
from repositories.email_log import EmailLogRepository
from utils.email_client import EmailClient
from utils.html_escape import safe_html

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Customer emails and operator messages.

    Every method is fire-and-forget: delivery problems are logged (and recorded
    in email_logs) but never raised, so order state never depends on them.
    """

    @staticmethod
    def get_order_email(order: OrderDTO) -> str | None:
        if not order.shipping_address:
            return None
        try:
            address = json.loads(order.shipping_address)
        except (TypeError, ValueError):
            logger.warning(f"[Notification] Order {order.id} has an unreadable shipping address")
            return None
        return address.get("email") if isinstance(address, dict) else None

    @staticmethod
    def get_order_name(order: OrderDTO) -> str:
        try:
            address = json.loads(order.shipping_address or "{}")
        except (TypeError, ValueError):
            return "Backer"
        return (address.get("fullName") or address.get("name") or "Backer") if isinstance(address, dict) else "Backer"

    @staticmethod
    async def _send_email(to: str | None, subject: str, html: str, email_type: EmailType,
                          session: AsyncSession, user_id: int | None = None, order_id: int | None = None) -> bool:
        if not to:
            logger.warning(f"[Notification] No recipient for {email_type.value} email (order {order_id})")
            return False

        status, error_message = "sent", None
        try:
            await EmailClient().send(to, subject, html)
            logger.info(f"[Notification] {email_type.value} email sent for order {order_id}")
        except NotificationException as e:
            status, error_message = "failed", str(e)
            logger.error(f"[Notification] {e}")
        except Exception as e:
            status, error_message = "failed", str(e)
            logger.error(f"[Notification] Unexpected error sending {email_type.value} email: {e}", exc_info=True)

        try:
            await EmailLogRepository.create(EmailLogDTO(
                user_id=user_id,
                order_id=order_id,
                recipient=to,
                email_type=email_type.value,
                subject=subject,
                status=status,
                error_message=error_message,
            ), session)
        except Exception as e:
            logger.error(f"[Notification] Could not record email log: {e}")
            await session.rollback()
        return status == "sent"

    @staticmethod
    async def send_card_saved_confirmation(order: OrderDTO, session: AsyncSession) -> bool:
        subject = "Your card has been saved - Pre-order confirmed"
        html = (f"<p>Hi {safe_html(NotificationService.get_order_name(order))},</p>"
                f"<p>Your card has been securely saved for order #{order.id}. "
                f"You will be charged ${order.total:.2f} when your rewards are ready to ship.</p>"
                f"<p><a href=\"{config.APP_URL}\">View your pledge</a></p>")
        return await NotificationService._send_email(
            NotificationService.get_order_email(order), subject, html, EmailType.CARD_SAVED,
            session, user_id=order.user_id, order_id=order.id)

    @staticmethod
    async def send_payment_successful(order: OrderDTO, session: AsyncSession) -> bool:
        subject = f"Payment successful - Order #{order.id}"
        html = (f"<p>Hi {safe_html(NotificationService.get_order_name(order))},</p>"
                f"<p>We charged ${order.total:.2f} for order #{order.id}. Thank you for your support!</p>")
        return await NotificationService._send_email(
            NotificationService.get_order_email(order), subject, html, EmailType.PAYMENT_SUCCESSFUL,
            session, user_id=order.user_id, order_id=order.id)

    @staticmethod
    async def send_payment_failed(order: OrderDTO, error_message: str, error_code: str | None,
                                  session: AsyncSession) -> bool:
        subject = f"Action required: payment failed for order #{order.id}"
        html = (f"<p>Hi {safe_html(NotificationService.get_order_name(order))},</p>"
                f"<p>We could not charge ${order.total:.2f} to your saved card for order #{order.id}.</p>"
                f"<p>Reason: {safe_html(error_message)}{f' ({safe_html(error_code)})' if error_code else ''}</p>"
                f"<p><a href=\"{config.APP_URL}\">Update your payment method</a></p>")
        return await NotificationService._send_email(
            NotificationService.get_order_email(order), subject, html, EmailType.PAYMENT_FAILED,
            session, user_id=order.user_id, order_id=order.id)

    @staticmethod
    def format_bulk_charge_summary(summary: BulkChargeSummaryDTO) -> str:
        lines = [
            "Bulk charge completed",
            f"Orders processed: {summary.total}",
            f"Charged: {len(summary.charged)} (${summary.total_amount_charged:.2f})",
            f"Failed: {len(summary.failed)}",
        ]
        for failed in summary.failed:
            lines.append(f"  #{failed.order_id} ${failed.amount:.2f}: {failed.error}"
                         f"{f' [{failed.error_code}]' if failed.error_code else ''}")
        return "\n".join(lines)

    @staticmethod
    async def send_bulk_charge_summary(summary: BulkChargeSummaryDTO, session: AsyncSession) -> None:
        """Report a finished batch once: admin email plus Telegram admins when configured."""
        text = NotificationService.format_bulk_charge_summary(summary)
        if config.ADMIN_EMAIL:
            subject = f"Bulk charge summary: {len(summary.charged)} charged, {len(summary.failed)} failed"
            await NotificationService._send_email(config.ADMIN_EMAIL, subject, f"<pre>{safe_html(text)}</pre>",
                                                  EmailType.ADMIN_BULK_CHARGE_SUMMARY, session)
        await NotificationService.send_to_admins(text)

    @staticmethod
    async def send_to_admins(message: str) -> None:
        if not config.TOKEN or not config.ADMIN_ID_LIST:
            logger.debug("[Notification] Telegram operator channel not configured, skipping")
            return
        bot = get_bot()
        for admin_id in config.ADMIN_ID_LIST:
            try:
                await bot.send_message(admin_id, f"<pre>{safe_html(message)}</pre>")
            except Exception as e:
                logger.error(NotificationException("telegram", admin_id, str(e)))
