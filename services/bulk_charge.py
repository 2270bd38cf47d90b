import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import Storage
from enums.order_type import OrderType
from enums.payment_status import PaymentStatus
from exceptions.order import OrderNotFoundException
from exceptions.payment import (
    GatewayChargeException,
    MissingPaymentMethodException,
    PaymentAlreadyProcessedException,
)
from models.order import OrderDTO
from models.payment import BulkChargeSummaryDTO, ChargedOrderDTO, FailedOrderDTO, PaymentStatsDTO
from repositories.order import OrderRepository
from repositories.user import UserRepository
from services.notification import NotificationService
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


class BulkChargeService:
    """Off-session autodebit of saved cards."""

    @staticmethod
    def idempotency_key(order: OrderDTO) -> str:
        """
        Stable for one charge attempt of one order.

        The key only changes when the order row changes, so re-running after a
        crash between gateway success and the database update replays the same
        gateway request instead of charging twice.
        """
        stamp = order.updated_at or order.created_at
        version = int(stamp.timestamp()) if stamp else 0
        return f"order-{order.id}-{order.payment_status.value}-{version}"

    @staticmethod
    async def run(storage: Storage, gateway: PaymentGateway) -> BulkChargeSummaryDTO:
        """
        Charge every order with a saved card that has not been paid yet.

        Orders are processed one at a time, each in its own session. A failure on
        one order (gateway decline or anything unexpected) is recorded and the
        batch moves on. The summary is reported once at the end.

        Returns:
            BulkChargeSummaryDTO {charged, failed, total, total_amount_charged}
        """
        async with storage.session() as session:
            order_ids = await OrderRepository.get_chargeable_ids(session)

        logger.info(f"[BulkCharge] Starting run over {len(order_ids)} order(s)")
        summary = BulkChargeSummaryDTO(total=len(order_ids))

        for order_id in order_ids:
            try:
                async with storage.session() as session:
                    order = await OrderRepository.get_by_id(order_id, session)
                    if order is None or order.paid:
                        # Paid or removed since selection
                        logger.info(f"[BulkCharge] Order {order_id} no longer chargeable, skipping")
                        continue
                    result = await BulkChargeService._charge(order, gateway, session,
                                                             OrderType.BULK_CHARGE_AUTODEBIT, "bulk-charge")
            except Exception as e:
                logger.error(f"[BulkCharge] Order {order_id} could not be processed: {e}", exc_info=True)
                result = FailedOrderDTO(order_id=order_id, amount=0.0, error=str(e), error_code="internal_error")

            if isinstance(result, ChargedOrderDTO):
                summary.charged.append(result)
            else:
                summary.failed.append(result)

        logger.info(f"[BulkCharge] Finished: {len(summary.charged)} charged "
                    f"(${summary.total_amount_charged:.2f}), {len(summary.failed)} failed")

        try:
            async with storage.session() as session:
                await NotificationService.send_bulk_charge_summary(summary, session)
                await session.commit()
        except Exception as e:
            logger.error(f"[BulkCharge] Could not report summary: {e}")

        return summary

    @staticmethod
    async def charge_order(storage: Storage, gateway: PaymentGateway, order_id: int) -> ChargedOrderDTO | FailedOrderDTO:
        """
        Charge a single order on operator request (also retries charge_failed orders).

        Raises:
            OrderNotFoundException: no such order
            PaymentAlreadyProcessedException: order already paid
            MissingPaymentMethodException: no saved customer / payment method
        """
        async with storage.session() as session:
            order = await OrderRepository.get_by_id(order_id, session)
            if order is None:
                raise OrderNotFoundException(order_id=order_id)
            if order.paid:
                raise PaymentAlreadyProcessedException(order_id)
            if not order.stripe_customer_id or not order.stripe_payment_method_id:
                raise MissingPaymentMethodException(order_id)
            return await BulkChargeService._charge(order, gateway, session,
                                                   OrderType.SINGLE_CHARGE_AUTODEBIT, "admin")

    @staticmethod
    async def _charge(order: OrderDTO, gateway: PaymentGateway, session: AsyncSession,
                      order_type: OrderType, performer: str) -> ChargedOrderDTO | FailedOrderDTO:
        email = NotificationService.get_order_email(order)
        metadata = {
            "orderId": order.id,
            "userId": order.user_id,
            "orderType": order_type.value,
            "customerEmail": email,
        }

        try:
            payment_intent_id = await gateway.charge_off_session(
                order.stripe_customer_id,
                order.stripe_payment_method_id,
                order.total,
                metadata,
                idempotency_key=BulkChargeService.idempotency_key(order),
            )
        except GatewayChargeException as e:
            logger.warning(f"[BulkCharge] Order {order.id} charge failed: {e.message} (code {e.code})")
            await OrderRepository.mark_charge_failed(order.id, e.message, e.code, session, performer=performer)
            await session.commit()
            await NotificationService.send_payment_failed(order, e.message, e.code, session)
            await session.commit()
            return FailedOrderDTO(order_id=order.id, email=email, amount=order.total,
                                  error=e.message, error_code=e.code)

        await OrderRepository.mark_charged(order.id, payment_intent_id, session, performer=performer)
        await session.commit()
        logger.info(f"[BulkCharge] Order {order.id} charged ${order.total:.2f} ({payment_intent_id})")

        charged_order = order.model_copy(update={"paid": True, "payment_status": PaymentStatus.CHARGED,
                                                 "stripe_payment_intent_id": payment_intent_id})
        await NotificationService.send_payment_successful(charged_order, session)
        await session.commit()
        return ChargedOrderDTO(order_id=order.id, email=email, amount=order.total,
                               payment_intent_id=payment_intent_id)

    @staticmethod
    async def get_stats(session: AsyncSession) -> PaymentStatsDTO:
        return PaymentStatsDTO(
            total_backers=await UserRepository.count_backers(session),
            completed_orders=await OrderRepository.count_completed(session),
            total_revenue=round(await OrderRepository.get_revenue(session), 2),
            pending_orders=await OrderRepository.count_pending(session),
        )
