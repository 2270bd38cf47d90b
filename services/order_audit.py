import logging

from sqlalchemy.ext.asyncio import AsyncSession

from enums.payment_status import PaymentStatus
from models.order import OrderAnomalyDTO
from repositories.order import OrderRepository

logger = logging.getLogger(__name__)

PAID_STATUSES = {PaymentStatus.SUCCEEDED, PaymentStatus.CHARGED}


class OrderAuditService:
    """Read-only consistency checks over stored orders. Anomalies are logged and returned, never corrected."""

    @staticmethod
    async def find_anomalies(session: AsyncSession, tolerance: float = 0.01) -> list[OrderAnomalyDTO]:
        anomalies = []
        for order in await OrderRepository.get_all(session):
            if order.paid and order.payment_status not in PAID_STATUSES:
                anomalies.append(OrderAnomalyDTO(
                    order_id=order.id,
                    kind="paid_status_mismatch",
                    message=f"paid=1 but payment_status={order.payment_status.value}",
                ))

            expected = round((order.addons_subtotal or 0) + (order.shipping_cost or 0), 2)
            if abs(expected - (order.total or 0)) > tolerance:
                anomalies.append(OrderAnomalyDTO(
                    order_id=order.id,
                    kind="total_mismatch",
                    message=f"total {order.total:.2f} != subtotal + shipping {expected:.2f}",
                ))

            if order.stripe_payment_method_id and not order.stripe_customer_id:
                anomalies.append(OrderAnomalyDTO(
                    order_id=order.id,
                    kind="payment_method_without_customer",
                    message="payment method saved without a customer reference",
                ))

        for anomaly in anomalies:
            logger.warning(f"[OrderAudit] Order {anomaly.order_id}: {anomaly.message}")
        logger.info(f"[OrderAudit] {len(anomalies)} anomaly(ies) found")
        return anomalies
