from datetime import datetime

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from enums.payment_status import PaymentStatus
from exceptions.order import OrderNotFoundException, InvalidPaymentTransitionException
from models.order import Order, OrderDTO
from utils.payment_state_machine import PaymentStateMachine


class OrderRepository:

    @staticmethod
    async def create(order_dto: OrderDTO, session: AsyncSession) -> int:
        values = order_dto.model_dump(exclude_none=True)
        if order_dto.payment_status is not None:
            values["payment_status"] = order_dto.payment_status.value
        order = Order(**values)
        session.add(order)
        await session.flush()
        return order.id

    @staticmethod
    async def get_by_id(order_id: int, session: AsyncSession) -> OrderDTO | None:
        result = await session.execute(select(Order).where(Order.id == order_id))
        order = result.scalar_one_or_none()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_intent_id(intent_id: str, session: AsyncSession) -> OrderDTO | None:
        stmt = (select(Order)
                .where((Order.stripe_payment_intent_id == intent_id) | (Order.stripe_setup_intent_id == intent_id))
                .order_by(Order.id.desc())
                .limit(1))
        result = await session.execute(stmt)
        order = result.scalar_one_or_none()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_chargeable_ids(session: AsyncSession) -> list[int]:
        """
        Orders eligible for the autodebit batch: card saved, unpaid, with both
        Stripe references present. Oldest first.
        """
        stmt = (select(Order.id)
                .where(Order.payment_status == PaymentStatus.CARD_SAVED.value,
                       Order.paid.is_(False),
                       Order.stripe_customer_id.is_not(None),
                       Order.stripe_payment_method_id.is_not(None))
                .order_by(Order.id))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_all(session: AsyncSession) -> list[OrderDTO]:
        result = await session.execute(select(Order).order_by(Order.id))
        return [OrderDTO.model_validate(order, from_attributes=True) for order in result.scalars().all()]

    @staticmethod
    async def user_has_committed_order(user_id: int, session: AsyncSession) -> bool:
        """True if the user has a paid order or one with a saved card."""
        stmt = (select(func.count(Order.id))
                .where(Order.user_id == user_id,
                       Order.paid.is_(True) | (Order.payment_status == PaymentStatus.CARD_SAVED.value)))
        result = await session.execute(stmt)
        return (result.scalar() or 0) > 0

    @staticmethod
    async def count_completed(session: AsyncSession) -> int:
        result = await session.execute(select(func.count(Order.id)).where(Order.paid.is_(True)))
        return result.scalar() or 0

    @staticmethod
    async def count_pending(session: AsyncSession) -> int:
        result = await session.execute(select(func.count(Order.id)).where(Order.paid.is_(False)))
        return result.scalar() or 0

    @staticmethod
    async def get_revenue(session: AsyncSession) -> float:
        result = await session.execute(select(func.coalesce(func.sum(Order.total), 0)).where(Order.paid.is_(True)))
        return float(result.scalar() or 0)

    @staticmethod
    async def update_payment_status(order_id: int, target_status: PaymentStatus, session: AsyncSession,
                                    performer: str | None = None, **fields) -> None:
        """
        Move an order to target_status and set extra columns in the same UPDATE.

        Raises:
            OrderNotFoundException: no such order
            InvalidPaymentTransitionException: transition not allowed from the current status
        """
        result = await session.execute(select(Order.payment_status).where(Order.id == order_id))
        current = result.scalar_one_or_none()
        if current is None:
            raise OrderNotFoundException(order_id=order_id)

        current_status = PaymentStatus(current)
        if not PaymentStateMachine.validate_and_log_transition(order_id, current_status, target_status, performer):
            raise InvalidPaymentTransitionException(order_id, current_status.value, target_status.value)

        stmt = (update(Order)
                .where(Order.id == order_id)
                .values(payment_status=target_status.value, updated_at=datetime.utcnow(), **fields))
        await session.execute(stmt)

    @staticmethod
    async def mark_card_saved(order_id: int, customer_id: str | None, payment_method_id: str,
                              setup_intent_id: str | None, session: AsyncSession) -> None:
        fields = {"paid": False, "stripe_payment_method_id": payment_method_id,
                  "stripe_setup_intent_id": setup_intent_id}
        if customer_id:
            fields["stripe_customer_id"] = customer_id
        await OrderRepository.update_payment_status(order_id, PaymentStatus.CARD_SAVED, session,
                                                    performer="checkout", **fields)

    @staticmethod
    async def mark_succeeded(order_id: int, payment_intent_id: str, payment_method_id: str | None,
                             session: AsyncSession) -> None:
        fields = {"paid": True, "stripe_payment_intent_id": payment_intent_id, "completed_at": datetime.utcnow()}
        if payment_method_id:
            fields["stripe_payment_method_id"] = payment_method_id
        await OrderRepository.update_payment_status(order_id, PaymentStatus.SUCCEEDED, session,
                                                    performer="checkout", **fields)

    @staticmethod
    async def mark_charged(order_id: int, payment_intent_id: str, session: AsyncSession,
                           performer: str = "bulk-charge") -> None:
        await OrderRepository.update_payment_status(
            order_id, PaymentStatus.CHARGED, session, performer=performer,
            paid=True, stripe_payment_intent_id=payment_intent_id, completed_at=datetime.utcnow(),
            last_error_message=None, last_error_code=None,
        )

    @staticmethod
    async def mark_charge_failed(order_id: int, error_message: str, error_code: str | None,
                                 session: AsyncSession, performer: str = "bulk-charge") -> None:
        await OrderRepository.update_payment_status(
            order_id, PaymentStatus.CHARGE_FAILED, session, performer=performer,
            last_error_message=error_message, last_error_code=error_code,
        )
