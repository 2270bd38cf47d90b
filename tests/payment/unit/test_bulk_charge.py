"""
Unit Tests: BulkChargeService

Tests for services/bulk_charge.py covering:
- Batch charging with partial failures (failures isolated per order)
- Paid orders never charged twice
- Single order charge preconditions and retries
- Payment statistics

Uses in-memory SQLite database and a mocked payment gateway.

Run with:
    pytest tests/payment/unit/test_bulk_charge.py -v
"""

from unittest.mock import AsyncMock, patch

import pytest

from conftest import create_order
from enums.email_type import EmailType
from enums.payment_status import PaymentStatus
from exceptions.order import OrderNotFoundException
from exceptions.payment import (
    GatewayChargeException,
    MissingPaymentMethodException,
    PaymentAlreadyProcessedException,
)
from models.email_log import EmailLog
from models.payment import ChargedOrderDTO, FailedOrderDTO
from models.user import User
from repositories.email_log import EmailLogRepository
from repositories.order import OrderRepository
from services.bulk_charge import BulkChargeService
from services.payment_gateway import PaymentGateway


def make_gateway(declined_customers=(), crashing_customers=()):
    """Mocked gateway: declines / crashes for the given customer ids, succeeds otherwise."""
    gateway = AsyncMock(spec=PaymentGateway)

    async def charge(customer_id, payment_method_id, amount, metadata, idempotency_key=None):
        if customer_id in declined_customers:
            raise GatewayChargeException("Your card was declined.", code="card_declined")
        if customer_id in crashing_customers:
            raise RuntimeError("connection reset")
        return f"pi_{customer_id}"

    gateway.charge_off_session.side_effect = charge
    return gateway


async def seed_three_orders(storage):
    async with storage.session() as session:
        first = await create_order(session, stripe_customer_id="cus_1", total=48.0)
        second = await create_order(session, stripe_customer_id="cus_2", total=57.0,
                                    addons_subtotal=45.0, shipping_cost=12.0)
        third = await create_order(session, stripe_customer_id="cus_3", total=100.0,
                                   addons_subtotal=87.0, shipping_cost=13.0)
    return first, second, third


class TestBulkChargeRun:

    @pytest.mark.asyncio
    async def test_partial_failure(self, storage):
        """Order 2 declines: 2 charged, 1 failed, batch completes."""
        first, second, third = await seed_three_orders(storage)
        gateway = make_gateway(declined_customers={"cus_2"})

        summary = await BulkChargeService.run(storage, gateway)

        assert summary.total == 3
        assert [entry.order_id for entry in summary.charged] == [first, third]
        assert len(summary.failed) == 1
        assert summary.failed[0].order_id == second
        assert summary.failed[0].error_code == "card_declined"
        assert summary.failed[0].email == "backer@example.com"
        assert summary.total_amount_charged == 148.0

        async with storage.session() as session:
            charged = await OrderRepository.get_by_id(first, session)
            declined = await OrderRepository.get_by_id(second, session)

        assert charged.paid is True
        assert charged.payment_status == PaymentStatus.CHARGED
        assert charged.stripe_payment_intent_id == "pi_cus_1"
        assert charged.completed_at is not None
        assert declined.paid is False
        assert declined.payment_status == PaymentStatus.CHARGE_FAILED
        assert declined.last_error_code == "card_declined"
        assert declined.last_error_message == "Your card was declined."

    @pytest.mark.asyncio
    async def test_second_run_charges_nothing(self, storage):
        await seed_three_orders(storage)
        gateway = make_gateway(declined_customers={"cus_2"})
        await BulkChargeService.run(storage, gateway)
        gateway.charge_off_session.reset_mock()

        summary = await BulkChargeService.run(storage, gateway)

        assert summary.total == 0
        gateway.charge_off_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_only_chargeable_orders_selected(self, storage):
        async with storage.session() as session:
            chargeable = await create_order(session, stripe_customer_id="cus_ok")
            await create_order(session, stripe_customer_id="cus_paid", paid=True,
                               payment_status=PaymentStatus.CHARGED)
            await create_order(session, stripe_customer_id="cus_pending", payment_status=PaymentStatus.PENDING)
            await create_order(session, stripe_customer_id="cus_no_pm", stripe_payment_method_id=None)
        gateway = make_gateway()

        summary = await BulkChargeService.run(storage, gateway)

        assert [entry.order_id for entry in summary.charged] == [chargeable]
        gateway.charge_off_session.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_error_isolated(self, storage):
        first, second, third = await seed_three_orders(storage)
        gateway = make_gateway(crashing_customers={"cus_1"})

        summary = await BulkChargeService.run(storage, gateway)

        assert len(summary.charged) == 2
        assert summary.failed[0].order_id == first
        assert summary.failed[0].error_code == "internal_error"

        async with storage.session() as session:
            untouched = await OrderRepository.get_by_id(first, session)
        # Nothing recorded, the order stays chargeable
        assert untouched.payment_status == PaymentStatus.CARD_SAVED
        assert untouched.paid is False

    @pytest.mark.asyncio
    async def test_charge_arguments(self, storage):
        async with storage.session() as session:
            order_id = await create_order(session, stripe_customer_id="cus_a", stripe_payment_method_id="pm_a",
                                          total=57.5)
        gateway = make_gateway()

        await BulkChargeService.run(storage, gateway)

        args, kwargs = gateway.charge_off_session.call_args
        assert args[0] == "cus_a"
        assert args[1] == "pm_a"
        assert args[2] == 57.5
        assert args[3]["orderId"] == order_id
        assert args[3]["orderType"] == "bulk-charge-autodebit"
        assert kwargs["idempotency_key"].startswith(f"order-{order_id}-card_saved-")

    @pytest.mark.asyncio
    async def test_emails_recorded_per_order(self, storage):
        first, second, _ = await seed_three_orders(storage)
        gateway = make_gateway(declined_customers={"cus_2"})

        await BulkChargeService.run(storage, gateway)

        async with storage.session() as session:
            success_logs = await EmailLogRepository.get_by_order_id(first, session)
            failure_logs = await EmailLogRepository.get_by_order_id(second, session)
        assert [log.email_type for log in success_logs] == [EmailType.PAYMENT_SUCCESSFUL.value]
        assert [log.email_type for log in failure_logs] == [EmailType.PAYMENT_FAILED.value]
        # No provider configured in tests: failure recorded, order state unaffected
        assert success_logs[0].status == "failed"

    @pytest.mark.asyncio
    async def test_email_log_failure_does_not_fail_charged_order(self, storage):
        async with storage.session() as session:
            order_id = await create_order(session)

        async def broken_log(email_log_dto, session):
            # NOT NULL violation leaves the session needing a rollback
            session.add(EmailLog(recipient=None, email_type=email_log_dto.email_type, status="sent"))
            await session.flush()

        with patch("services.notification.EmailLogRepository.create", new=broken_log):
            summary = await BulkChargeService.run(storage, make_gateway())

        assert [charged.order_id for charged in summary.charged] == [order_id]
        assert summary.failed == []
        async with storage.session() as session:
            order = await OrderRepository.get_by_id(order_id, session)
        assert order.paid is True
        assert order.payment_status == PaymentStatus.CHARGED

    @pytest.mark.asyncio
    async def test_summary_reported_once(self, storage):
        await seed_three_orders(storage)
        gateway = make_gateway(declined_customers={"cus_2"})

        with patch("services.bulk_charge.NotificationService.send_bulk_charge_summary",
                   new_callable=AsyncMock) as send_summary:
            summary = await BulkChargeService.run(storage, gateway)

        send_summary.assert_awaited_once()
        assert send_summary.call_args.args[0] == summary

    @pytest.mark.asyncio
    async def test_summary_failure_does_not_fail_run(self, storage):
        await seed_three_orders(storage)
        gateway = make_gateway()

        with patch("services.bulk_charge.NotificationService.send_bulk_charge_summary",
                   new_callable=AsyncMock, side_effect=RuntimeError("smtp down")):
            summary = await BulkChargeService.run(storage, gateway)

        assert len(summary.charged) == 3


class TestChargeOrder:

    @pytest.mark.asyncio
    async def test_missing_order(self, storage):
        with pytest.raises(OrderNotFoundException):
            await BulkChargeService.charge_order(storage, make_gateway(), 999)

    @pytest.mark.asyncio
    async def test_already_paid(self, storage):
        async with storage.session() as session:
            order_id = await create_order(session, paid=True, payment_status=PaymentStatus.CHARGED)

        with pytest.raises(PaymentAlreadyProcessedException):
            await BulkChargeService.charge_order(storage, make_gateway(), order_id)

    @pytest.mark.asyncio
    async def test_missing_payment_method(self, storage):
        async with storage.session() as session:
            order_id = await create_order(session, stripe_payment_method_id=None)

        with pytest.raises(MissingPaymentMethodException):
            await BulkChargeService.charge_order(storage, make_gateway(), order_id)

    @pytest.mark.asyncio
    async def test_retry_failed_order(self, storage):
        async with storage.session() as session:
            order_id = await create_order(session, payment_status=PaymentStatus.CHARGE_FAILED,
                                          last_error_code="card_declined")

        result = await BulkChargeService.charge_order(storage, make_gateway(), order_id)

        assert isinstance(result, ChargedOrderDTO)
        async with storage.session() as session:
            order = await OrderRepository.get_by_id(order_id, session)
        assert order.payment_status == PaymentStatus.CHARGED
        assert order.last_error_code is None

    @pytest.mark.asyncio
    async def test_declined_single_charge(self, storage):
        async with storage.session() as session:
            order_id = await create_order(session, stripe_customer_id="cus_bad")

        result = await BulkChargeService.charge_order(storage, make_gateway(declined_customers={"cus_bad"}), order_id)

        assert isinstance(result, FailedOrderDTO)
        assert result.error_code == "card_declined"


class TestPaymentStats:

    @pytest.mark.asyncio
    async def test_stats(self, storage):
        async with storage.session() as session:
            session.add_all([
                User(email="a@example.com", backer_number=1, reward_title="Humble Vaanar", pledge_amount=35),
                User(email="b@example.com", pledged_status="dropped", backer_number=2),
                User(email="c@example.com"),
                User(email="d@example.com", pledge_amount=0.0, reward_title=""),
            ])
            await session.commit()
            await create_order(session, paid=True, payment_status=PaymentStatus.CHARGED, total=48.0)
            await create_order(session, paid=True, payment_status=PaymentStatus.SUCCEEDED, total=57.0)
            await create_order(session, total=20.0)

        async with storage.session() as session:
            stats = await BulkChargeService.get_stats(session)

        assert stats.total_backers == 2
        assert stats.completed_orders == 2
        assert stats.total_revenue == 105.0
        assert stats.pending_orders == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
