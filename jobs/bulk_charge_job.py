"""Bulk Charge Job

Off-session autodebit of every order with a saved card:
- Opens the configured storage backend (SQLite or PostgreSQL)
- Charges each chargeable order once through Stripe
- Reports the batch summary to the admin email and Telegram admins

Also exposes the order consistency audit so both can run from cron:

    python -m jobs.bulk_charge_job            # charge all saved cards
    python -m jobs.bulk_charge_job --order 42 # charge (or retry) one order
    python -m jobs.bulk_charge_job --audit    # report stored anomalies only
"""

import argparse
import asyncio
import logging

from bot_instance import close_bot
from db import create_storage
from exceptions import StorefrontException
from models.order import OrderAnomalyDTO
from models.payment import BulkChargeSummaryDTO, ChargedOrderDTO, FailedOrderDTO
from services.bulk_charge import BulkChargeService
from services.order_audit import OrderAuditService
from services.payment_gateway import StripeGateway
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def run_bulk_charge_job() -> BulkChargeSummaryDTO:
    """Charge every saved card that has not been paid yet.

    Returns:
        Batch summary
    """
    storage = create_storage()
    try:
        await storage.create_tables()
        gateway = StripeGateway()
        logger.info("[Bulk Charge Job] Starting bulk charge run...")
        summary = await BulkChargeService.run(storage, gateway)
        logger.info(f"[Bulk Charge Job] ✅ Done: {len(summary.charged)}/{summary.total} charged, "
                    f"${summary.total_amount_charged:.2f} collected")
        return summary
    finally:
        await storage.dispose()
        await close_bot()


async def run_single_charge_job(order_id: int) -> ChargedOrderDTO | FailedOrderDTO:
    """Charge one order on operator request."""
    storage = create_storage()
    try:
        gateway = StripeGateway()
        result = await BulkChargeService.charge_order(storage, gateway, order_id)
        if isinstance(result, ChargedOrderDTO):
            logger.info(f"[Bulk Charge Job] ✅ Order {order_id} charged ({result.payment_intent_id})")
        else:
            logger.warning(f"[Bulk Charge Job] ❌ Order {order_id} failed: {result.error}")
        return result
    finally:
        await storage.dispose()
        await close_bot()


async def run_order_audit_job() -> list[OrderAnomalyDTO]:
    """Log and return inconsistent order rows."""
    storage = create_storage()
    try:
        async with storage.session() as session:
            return await OrderAuditService.find_anomalies(session)
    finally:
        await storage.dispose()


def main():
    parser = argparse.ArgumentParser(description="Autodebit saved cards")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--order", type=int, help="charge a single order id")
    group.add_argument("--audit", action="store_true", help="only report order anomalies")
    args = parser.parse_args()

    setup_logging()
    try:
        if args.audit:
            asyncio.run(run_order_audit_job())
        elif args.order is not None:
            asyncio.run(run_single_charge_job(args.order))
        else:
            asyncio.run(run_bulk_charge_job())
    except StorefrontException as e:
        logger.error(f"[Bulk Charge Job] {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
