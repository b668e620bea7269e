import logging
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from arq import cron

from fee_ledger.core.cancellation import CancellationToken
from fee_ledger.core.config import settings
from fee_ledger.core.database import SessionLocal
from fee_ledger.core.errors import OperationCancelledError
from fee_ledger.services.billing_cycle import BillingCycleGenerator
from fee_ledger.services.billing_period import BillingPeriod
from fee_ledger.services.notifier import get_notifier
from fee_ledger.services.overdue_sweeper import OverdueSweeper
from fee_ledger.services.student_directory import get_student_directory
from fee_ledger.tasks import redis_settings

logger = logging.getLogger(__name__)


async def sweep_overdue_invoices_task(ctx: dict[str, Any]) -> int:
    """Background task: move unpaid invoices past their due date to overdue.

    Runs daily. Safe to run twice; a retried run transitions nothing new.
    """
    db = SessionLocal()
    try:
        sweeper = OverdueSweeper(db, notifier=get_notifier())
        token = CancellationToken.with_timeout(settings.BATCH_TIMEOUT_SECONDS)
        try:
            result = sweeper.sweep(cancel_token=token)
        except OperationCancelledError as exc:
            logger.warning(
                "Overdue sweep hit its deadline after %d transitions",
                exc.result.transitioned_count,
            )
            return int(exc.result.transitioned_count)

        if result.transitioned_count > 0:
            logger.info("Marked %d invoices overdue", result.transitioned_count)
        for failure in result.failed:
            logger.warning("Overdue sweep failed for %s: %s", failure.entity_ref, failure.reason)
        return result.transitioned_count
    finally:
        db.close()


async def generate_billing_cycle_task(
    ctx: dict[str, Any],
    year: int | None = None,
    month: int | None = None,
    amount: str | None = None,
    description: str | None = None,
) -> int:
    """Background task: bill every active student for a period.

    Runs monthly on the 1st for the current period using the configured
    cycle amount; can also be enqueued for an explicit period.

    Returns:
        Number of invoices created.
    """
    cycle_amount = Decimal(amount) if amount is not None else settings.BILLING_CYCLE_AMOUNT
    if cycle_amount <= 0:
        logger.info("No billing cycle amount configured, skipping cycle generation")
        return 0

    now = datetime.now(UTC)
    period = BillingPeriod(year or now.year, month or now.month)

    db = SessionLocal()
    try:
        generator = BillingCycleGenerator(db, get_student_directory())
        token = CancellationToken.with_timeout(settings.BATCH_TIMEOUT_SECONDS)
        try:
            result = generator.generate_cycle(
                period,
                cycle_amount,
                description or settings.BILLING_CYCLE_DESCRIPTION,
                cancel_token=token,
            )
        except OperationCancelledError as exc:
            logger.warning(
                "Billing cycle %s hit its deadline after %d invoices",
                period,
                exc.result.created_count,
            )
            return int(exc.result.created_count)

        if result.created_count > 0:
            logger.info("Generated %d invoices for %s", result.created_count, period)
        for failure in result.failed:
            logger.warning(
                "Billing cycle %s failed for student %s: %s",
                period,
                failure.entity_ref,
                failure.reason,
            )
        return result.created_count
    finally:
        db.close()


class WorkerSettings:
    functions = [
        sweep_overdue_invoices_task,
        generate_billing_cycle_task,
    ]
    cron_jobs = [
        cron(sweep_overdue_invoices_task, hour=1, minute=0),  # daily at 01:00
        cron(generate_billing_cycle_task, day=1, hour=0, minute=0),  # monthly on the 1st
    ]
    redis_settings = redis_settings
