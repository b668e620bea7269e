from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from arq.jobs import Job

from fee_ledger.core.config import settings

# Redis connection settings
redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)


class JobAlreadyQueuedError(RuntimeError):
    """arq refused a job whose id is queued, running or still holds a result."""


async def get_redis_pool() -> ArqRedis:
    """Get or create Redis pool for arq"""
    return await create_pool(redis_settings)


async def enqueue_task(task_name: str, *args: Any, **kwargs: Any) -> Job:
    """
    Enqueue a task to the arq worker.

    Args:
        task_name: Name of the task function
        *args: Positional arguments for the task
        **kwargs: Keyword arguments for the task, including arq's ``_job_id``

    Returns:
        Job object from arq

    Raises:
        JobAlreadyQueuedError: a job with the same ``_job_id`` exists
    """
    pool = await get_redis_pool()
    try:
        job = await pool.enqueue_job(task_name, *args, **kwargs)
        if job is None:
            raise JobAlreadyQueuedError(
                f"Task {task_name} ({kwargs.get('_job_id')}) is already queued"
            )
        return job
    finally:
        await pool.close()


def billing_cycle_job_id(year: int, month: int) -> str:
    return f"billing-cycle-{year:04d}-{month:02d}"


async def enqueue_billing_cycle(year: int, month: int, amount: str, description: str | None) -> Job:
    """Enqueue generation of one billing cycle; one queued job per period."""
    return await enqueue_task(
        "generate_billing_cycle_task",
        year=year,
        month=month,
        amount=amount,
        description=description,
        _job_id=billing_cycle_job_id(year, month),
    )
